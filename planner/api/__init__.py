# API module exports
from planner.api import categories, do_today, health, sections, tasks, views
from planner.api.base import api_router

__all__ = ["categories", "do_today", "health", "sections", "tasks", "views", "api_router"]
