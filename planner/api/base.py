from fastapi import APIRouter
from planner.api import categories, do_today, health, sections, tasks, views

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(tasks.router)
api_router.include_router(sections.router)
api_router.include_router(categories.router)
api_router.include_router(do_today.router)
api_router.include_router(views.router)
api_router.include_router(health.router)
