"""Planner services"""
from .persistence import Persister, WriteBatch
from .planner_service import PlannerService

__all__ = [
    "Persister",
    "WriteBatch",
    "PlannerService",
]
