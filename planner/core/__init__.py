"""Pure planning core: ordering, recurrence, Do Today, projection and focus"""
from .arena import TaskArena, sort_siblings
from .do_today import DoTodayFilter
from .drag import DragSession, DropIndicator, DropTarget
from .errors import (
    CommitInProgressError,
    CycleError,
    NotFoundError,
    PersistenceError,
    PlannerError,
    ValidationError,
)
from .focus import DailyProgress, FocusSelector
from .ordering import OrderingEngine, ReorderPlan, SectionReorderPlan
from .projector import SectionGroup, TaskFilters, TaskNode, ViewMode, ViewProjector
from .recurrence import RecurrenceExpander
from .result import ErrorInfo, Result

__all__ = [
    "TaskArena",
    "sort_siblings",
    "DoTodayFilter",
    "DragSession",
    "DropIndicator",
    "DropTarget",
    "PlannerError",
    "ValidationError",
    "CycleError",
    "NotFoundError",
    "PersistenceError",
    "CommitInProgressError",
    "DailyProgress",
    "FocusSelector",
    "OrderingEngine",
    "ReorderPlan",
    "SectionReorderPlan",
    "SectionGroup",
    "TaskFilters",
    "TaskNode",
    "ViewMode",
    "ViewProjector",
    "RecurrenceExpander",
    "ErrorInfo",
    "Result",
]
