from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from planner.core.focus import DailyProgress
from planner.core.projector import TaskFilters
from planner.models.task import Task
from planner.services import PlannerService

from .deps import get_planner
from .responses import unwrap

router = APIRouter(prefix="/api/views", tags=["views"])


class TaskListResponse(BaseModel):
    tasks: List[Task]
    count: int


class NextTaskResponse(BaseModel):
    task: Optional[Task] = None


class FocusRequest(BaseModel):
    day: date
    filters: Optional[TaskFilters] = None
    focus_mode_only: bool = False
    focused_task_id: Optional[str] = None


class UpcomingRequest(FocusRequest):
    n: int = 5


def _task_list(tasks: List[Task]) -> dict:
    return {"tasks": tasks, "count": len(tasks)}


@router.post("/tasks", response_model=TaskListResponse)
async def project_tasks(filters: TaskFilters, planner: PlannerService = Depends(get_planner)):
    """Tasks of one page (daily, archive, focus or all) after filtering"""
    return _task_list(unwrap(planner.project(filters)))


@router.get("/date/{day}", response_model=TaskListResponse)
async def tasks_for_date(day: date, planner: PlannerService = Depends(get_planner)):
    """Unfiltered task set of one day, recurring occurrences included"""
    return _task_list(planner.tasks_for_date(day))


@router.post("/next", response_model=NextTaskResponse)
async def next_available(request: FocusRequest, planner: PlannerService = Depends(get_planner)):
    """The current Focus Mode task"""
    result = planner.next_available(
        request.day, request.filters, request.focus_mode_only, request.focused_task_id
    )
    return {"task": unwrap(result)}


@router.post("/upcoming", response_model=TaskListResponse)
async def upcoming(request: UpcomingRequest, planner: PlannerService = Depends(get_planner)):
    """Tasks queued after the current Focus Mode task"""
    result = planner.upcoming(
        request.day, request.n, request.filters, request.focus_mode_only, request.focused_task_id
    )
    return _task_list(unwrap(result))


@router.get("/progress", response_model=DailyProgress)
async def daily_progress(day: date, planner: PlannerService = Depends(get_planner)):
    return unwrap(planner.daily_progress(day))
