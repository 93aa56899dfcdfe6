from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from planner.core.ordering import ReorderPlan
from planner.models.task import Task, TaskBase, TaskPrefill, TaskUpdate
from planner.services import PlannerService

from .deps import get_planner
from .responses import unwrap

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


# Request/Response models
class CreateTaskRequest(TaskBase):
    original_task_id: Optional[str] = None


class ReorderRequest(BaseModel):
    active_id: str
    new_parent_id: Optional[str] = None
    new_section_id: Optional[str] = None
    over_id: Optional[str] = None
    is_moving_forward: bool = False


class BulkUpdateRequest(BaseModel):
    task_ids: List[str]
    updates: TaskUpdate


class BulkDeleteRequest(BaseModel):
    task_ids: List[str]


class SuggestRequest(BaseModel):
    text: str
    day: Optional[date] = None


class TaskResponse(BaseModel):
    task: Task


class TaskListResponse(BaseModel):
    tasks: List[Task]
    count: int


class DeleteResponse(BaseModel):
    success: bool
    deleted_ids: List[str]


class SuggestResponse(BaseModel):
    prefill: Optional[TaskPrefill] = None


def _task_list(tasks: List[Task]) -> dict:
    return {"tasks": tasks, "count": len(tasks)}


@router.get("", response_model=TaskListResponse)
async def list_tasks(planner: PlannerService = Depends(get_planner)):
    """All stored tasks of the user, recurring templates included, in render order"""
    return _task_list(unwrap(planner.list_tasks()))


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, planner: PlannerService = Depends(get_planner)):
    """Get a single task by ID (recurring occurrence ids included)"""
    return {"task": unwrap(planner.get_task(task_id))}


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(request: CreateTaskRequest, planner: PlannerService = Depends(get_planner)):
    """Create a new task at the end of its list"""
    return {"task": unwrap(await planner.create_task(request))}


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(task_id: str, request: TaskUpdate, planner: PlannerService = Depends(get_planner)):
    """Update a task; recurring occurrences are saved on their first update"""
    return {"task": unwrap(await planner.update_task(task_id, request))}


@router.delete("/{task_id}", response_model=DeleteResponse)
async def delete_task(task_id: str, planner: PlannerService = Depends(get_planner)):
    """Delete a task and all of its subtasks"""
    deleted = unwrap(await planner.delete_task(task_id))
    return {"success": True, "deleted_ids": deleted}


@router.post("/reorder", response_model=ReorderPlan)
async def reorder_task(request: ReorderRequest, planner: PlannerService = Depends(get_planner)):
    """Commit a drag: move a task to a new parent, section and position"""
    return unwrap(await planner.reorder(
        request.active_id,
        request.new_parent_id,
        request.new_section_id,
        request.over_id,
        request.is_moving_forward,
    ))


@router.post("/bulk-update", response_model=TaskListResponse)
async def bulk_update_tasks(request: BulkUpdateRequest, planner: PlannerService = Depends(get_planner)):
    return _task_list(unwrap(await planner.bulk_update_tasks(request.task_ids, request.updates)))


@router.post("/bulk-delete", response_model=DeleteResponse)
async def bulk_delete_tasks(request: BulkDeleteRequest, planner: PlannerService = Depends(get_planner)):
    deleted = unwrap(await planner.bulk_delete_tasks(request.task_ids))
    return {"success": True, "deleted_ids": deleted}


@router.post("/archive-completed", response_model=TaskListResponse)
async def archive_completed_tasks(planner: PlannerService = Depends(get_planner)):
    """Archive every completed task"""
    return _task_list(unwrap(await planner.archive_all_completed()))


@router.post("/suggest", response_model=SuggestResponse)
async def suggest_task(request: SuggestRequest, planner: PlannerService = Depends(get_planner)):
    """AI pre-fill for the add-task form; nothing is created"""
    return {"prefill": unwrap(await planner.suggest_task(request.text, request.day))}
