from datetime import date
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from planner.services import PlannerService

from .deps import get_planner
from .responses import unwrap

router = APIRouter(prefix="/api/do-today", tags=["do-today"])


class ToggleRequest(BaseModel):
    task_id: str
    day: date


class ToggleAllRequest(BaseModel):
    task_ids: List[str]
    day: date


class DoTodayState(BaseModel):
    excluded: bool


@router.post("/toggle", response_model=DoTodayState)
async def toggle_do_today(request: ToggleRequest, planner: PlannerService = Depends(get_planner)):
    """Switch one task off (or back on) for one day"""
    return {"excluded": unwrap(await planner.toggle_do_today(request.task_id, request.day))}


@router.post("/toggle-all", response_model=DoTodayState)
async def toggle_all_do_today(request: ToggleAllRequest, planner: PlannerService = Depends(get_planner)):
    """Switch every listed task to the same state for one day"""
    return {"excluded": unwrap(await planner.toggle_all_do_today(request.task_ids, request.day))}


@router.get("/{task_id}", response_model=DoTodayState)
async def get_do_today_state(task_id: str, day: date, planner: PlannerService = Depends(get_planner)):
    return {"excluded": unwrap(planner.is_do_today_off(task_id, day))}
