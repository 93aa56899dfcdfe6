from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from planner.core.ordering import SectionReorderPlan
from planner.models.section import Section, SectionBase, SectionUpdate
from planner.models.task import Task
from planner.services import PlannerService

from .deps import get_planner
from .responses import unwrap

router = APIRouter(prefix="/api/sections", tags=["sections"])


class SectionReorderRequest(BaseModel):
    active_id: str
    over_id: Optional[str] = None
    is_moving_forward: bool = False


class FocusModeRequest(BaseModel):
    include_in_focus_mode: bool


class SectionResponse(BaseModel):
    section: Section


class SectionListResponse(BaseModel):
    sections: List[Section]
    count: int


class SectionDeleteResponse(BaseModel):
    success: bool
    moved_task_ids: List[str]


class CompletedTasksResponse(BaseModel):
    tasks: List[Task]
    count: int


@router.get("", response_model=SectionListResponse)
async def list_sections(planner: PlannerService = Depends(get_planner)):
    """Sections in list order"""
    sections = planner.engine.ordered_sections()
    return {"sections": sections, "count": len(sections)}


@router.post("", response_model=SectionResponse, status_code=201)
async def create_section(request: SectionBase, planner: PlannerService = Depends(get_planner)):
    return {"section": unwrap(await planner.create_section(request))}


@router.patch("/{section_id}", response_model=SectionResponse)
async def update_section(section_id: str, request: SectionUpdate, planner: PlannerService = Depends(get_planner)):
    return {"section": unwrap(await planner.update_section(section_id, request))}


@router.put("/{section_id}/focus-mode", response_model=SectionResponse)
async def set_focus_mode(section_id: str, request: FocusModeRequest, planner: PlannerService = Depends(get_planner)):
    """Include the section in Focus Mode or leave it out"""
    result = await planner.set_section_focus_mode(section_id, request.include_in_focus_mode)
    return {"section": unwrap(result)}


@router.delete("/{section_id}", response_model=SectionDeleteResponse)
async def delete_section(section_id: str, planner: PlannerService = Depends(get_planner)):
    """Delete a section; its tasks move to the no-section bucket"""
    moved = unwrap(await planner.delete_section(section_id))
    return {"success": True, "moved_task_ids": moved}


@router.post("/reorder", response_model=SectionReorderPlan)
async def reorder_sections(request: SectionReorderRequest, planner: PlannerService = Depends(get_planner)):
    return unwrap(await planner.reorder_sections(request.active_id, request.over_id, request.is_moving_forward))


@router.post("/{section_id}/complete", response_model=CompletedTasksResponse)
async def complete_section(
    section_id: str,
    day: Optional[date] = None,
    planner: PlannerService = Depends(get_planner),
):
    """Mark every open task of the section (or "no-section") completed"""
    tasks = unwrap(await planner.mark_section_completed(section_id, day))
    return {"tasks": tasks, "count": len(tasks)}
