from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from planner.models.category import Category, CategoryBase, CategoryUpdate
from planner.services import PlannerService

from .deps import get_planner
from .responses import unwrap

router = APIRouter(prefix="/api/categories", tags=["categories"])


class CategoryResponse(BaseModel):
    category: Category


class CategoryListResponse(BaseModel):
    categories: List[Category]
    count: int


class CategoryDeleteResponse(BaseModel):
    success: bool
    cleared_task_ids: List[str]


@router.get("", response_model=CategoryListResponse)
async def list_categories(planner: PlannerService = Depends(get_planner)):
    categories = sorted(planner.categories.values(), key=lambda c: (c.created_at, c.id))
    return {"categories": categories, "count": len(categories)}


@router.post("", response_model=CategoryResponse, status_code=201)
async def create_category(request: CategoryBase, planner: PlannerService = Depends(get_planner)):
    return {"category": unwrap(await planner.create_category(request))}


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(category_id: str, request: CategoryUpdate, planner: PlannerService = Depends(get_planner)):
    return {"category": unwrap(await planner.update_category(category_id, request))}


@router.delete("/{category_id}", response_model=CategoryDeleteResponse)
async def delete_category(category_id: str, planner: PlannerService = Depends(get_planner)):
    """Delete a category; tasks using it keep existing without a category"""
    cleared = unwrap(await planner.delete_category(category_id))
    return {"success": True, "cleared_task_ids": cleared}
