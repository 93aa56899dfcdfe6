"""Task category repository"""
from supabase import Client  # type: ignore

from planner.models.category import Category

from .base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """Repository for task categories"""

    def __init__(self, client: Client):
        super().__init__(client, "task_categories", Category)
