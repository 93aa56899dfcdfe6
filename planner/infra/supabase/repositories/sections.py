"""Task section repository"""
from typing import List

from supabase import Client  # type: ignore

from planner.models.section import Section

from .base import BaseRepository


class SectionRepository(BaseRepository[Section]):
    """Repository for task sections"""

    def __init__(self, client: Client):
        super().__init__(client, "task_sections", Section)

    async def list_for_user(self, user_id: str) -> List[Section]:
        response = (
            self._client.table(self._table_name)
            .select("*")
            .eq("user_id", user_id)
            .order("order", desc=False)
            .execute()
        )
        return self._to_models(response.data)
