"""Task repository"""
from typing import List

from supabase import Client  # type: ignore

from planner.models.task import Task

from .base import BaseRepository


class TaskRepository(BaseRepository[Task]):
    """Repository for task operations"""

    def __init__(self, client: Client):
        super().__init__(client, "tasks", Task)

    async def list_for_user(self, user_id: str) -> List[Task]:
        """All tasks of a user, in stored order"""
        response = (
            self._client.table(self._table_name)
            .select("*")
            .eq("user_id", user_id)
            .order("order", desc=False)
            .order("created_at", desc=False)
            .execute()
        )
        return self._to_models(response.data)
