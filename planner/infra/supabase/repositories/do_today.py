"""Do Today off-log repository"""
import logging
from typing import List

from supabase import Client  # type: ignore

from planner.models.do_today import DoTodayOffEntry

logger = logging.getLogger(__name__)


class DoTodayRepository:
    """Rows of ``do_today_off_log``, one per task switched off for one day"""

    def __init__(self, client: Client):
        self._client = client
        self._table_name = "do_today_off_log"

    async def list_for_user(self, user_id: str) -> List[DoTodayOffEntry]:
        response = (
            self._client.table(self._table_name)
            .select("*")
            .eq("user_id", user_id)
            .order("off_date", desc=True)
            .execute()
        )
        return [DoTodayOffEntry(**item) for item in response.data]

    async def add(self, entry: DoTodayOffEntry) -> bool:
        row = entry.model_dump(mode='json', exclude={"id"})
        try:
            response = (
                self._client.table(self._table_name)
                .upsert(row, on_conflict="user_id,task_id,off_date")
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to switch task {entry.task_id} off for {entry.off_date}: {e}")
            return False
        return bool(response.data)

    async def remove(self, entry: DoTodayOffEntry) -> bool:
        try:
            (
                self._client.table(self._table_name)
                .delete()
                .eq("user_id", entry.user_id)
                .eq("task_id", entry.task_id)
                .eq("off_date", entry.off_date.isoformat())
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to switch task {entry.task_id} back on for {entry.off_date}: {e}")
            return False
        # Removing a row that is already gone leaves the log in the wanted state
        return True
