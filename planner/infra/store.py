"""Store contract consumed by the planner service"""
from typing import List, Optional, Protocol, TypeVar

from pydantic import BaseModel

from planner.models.do_today import DoTodayOffEntry

T = TypeVar("T", bound=BaseModel)


class RecordStore(Protocol[T]):
    """
    Single-record CRUD over one table.

    Writes report success or failure only; there are no transactions beyond
    a single record.
    """

    async def get(self, id: str) -> Optional[T]: ...

    async def put(self, record: T) -> bool: ...

    async def delete(self, id: str) -> bool: ...

    async def list_for_user(self, user_id: str) -> List[T]: ...


class DoTodayStore(Protocol):
    """Rows of the per-day Do Today off log"""

    async def add(self, entry: DoTodayOffEntry) -> bool: ...

    async def remove(self, entry: DoTodayOffEntry) -> bool: ...

    async def list_for_user(self, user_id: str) -> List[DoTodayOffEntry]: ...
