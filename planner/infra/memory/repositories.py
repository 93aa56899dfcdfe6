"""Dict-backed repositories for demo mode and tests"""
from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

from planner.models.category import Category
from planner.models.do_today import DoTodayOffEntry
from planner.models.section import Section
from planner.models.task import Task

T = TypeVar("T", bound=BaseModel)


class InMemoryRepository(Generic[T]):
    """Same contract as the Supabase repositories, kept in a dict"""

    def __init__(self, records: Optional[List[T]] = None):
        self.records: Dict[str, T] = {r.id: r for r in records or []}

    async def get(self, id: str) -> Optional[T]:
        return self.records.get(id)

    async def put(self, record: T) -> bool:
        self.records[record.id] = record
        return True

    async def delete(self, id: str) -> bool:
        return self.records.pop(id, None) is not None

    async def list_for_user(self, user_id: str) -> List[T]:
        return [r for r in self.records.values() if r.user_id == user_id]


class InMemoryDoTodayRepository:
    """Do Today off log kept in a dict keyed by (task, day)"""

    def __init__(self, entries: Optional[List[DoTodayOffEntry]] = None):
        self.entries: Dict[str, DoTodayOffEntry] = {e.key: e for e in entries or []}

    async def add(self, entry: DoTodayOffEntry) -> bool:
        self.entries[entry.key] = entry
        return True

    async def remove(self, entry: DoTodayOffEntry) -> bool:
        self.entries.pop(entry.key, None)
        return True

    async def list_for_user(self, user_id: str) -> List[DoTodayOffEntry]:
        return [e for e in self.entries.values() if e.user_id == user_id]


class InMemoryRepositoryFactory:
    """Mirror of RepositoryFactory backed by process memory"""

    def __init__(self):
        self.tasks: InMemoryRepository[Task] = InMemoryRepository()
        self.sections: InMemoryRepository[Section] = InMemoryRepository()
        self.categories: InMemoryRepository[Category] = InMemoryRepository()
        self.do_today = InMemoryDoTodayRepository()
