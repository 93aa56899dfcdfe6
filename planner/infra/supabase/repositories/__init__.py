"""Repository factory and exports"""
from supabase import Client  # type: ignore

from .categories import CategoryRepository
from .do_today import DoTodayRepository
from .sections import SectionRepository
from .tasks import TaskRepository


class RepositoryFactory:
    """Factory for creating repository instances"""

    def __init__(self, client: Client):
        self._client = client
        self._tasks: TaskRepository = None
        self._sections: SectionRepository = None
        self._categories: CategoryRepository = None
        self._do_today: DoTodayRepository = None

    @property
    def tasks(self) -> TaskRepository:
        """Get task repository"""
        if self._tasks is None:
            self._tasks = TaskRepository(self._client)
        return self._tasks

    @property
    def sections(self) -> SectionRepository:
        """Get section repository"""
        if self._sections is None:
            self._sections = SectionRepository(self._client)
        return self._sections

    @property
    def categories(self) -> CategoryRepository:
        """Get category repository"""
        if self._categories is None:
            self._categories = CategoryRepository(self._client)
        return self._categories

    @property
    def do_today(self) -> DoTodayRepository:
        """Get Do Today off-log repository"""
        if self._do_today is None:
            self._do_today = DoTodayRepository(self._client)
        return self._do_today


__all__ = [
    'RepositoryFactory',
    'TaskRepository',
    'SectionRepository',
    'CategoryRepository',
    'DoTodayRepository',
]
