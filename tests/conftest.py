# tests/conftest.py

import pytest

from planner.config import Settings
from planner.infra.memory import InMemoryRepositoryFactory
from planner.services import PlannerService

from .fakes import USER_ID, FakeSuggestionService, FixedClock


@pytest.fixture()
def settings() -> Settings:
    """In-memory settings with a small, instant retry budget"""
    return Settings(
        store_backend="memory",
        persist_max_retries=2,
        persist_retry_delay_seconds=0,
    )


@pytest.fixture()
def repositories() -> InMemoryRepositoryFactory:
    return InMemoryRepositoryFactory()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def suggestions() -> FakeSuggestionService:
    return FakeSuggestionService()


@pytest.fixture()
def planner(repositories, settings, clock, suggestions) -> PlannerService:
    """Planner service wired to in-memory repositories and a fixed clock"""
    return PlannerService(
        USER_ID,
        repositories,
        settings=settings,
        suggestion_service=suggestions,
        clock=clock,
    )
