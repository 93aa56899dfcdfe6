"""Shared API dependencies: repositories and per-user planner services"""
import logging
from typing import Dict, Optional

from fastapi import HTTPException, Query

from planner.config import get_settings
from planner.infra.memory import InMemoryRepositoryFactory
from planner.services import PlannerService
from planner.services.suggestion import SuggestionService

logger = logging.getLogger(__name__)

_repositories = None
_suggestion_service: Optional[SuggestionService] = None
_services: Dict[str, PlannerService] = {}


def get_repositories():
    """Repository factory for the configured store backend (created once)"""
    global _repositories

    if _repositories is None:
        settings = get_settings()
        if settings.store_backend == "memory":
            logger.info("Using in-memory store")
            _repositories = InMemoryRepositoryFactory()
        else:
            # Imported lazily so memory mode never needs Supabase credentials
            from planner.infra.supabase import get_supabase_client
            from planner.infra.supabase.repositories import RepositoryFactory

            _repositories = RepositoryFactory(get_supabase_client())
    return _repositories


def get_suggestion_service() -> Optional[SuggestionService]:
    """LLM suggestion service, or None when no OpenAI key is configured"""
    global _suggestion_service

    settings = get_settings()
    if not settings.openai_api_key:
        return None
    if _suggestion_service is None:
        _suggestion_service = SuggestionService(model=settings.suggestion_model)
    return _suggestion_service


async def get_planner(user_id: str = Query(..., min_length=1)) -> PlannerService:
    """Loaded planner service of the requesting user"""
    service = _services.get(user_id)
    if service is not None:
        return service

    service = PlannerService(
        user_id,
        get_repositories(),
        settings=get_settings(),
        suggestion_service=get_suggestion_service(),
    )
    result = await service.load()
    if not result.ok:
        raise HTTPException(status_code=503, detail=result.error.model_dump())
    _services[user_id] = service
    return service


def reset_planner_services():
    """Drop cached services and repositories (useful for testing)"""
    global _repositories, _suggestion_service
    _services.clear()
    _repositories = None
    _suggestion_service = None
