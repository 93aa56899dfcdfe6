"""In-memory persistence"""
from .repositories import InMemoryDoTodayRepository, InMemoryRepository, InMemoryRepositoryFactory

__all__ = ['InMemoryRepository', 'InMemoryDoTodayRepository', 'InMemoryRepositoryFactory']
