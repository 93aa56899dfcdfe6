"""Base repository with common CRUD operations"""
import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from supabase import Client  # type: ignore

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)


class BaseRepository(Generic[T]):
    """
    Base repository providing common database operations.
    Hides Supabase implementation details from the rest of the application.
    """

    def __init__(self, client: Client, table_name: str, model_class: Type[T]):
        self._client = client
        self._table_name = table_name
        self._model_class = model_class

    def _to_model(self, data: Dict[str, Any]) -> T:
        """Convert database dict to domain model"""
        return self._model_class(**data)

    def _to_models(self, data: List[Dict[str, Any]]) -> List[T]:
        """Convert list of database dicts to domain models"""
        return [self._to_model(item) for item in data]

    def _to_row(self, record: T) -> Dict[str, Any]:
        """Convert domain model to a database dict"""
        return record.model_dump(mode='json')

    async def get(self, id: str) -> Optional[T]:
        """Find a single record by ID"""
        response = self._client.table(self._table_name).select("*").eq("id", id).execute()

        if not response.data:
            return None

        return self._to_model(response.data[0])

    async def find_by_filters(self, filters: Dict[str, Any], limit: Optional[int] = None) -> List[T]:
        """Find records matching filters"""
        query = self._client.table(self._table_name).select("*")

        for key, value in filters.items():
            query = query.eq(key, value)

        if limit:
            query = query.limit(limit)

        response = query.execute()
        return self._to_models(response.data)

    async def list_for_user(self, user_id: str) -> List[T]:
        """All records owned by a user"""
        return await self.find_by_filters({"user_id": user_id})

    async def put(self, record: T) -> bool:
        """Insert or replace a whole record (last write wins)"""
        try:
            response = self._client.table(self._table_name).upsert(self._to_row(record)).execute()
        except Exception as e:
            logger.error(f"Failed to write {self._table_name} record: {e}")
            return False
        return bool(response.data)

    async def delete(self, id: str) -> bool:
        """Delete a record by ID"""
        try:
            response = self._client.table(self._table_name).delete().eq("id", id).execute()
        except Exception as e:
            logger.error(f"Failed to delete {self._table_name} record {id}: {e}")
            return False
        return len(response.data) > 0
