"""Base repository with common CRUD operations"""
import asyncio
import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from postgrest.exceptions import APIError  # type: ignore
from pydantic import BaseModel
from supabase import Client  # type: ignore

from app.features.notes.errors import CodeTaken, StoreError

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)
CreateT = TypeVar('CreateT', bound=BaseModel)
UpdateT = TypeVar('UpdateT', bound=BaseModel)

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def translate_api_error(error: APIError, action: str) -> Exception:
    """Map a PostgREST error onto a notes feature error"""
    if getattr(error, "code", None) == UNIQUE_VIOLATION:
        logger.warning(f"Unique constraint violated while trying to {action}")
        return CodeTaken()

    logger.error(f"Supabase error while trying to {action}: {error}", exc_info=error)
    return StoreError()


class BaseRepository(Generic[T, CreateT, UpdateT]):
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

    async def _execute(self, query, action: str):
        """Run a blocking PostgREST request in a worker thread"""
        try:
            return await asyncio.to_thread(query.execute)
        except APIError as e:
            raise translate_api_error(e, action) from e

    async def find_by_filters(self, filters: Dict[str, Any], limit: Optional[int] = None, columns: str = "*") -> List[Dict[str, Any]]:
        """Find raw rows matching equality filters"""
        query = self._client.table(self._table_name).select(columns)

        for key, value in filters.items():
            query = query.eq(key, value)

        if limit:
            query = query.limit(limit)

        response = await self._execute(query, f"query {self._table_name}")
        return response.data or []

    async def create(self, data: CreateT) -> T:
        """Create a new record"""
        data_dict = data.model_dump(exclude_unset=True, mode='json')
        query = self._client.table(self._table_name).insert(data_dict)
        response = await self._execute(query, f"insert into {self._table_name}")

        if not response.data:
            logger.error(f"Insert into {self._table_name} returned no rows")
            raise StoreError()

        return self._to_model(response.data[0])

    async def update(self, id: UUID | str, data: UpdateT) -> Optional[T]:
        """Update a record by ID; returns None when no row matched"""
        data_dict = data.model_dump(exclude_unset=True, mode='json')
        if not data_dict:
            raise ValueError(f"No fields to update in {self._table_name}")

        query = self._client.table(self._table_name).update(data_dict).eq("id", str(id))
        response = await self._execute(query, f"update {self._table_name}")

        if not response.data:
            return None

        return self._to_model(response.data[0])
