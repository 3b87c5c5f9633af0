"""Repository base class over motor collections."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from aerocms.core.database import database_manager
from aerocms.core.exceptions import ServiceUnavailableError
from aerocms.core.results import NOT_FOUND, HandlerResult
from aerocms.models.base import CmsDocument

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=CmsDocument)

SortSpec = Sequence[Tuple[str, int]]


def to_bson(value: Any) -> Any:
    """Convert enums nested anywhere in ``value`` to their raw values."""

    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: to_bson(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_bson(item) for item in value]
    return value


class BaseRepository(Generic[T]):
    """CRUD over a single collection. Documents are keyed by ``id`` stored as ``_id``."""

    collection_name: str = ""
    model: Type[T]
    default_sort: SortSpec = ()

    def __init__(self, database=None) -> None:
        self._database = database

    def _collection(self):
        database = self._database if self._database is not None else database_manager.database
        if database is None:
            raise ServiceUnavailableError("Document store unavailable")
        return database[self.collection_name]

    def _to_document(self, entity: T) -> Dict[str, Any]:
        data = to_bson(entity.model_dump())
        data["_id"] = data.pop("id")
        return data

    def _from_document(self, document: Dict[str, Any]) -> T:
        data = dict(document)
        data["id"] = str(data.pop("_id"))
        return self.model.model_validate(data)

    async def find(
        self,
        query: Optional[Dict[str, Any]] = None,
        *,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[T]:
        cursor = self._collection().find(to_bson(query or {}))
        order = list(sort if sort is not None else self.default_sort)
        if order:
            cursor = cursor.sort(order)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        results: List[T] = []
        async for document in cursor:
            results.append(self._from_document(document))
        return results

    async def find_one(self, query: Dict[str, Any]) -> Optional[T]:
        document = await self._collection().find_one(to_bson(query))
        if document is None:
            return None
        return self._from_document(document)

    async def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        return await self._collection().count_documents(to_bson(query or {}))

    async def get_by_id(self, entity_id: str) -> Optional[T]:
        return await self.find_one({"_id": entity_id})

    async def get_all(self) -> List[T]:
        return await self.find()

    async def save(self, entity: T, user: Optional[str] = None) -> HandlerResult[T]:
        if entity.updated_at is None and user:
            entity.created_by = user
        entity.updated_at = datetime.now(timezone.utc)
        entity.updated_by = user or entity.created_by
        try:
            await self._collection().replace_one({"_id": entity.id}, self._to_document(entity), upsert=True)
        except PyMongoError as exc:
            logger.exception("Failed to save %s %s", self.collection_name, entity.id)
            return HandlerResult.fail(f"Failed to save document: {exc}")
        return HandlerResult.ok(entity)

    async def delete(self, entity_id: str) -> HandlerResult[None]:
        try:
            result = await self._collection().delete_one({"_id": entity_id})
        except PyMongoError as exc:
            logger.exception("Failed to delete %s %s", self.collection_name, entity_id)
            return HandlerResult.fail(f"Failed to delete document: {exc}")
        if result.deleted_count == 0:
            return HandlerResult.fail("Document not found.", code=NOT_FOUND)
        return HandlerResult.ok()


__all__ = ["ASCENDING", "DESCENDING", "BaseRepository", "SortSpec", "to_bson"]
