"""Content and content-type repositories."""

from __future__ import annotations

import logging
from typing import List, Optional

from pymongo.errors import PyMongoError

from aerocms.core.results import HandlerResult
from aerocms.data.base import ASCENDING, BaseRepository
from aerocms.data.hooks import SaveHookPipeline
from aerocms.models.content import ContentDocument, ContentTypeDocument, PublishingStatus

logger = logging.getLogger(__name__)


class ContentRepository(BaseRepository[ContentDocument]):
    collection_name = "content"
    model = ContentDocument
    default_sort = (("sort_order", ASCENDING), ("name", ASCENDING))

    def __init__(self, database=None, hooks: Optional[SaveHookPipeline] = None) -> None:
        super().__init__(database)
        self.hooks = hooks or SaveHookPipeline()

    async def get_by_slug(self, slug: str) -> Optional[ContentDocument]:
        return await self.find_one({"slug": slug})

    async def get_children(
        self, parent_id: str, status: Optional[PublishingStatus] = None
    ) -> List[ContentDocument]:
        query = {"parent_id": parent_id}
        if status is not None:
            query["status"] = status
        return await self.find(query)

    async def get_by_content_type(self, alias: str) -> List[ContentDocument]:
        return await self.find({"content_type_alias": alias})

    async def save(self, entity: ContentDocument, user: Optional[str] = None) -> HandlerResult[ContentDocument]:
        async def persist(document: ContentDocument) -> HandlerResult[ContentDocument]:
            return await BaseRepository.save(self, document, user)

        try:
            previous = await self.get_by_id(entity.id) if self.hooks.released else None
        except PyMongoError as exc:
            logger.exception("Failed to load content %s before save", entity.id)
            return HandlerResult.fail(f"Failed to save document: {exc}")
        return await self.hooks.run(entity, persist, previous=previous)

    async def delete(self, entity_id: str) -> HandlerResult[None]:
        try:
            stored = await self.get_by_id(entity_id)
        except PyMongoError as exc:
            logger.exception("Failed to load content %s before delete", entity_id)
            return HandlerResult.fail(f"Failed to delete document: {exc}")
        result = await super().delete(entity_id)
        if result.success and stored is not None:
            await self.hooks.release(stored)
        return result


class ContentTypeRepository(BaseRepository[ContentTypeDocument]):
    collection_name = "content_types"
    model = ContentTypeDocument
    default_sort = (("name", ASCENDING),)

    async def get_by_alias(self, alias: str) -> Optional[ContentTypeDocument]:
        return await self.find_one({"alias": alias})
