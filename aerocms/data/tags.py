"""Tag repositories."""

from __future__ import annotations

from typing import List, Optional

from aerocms.data.base import ASCENDING, BaseRepository
from aerocms.models.tags import Tag, TagItem


class TagRepository(BaseRepository[Tag]):
    collection_name = "tags"
    model = Tag
    default_sort = (("sort_order", ASCENDING), ("tag_name", ASCENDING))

    async def get_by_name(self, tag_name: str) -> Optional[Tag]:
        return await self.find_one({"tag_name": tag_name})

    async def get_by_slug(self, slug: str) -> Optional[Tag]:
        return await self.find_one({"slug": slug})

    async def get_by_ids(self, tag_ids: List[str]) -> List[Tag]:
        if not tag_ids:
            return []
        return await self.find({"_id": {"$in": list(tag_ids)}})


class TagItemRepository(BaseRepository[TagItem]):
    collection_name = "tag_items"
    model = TagItem

    async def get_for_item(self, item_id: str) -> List[TagItem]:
        return await self.find({"item_id": item_id})

    async def get_for_tag(self, tag_id: str) -> List[TagItem]:
        return await self.find({"tag_id": tag_id})

    async def delete_for_tag(self, tag_id: str) -> int:
        result = await self._collection().delete_many({"tag_id": tag_id})
        return result.deleted_count
