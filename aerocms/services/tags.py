"""Tag catalogue and item tagging."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from aerocms.content.slugs import generate_slug
from aerocms.core.results import INVALID, NOT_FOUND, HandlerResult
from aerocms.data.tags import TagItemRepository, TagRepository
from aerocms.models.tags import Tag, TagItem

logger = logging.getLogger(__name__)


class TagService:
    def __init__(self, tags: TagRepository, tag_items: TagItemRepository) -> None:
        self.tags = tags
        self.tag_items = tag_items

    async def save_tag(
        self,
        tag_name: str,
        sort_order: int = 0,
        tag_id: Optional[str] = None,
        user: Optional[str] = None,
    ) -> HandlerResult[Tag]:
        if not tag_name or not tag_name.strip():
            return HandlerResult.fail("Tag name is required.", code=INVALID)
        tag_name = tag_name.strip()

        if tag_id is not None:
            tag = await self.tags.get_by_id(tag_id)
            if tag is None:
                return HandlerResult.fail("Tag not found.", code=NOT_FOUND)
            tag.tag_name = tag_name
            tag.sort_order = sort_order
            tag.slug = generate_slug(tag_name)
        else:
            existing = await self.tags.get_by_name(tag_name)
            if existing is not None:
                # Saving a name that already exists is a no-op.
                return HandlerResult.ok(existing)
            tag = Tag(tag_name=tag_name, sort_order=sort_order, slug=generate_slug(tag_name))

        return await self.tags.save(tag, user)

    async def delete_tag(self, tag_id: Optional[str] = None, tag_name: Optional[str] = None) -> HandlerResult[None]:
        tag = None
        if tag_id is not None:
            tag = await self.tags.get_by_id(tag_id)
        elif tag_name:
            tag = await self.tags.get_by_name(tag_name)
        if tag is None:
            return HandlerResult.fail("Tag not found.", code=NOT_FOUND)
        removed = await self.tag_items.delete_for_tag(tag.id)
        logger.info("Deleting tag %s and %d item links", tag.tag_name, removed)
        return await self.tags.delete(tag.id)

    async def set_item_tags(
        self, item_id: str, tag_ids: Iterable[str], user: Optional[str] = None
    ) -> HandlerResult[List[TagItem]]:
        if not item_id or not item_id.strip():
            return HandlerResult.fail("Item id is empty.", code=INVALID)

        existing = await self.tag_items.get_for_item(item_id)
        existing_ids = {item.tag_id for item in existing}
        wanted = list(dict.fromkeys(tag_ids))

        for link in existing:
            if link.tag_id not in wanted:
                await self.tag_items.delete(link.id)
        for tag_id in wanted:
            if tag_id not in existing_ids:
                result = await self.tag_items.save(TagItem(tag_id=tag_id, item_id=item_id), user)
                if not result.success:
                    return HandlerResult.fail(*result.errors)

        return HandlerResult.ok(await self.tag_items.get_for_item(item_id))

    async def get_tags_for_item(self, item_id: str) -> List[Tag]:
        links = await self.tag_items.get_for_item(item_id)
        return await self.tags.get_by_ids([link.tag_id for link in links])

    async def query_tags(
        self,
        tag_ids: Optional[List[str]] = None,
        slugs: Optional[List[str]] = None,
        order_by: str = "sort_order",
    ) -> List[Tag]:
        tags = await self.tags.get_all()
        if tag_ids:
            tags = [tag for tag in tags if tag.id in tag_ids]
        if slugs:
            tags = [tag for tag in tags if tag.slug in slugs]
        if order_by == "name":
            return sorted(tags, key=lambda tag: tag.tag_name.lower())
        return sorted(tags, key=lambda tag: (tag.sort_order, tag.tag_name.lower()))

    async def get_item_ids_for_tag(self, slug: str) -> List[str]:
        tag = await self.tags.get_by_slug(slug)
        if tag is None:
            return []
        return [link.item_id for link in await self.tag_items.get_for_tag(tag.id)]
