"""Page management for a site."""

from __future__ import annotations

import logging
from typing import List, Optional

from aerocms.core.clock import Clock, system_clock
from aerocms.core.results import CONFLICT, INVALID, NOT_FOUND, HandlerResult
from aerocms.content.slugs import generate_slug, normalise_path
from aerocms.data.content import ContentRepository
from aerocms.models.content import ContentDocument, PublishingStatus

logger = logging.getLogger(__name__)

PAGE_CONTENT_TYPE = "page"


class PageService:
    def __init__(self, repository: ContentRepository, clock: Clock = system_clock) -> None:
        self.repository = repository
        self.clock = clock

    async def get_pages_for_site(self, site_id: str) -> List[ContentDocument]:
        pages = await self.repository.get_by_content_type(PAGE_CONTENT_TYPE)
        matching = [page for page in pages if page.properties.get("siteId") == site_id]
        return sorted(matching, key=lambda page: (page.sort_order, page.name))

    async def get_by_slug(self, slug: str) -> Optional[ContentDocument]:
        return await self.repository.get_by_slug(slug)

    async def get_by_id(self, page_id: str) -> Optional[ContentDocument]:
        return await self.repository.get_by_id(page_id)

    async def create_page(
        self,
        site_id: str,
        name: str,
        slug: Optional[str] = None,
        created_by: str = "system",
    ) -> HandlerResult[ContentDocument]:
        if not name or not name.strip():
            return HandlerResult.fail("Page name is required.", code=INVALID)

        path = normalise_path(slug if slug and slug.strip() else generate_slug(name))
        if await self.repository.get_by_slug(path) is not None:
            return HandlerResult.fail(f"A page with slug '{path}' already exists.", code=CONFLICT)

        page = ContentDocument(
            name=name.strip(),
            slug=path,
            content_type_alias=PAGE_CONTENT_TYPE,
            status=PublishingStatus.PUBLISHED,
            published_at=self.clock.now(),
            created_by=created_by,
        )
        page.properties["siteId"] = site_id
        page.properties["title"] = page.name
        page.properties["description"] = ""

        result = await self.repository.save(page, created_by)
        if result.success:
            logger.info("Created page %s (%s) for site %s", page.id, path, site_id)
        return result

    async def save_page(self, page: ContentDocument, user: Optional[str] = None) -> HandlerResult[ContentDocument]:
        return await self.repository.save(page, user)

    async def delete_page(self, page_id: str) -> HandlerResult[None]:
        page = await self.repository.get_by_id(page_id)
        if page is None:
            return HandlerResult.fail("Page not found.", code=NOT_FOUND)
        return await self.repository.delete(page_id)
