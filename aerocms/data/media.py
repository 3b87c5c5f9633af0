"""Media and redirect repositories."""

from __future__ import annotations

from typing import List, Optional

from aerocms.data.base import ASCENDING, DESCENDING, BaseRepository
from aerocms.models.media import MediaDocument
from aerocms.models.seo import SeoRedirectDocument


class MediaRepository(BaseRepository[MediaDocument]):
    collection_name = "media"
    model = MediaDocument
    default_sort = (("created_at", DESCENDING),)

    async def get_by_parent(self, parent_id: Optional[str]) -> List[MediaDocument]:
        return await self.find({"parent_id": parent_id})


class RedirectRepository(BaseRepository[SeoRedirectDocument]):
    collection_name = "seo_redirects"
    model = SeoRedirectDocument
    default_sort = (("from_url", ASCENDING),)

    async def get_active(self) -> List[SeoRedirectDocument]:
        return await self.find({"is_active": True})

    async def get_by_from_url(self, from_url: str) -> Optional[SeoRedirectDocument]:
        return await self.find_one({"from_url": from_url})
