"""Site repository."""

from __future__ import annotations

from typing import Optional

from aerocms.data.base import ASCENDING, BaseRepository
from aerocms.models.site import SiteDocument


class SiteRepository(BaseRepository[SiteDocument]):
    collection_name = "sites"
    model = SiteDocument
    default_sort = (("created_at", ASCENDING),)

    async def get_default(self) -> Optional[SiteDocument]:
        # Several sites may carry the flag; the oldest one wins.
        sites = await self.find({"is_default": True}, limit=1)
        return sites[0] if sites else None

    async def get_by_hostname(self, hostname: str) -> Optional[SiteDocument]:
        return await self.find_one({"hostnames": hostname.lower()})
