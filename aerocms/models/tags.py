"""Tag catalogue and tag-to-item links."""

from __future__ import annotations

from aerocms.models.base import CmsDocument


class Tag(CmsDocument):
    tag_name: str
    slug: str = ""
    sort_order: int = 0


class TagItem(CmsDocument):
    tag_id: str
    item_id: str
