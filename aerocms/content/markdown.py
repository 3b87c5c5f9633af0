"""Markdown rendering and blog-post import."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

import frontmatter
from markdown_it import MarkdownIt

from aerocms.core.clock import ensure_utc
from aerocms.core.results import INVALID, HandlerResult
from aerocms.content.slugs import generate_slug
from aerocms.data.content import ContentRepository
from aerocms.models.blocks import MarkdownBlock
from aerocms.models.content import ContentDocument, PublishingStatus

logger = logging.getLogger(__name__)

BLOG_POST_CONTENT_TYPE = "blogPost"


class MarkdownRenderer:
    """CommonMark renderer with tables and strikethrough enabled."""

    def __init__(self) -> None:
        self._md = MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"])

    def to_html(self, markdown: Optional[str]) -> str:
        if not markdown:
            return ""
        return self._md.render(markdown)

    def parse_with_frontmatter(self, markdown: str) -> Tuple[str, Dict[str, str]]:
        post = frontmatter.loads(markdown or "")
        metadata = {key: _as_text(value) for key, value in post.metadata.items()}
        return post.content, metadata


def _as_text(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return "" if value is None else str(value)


class MarkdownImportService:
    """Turns a front-matter markdown file into a draft blog post."""

    def __init__(self, repository: ContentRepository, renderer: Optional[MarkdownRenderer] = None) -> None:
        self.repository = repository
        self.renderer = renderer or MarkdownRenderer()

    async def import_markdown(self, markdown: str, user: Optional[str] = None) -> HandlerResult[ContentDocument]:
        if not markdown or not markdown.strip():
            return HandlerResult.fail("Markdown content is empty.", code=INVALID)

        body, metadata = self.renderer.parse_with_frontmatter(markdown)
        title = metadata.get("title") or "Untitled"

        document = ContentDocument(
            name=title,
            slug=metadata.get("slug") or generate_slug(title),
            content_type_alias=BLOG_POST_CONTENT_TYPE,
            status=PublishingStatus.DRAFT,
        )
        for key in ("description", "tags", "author"):
            if metadata.get(key):
                document.properties[key] = metadata[key]
        if metadata.get("date"):
            document.properties["date"] = metadata["date"]
            published = _parse_date(metadata["date"])
            if published is not None:
                document.published_at = published

        block = MarkdownBlock(sort_order=0)
        block.markdown = body
        document.blocks.append(block)

        result = await self.repository.save(document, user)
        if result.success:
            logger.info("Imported markdown post %s as %s", document.slug, document.id)
        return result


def _parse_date(value: str) -> Optional[datetime]:
    try:
        return ensure_utc(datetime.fromisoformat(value))
    except ValueError:
        return None
