"""Built-in content save hooks."""

from __future__ import annotations

import logging
from typing import List, Optional

from bs4 import BeautifulSoup

from aerocms.content.markdown import MarkdownRenderer
from aerocms.content.slugs import normalise_path
from aerocms.media.service import MediaReferenceValidator
from aerocms.models.blocks import Block, HeroBlock, HtmlBlock, MarkdownBlock, QuoteBlock, RichTextBlock
from aerocms.models.content import ContentDocument
from aerocms.utils.cache import Cache, cache

logger = logging.getLogger(__name__)


def delivery_cache_key(slug: str) -> str:
    return f"delivery:{normalise_path(slug)}"


def html_to_text(html: str) -> str:
    if not html:
        return ""
    return BeautifulSoup(html, "html.parser").get_text(" ", strip=True)


class SearchTextHook:
    """Rebuilds ``search_text`` from the text carried by the page blocks."""

    def __init__(self, renderer: Optional[MarkdownRenderer] = None) -> None:
        self.renderer = renderer or MarkdownRenderer()

    async def before_save(self, document: ContentDocument) -> None:
        parts: List[str] = []
        for block in document.all_blocks():
            text = self._block_text(block)
            if text:
                parts.append(text)
        document.search_text = " ".join(parts)

    def _block_text(self, block: Block) -> str:
        if isinstance(block, (RichTextBlock, HtmlBlock)):
            return html_to_text(block.html)
        if isinstance(block, MarkdownBlock):
            return html_to_text(self.renderer.to_html(block.markdown))
        if isinstance(block, HeroBlock):
            return " ".join(part for part in (block.heading, block.subtext) if part)
        if isinstance(block, QuoteBlock):
            return " ".join(part for part in (block.quote, block.attribution) if part)
        return ""


class DeliveryCacheInvalidationHook:
    """Drops cached delivery payloads once a document changes."""

    def __init__(self, delivery_cache: Cache = cache) -> None:
        self.cache = delivery_cache

    async def after_save(self, document: ContentDocument) -> None:
        await self.cache.delete(delivery_cache_key(document.slug))
        logger.debug("Invalidated delivery cache for %s", document.slug)

    async def after_release(self, document: ContentDocument) -> None:
        await self.after_save(document)


class MediaReferenceHook:
    """Refreshes media links embedded in rich text before a save."""

    def __init__(self, validator: MediaReferenceValidator) -> None:
        self.validator = validator

    async def before_save(self, document: ContentDocument) -> None:
        for block in document.all_blocks():
            if isinstance(block, (RichTextBlock, HtmlBlock)) and block.html:
                block.html = await self.validator.validate_html(block.html)
