"""Content finder chain: resolves a request slug to a content document."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Protocol

from aerocms.core.clock import Clock, system_clock
from aerocms.core.observability import get_tracer
from aerocms.data.content import ContentRepository
from aerocms.models.content import ContentDocument
from aerocms.models.site import SiteDocument
from aerocms.utils.monitoring import observe_resolution

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


@dataclass
class ContentFinderContext:
    slug: str
    is_preview: bool = False
    site: Optional[SiteDocument] = None
    request: Any = None
    status_code: int = 200


class ContentFinder(Protocol):
    priority: int

    async def find(self, context: ContentFinderContext) -> Optional[ContentDocument]:
        ...


class DefaultContentFinder:
    """Looks the slug up directly and applies the publishing rules."""

    priority = 100

    def __init__(self, repository: ContentRepository, clock: Clock = system_clock) -> None:
        self.repository = repository
        self.clock = clock

    async def find(self, context: ContentFinderContext) -> Optional[ContentDocument]:
        document = await self.repository.get_by_slug(context.slug)
        if document is None:
            return None
        if context.is_preview:
            return document
        if document.is_visible(self.clock.now()):
            return document
        return None


class NotFoundContentFinder:
    """Serves the site's configured not-found page with a 404 status."""

    priority = 1000

    def __init__(self, repository: ContentRepository, clock: Clock = system_clock) -> None:
        self.repository = repository
        self.clock = clock

    async def find(self, context: ContentFinderContext) -> Optional[ContentDocument]:
        if context.site is None or not context.site.not_found_page_id:
            return None
        page = await self.repository.get_by_id(context.site.not_found_page_id)
        if page is None or not page.is_visible(self.clock.now()):
            return None
        context.status_code = 404
        return page


class ContentFinderPipeline:
    """Tries finders in ascending priority until one returns a document."""

    def __init__(self, finders: Iterable[ContentFinder]) -> None:
        self.finders: List[ContentFinder] = sorted(finders, key=lambda finder: finder.priority)

    async def execute(self, context: ContentFinderContext) -> Optional[ContentDocument]:
        with tracer.start_as_current_span("content.resolve") as span:
            span.set_attribute("content.slug", context.slug)
            span.set_attribute("content.preview", context.is_preview)
            for finder in self.finders:
                document = await finder.find(context)
                if document is not None:
                    logger.debug("Resolved %s via %s", context.slug, type(finder).__name__)
                    span.set_attribute("content.finder", type(finder).__name__)
                    observe_resolution(type(finder).__name__)
                    return document
            observe_resolution("none")
            return None


__all__ = [
    "ContentFinder",
    "ContentFinderContext",
    "ContentFinderPipeline",
    "DefaultContentFinder",
    "NotFoundContentFinder",
]
