"""Runs the SEO checks over a content document."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from aerocms.content.rendering import BlockRenderer
from aerocms.models.content import ContentDocument
from aerocms.models.seo import SeoCheckResult
from aerocms.seo.checks import SeoCheck, default_checks

logger = logging.getLogger(__name__)


class SeoAnalyzer:
    def __init__(
        self,
        checks: Optional[Iterable[SeoCheck]] = None,
        renderer: Optional[BlockRenderer] = None,
    ) -> None:
        self.checks: List[SeoCheck] = list(checks) if checks is not None else default_checks()
        self.renderer = renderer

    def analyze(self, content: ContentDocument, html: Optional[str] = None) -> SeoCheckResult:
        if html is None and self.renderer is not None:
            html = self.renderer.render_content(content)
        result = SeoCheckResult(content_id=content.id)
        for check in self.checks:
            check.run(content, html, result)
        logger.debug("SEO score for %s: %s", content.id, result.score)
        return result
