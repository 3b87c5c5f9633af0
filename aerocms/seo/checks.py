"""Individual SEO checks.

Each check inspects a content document (and optionally its rendered HTML)
and appends one item to the result.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from bs4 import BeautifulSoup

from aerocms.models.content import ContentDocument
from aerocms.models.seo import SeoCheckResult, SeoCheckStatus


class SeoCheck(Protocol):
    alias: str

    def run(self, content: ContentDocument, html: Optional[str], result: SeoCheckResult) -> None:
        ...


class _LengthCheck:
    alias = ""
    label = ""
    min_length = 0
    max_length = 0

    def value(self, content: ContentDocument) -> str:
        raise NotImplementedError

    def run(self, content: ContentDocument, html: Optional[str], result: SeoCheckResult) -> None:
        value = (self.value(content) or "").strip()
        if not value:
            result.add(self.alias, SeoCheckStatus.FAIL, f"{self.label} is missing.")
        elif len(value) < self.min_length:
            result.add(
                self.alias,
                SeoCheckStatus.WARNING,
                f"{self.label} is too short ({len(value)} characters, aim for at least {self.min_length}).",
            )
        elif len(value) > self.max_length:
            result.add(
                self.alias,
                SeoCheckStatus.WARNING,
                f"{self.label} is too long ({len(value)} characters, aim for at most {self.max_length}).",
            )
        else:
            result.add(self.alias, SeoCheckStatus.PASS, f"{self.label} length is optimal.")


class PageTitleCheck(_LengthCheck):
    alias = "pageTitle"
    label = "Page title"
    min_length = 10
    max_length = 60

    def value(self, content: ContentDocument) -> str:
        return content.name


class MetaDescriptionCheck(_LengthCheck):
    alias = "metaDescription"
    label = "Meta description"
    min_length = 50
    max_length = 160

    def value(self, content: ContentDocument) -> str:
        return str(content.properties.get("metaDescription") or "")


class WordCountCheck:
    alias = "wordCount"
    minimum_words = 300

    def run(self, content: ContentDocument, html: Optional[str], result: SeoCheckResult) -> None:
        words = (content.search_text or "").split()
        if not words:
            result.add(self.alias, SeoCheckStatus.FAIL, "Page content is empty.")
        elif len(words) < self.minimum_words:
            result.add(
                self.alias,
                SeoCheckStatus.WARNING,
                f"Word count ({len(words)}) is below recommended minimum of {self.minimum_words}.",
            )
        else:
            result.add(
                self.alias,
                SeoCheckStatus.PASS,
                f"Word count ({len(words)}) meets recommended minimum.",
            )


class HeadingOneCheck:
    alias = "headingOne"

    def run(self, content: ContentDocument, html: Optional[str], result: SeoCheckResult) -> None:
        if html is None:
            result.add(self.alias, SeoCheckStatus.INFO, "Rendered HTML not available for H1 check.")
            return
        count = len(BeautifulSoup(html, "html.parser").find_all("h1"))
        if count == 1:
            result.add(self.alias, SeoCheckStatus.PASS, "Page has exactly one H1 heading.")
        elif count > 1:
            result.add(self.alias, SeoCheckStatus.WARNING, f"Multiple H1 headings found ({count}).")
        else:
            result.add(self.alias, SeoCheckStatus.FAIL, "No H1 heading found.")


class ImageAltTextCheck:
    alias = "imageAltText"

    def run(self, content: ContentDocument, html: Optional[str], result: SeoCheckResult) -> None:
        if html is None:
            result.add(self.alias, SeoCheckStatus.INFO, "Rendered HTML not available for image check.")
            return
        images = BeautifulSoup(html, "html.parser").find_all("img")
        missing = [image for image in images if not (image.get("alt") or "").strip()]
        if missing:
            result.add(
                self.alias,
                SeoCheckStatus.WARNING,
                f"{len(missing)} of {len(images)} images are missing alt text.",
            )
        else:
            result.add(self.alias, SeoCheckStatus.PASS, "All images have alt text.")


def default_checks() -> List[SeoCheck]:
    return [PageTitleCheck(), MetaDescriptionCheck(), WordCountCheck(), HeadingOneCheck(), ImageAltTextCheck()]
