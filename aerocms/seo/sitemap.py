"""sitemaps.org XML generation."""

from __future__ import annotations

from typing import List, Tuple
from xml.etree import ElementTree

from aerocms.content.markdown import BLOG_POST_CONTENT_TYPE
from aerocms.content.pages import PAGE_CONTENT_TYPE
from aerocms.core.clock import Clock, system_clock
from aerocms.data.content import ContentRepository
from aerocms.models.content import ContentDocument
from aerocms.models.site import SiteDocument

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


class SitemapGenerator:
    def __init__(self, repository: ContentRepository, clock: Clock = system_clock) -> None:
        self.repository = repository
        self.clock = clock

    async def entries(self, site: SiteDocument) -> List[Tuple[str, ContentDocument]]:
        now = self.clock.now()
        entries: List[Tuple[str, ContentDocument]] = []
        for page in await self.repository.get_by_content_type(PAGE_CONTENT_TYPE):
            site_id = page.properties.get("siteId")
            if site_id and site_id != site.id:
                continue
            if page.is_visible(now):
                entries.append((page.slug, page))
        for post in await self.repository.get_by_content_type(BLOG_POST_CONTENT_TYPE):
            if post.is_visible(now):
                entries.append((f"/blog/{post.slug.lstrip('/')}", post))
        return entries

    async def generate(self, site: SiteDocument) -> str:
        ElementTree.register_namespace("", SITEMAP_NAMESPACE)
        urlset = ElementTree.Element(f"{{{SITEMAP_NAMESPACE}}}urlset")
        base = site.base_url.rstrip("/")
        for path, document in await self.entries(site):
            url = ElementTree.SubElement(urlset, f"{{{SITEMAP_NAMESPACE}}}url")
            ElementTree.SubElement(url, f"{{{SITEMAP_NAMESPACE}}}loc").text = f"{base}{path}"
            modified = document.updated_at or document.published_at or document.created_at
            ElementTree.SubElement(url, f"{{{SITEMAP_NAMESPACE}}}lastmod").text = modified.date().isoformat()
        return XML_DECLARATION + ElementTree.tostring(urlset, encoding="unicode")
