"""Server-side HTML rendering of blocks and pages."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from jinja2 import Environment, PackageLoader, TemplateNotFound, select_autoescape
from markupsafe import Markup

from aerocms.content.markdown import MarkdownRenderer
from aerocms.models.blocks import Block
from aerocms.models.content import ContentDocument
from aerocms.models.site import SiteDocument

logger = logging.getLogger(__name__)

FALLBACK_BLOCK_TEMPLATE = "blocks/_block.html"
FALLBACK_LAYOUT = "default"


class BlockRenderer:
    """Renders block trees through one Jinja2 partial per block type."""

    def __init__(self, markdown: Optional[MarkdownRenderer] = None) -> None:
        self.markdown = markdown or MarkdownRenderer()
        self.env = Environment(
            loader=PackageLoader("aerocms", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["markdown"] = lambda text: Markup(self.markdown.to_html(text))
        self.env.globals["render_block"] = self.render_block

    def render_block(self, block: Block) -> Markup:
        try:
            template = self.env.get_template(f"blocks/{block.type}.html")
        except TemplateNotFound:
            logger.debug("No partial for block type %s; rendering children only", block.type)
            template = self.env.get_template(FALLBACK_BLOCK_TEMPLATE)
        return Markup(template.render(block=block, children=block.ordered_children()))

    def render_blocks(self, blocks: Iterable[Block]) -> str:
        ordered = sorted(blocks, key=lambda block: block.sort_order)
        return "\n".join(str(self.render_block(block)) for block in ordered)

    def render_content(self, content: ContentDocument) -> str:
        """Body HTML for a content document, without the site layout."""

        return self.render_blocks(content.blocks)

    def render_page(
        self,
        content: ContentDocument,
        site: Optional[SiteDocument] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> str:
        layout = (site.default_layout if site else None) or FALLBACK_LAYOUT
        template = self.env.select_template([f"layouts/{layout}.html", f"layouts/{FALLBACK_LAYOUT}.html"])
        return template.render(
            content=content,
            site=site,
            body=Markup(self.render_content(content)),
            title=content.properties.get("title") or content.name,
            description=content.properties.get("metaDescription") or content.properties.get("description", ""),
            **(extra or {}),
        )

    def render_template(self, name: str, **context: Any) -> str:
        return self.env.get_template(name).render(**context)


__all__ = ["BlockRenderer"]
