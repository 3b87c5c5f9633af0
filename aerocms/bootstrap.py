"""First-run seeding of the default site, content types, home page and admin user."""

from __future__ import annotations

import logging
from typing import Optional

from aerocms.content.markdown import BLOG_POST_CONTENT_TYPE
from aerocms.content.pages import PAGE_CONTENT_TYPE
from aerocms.core.clock import Clock, system_clock
from aerocms.core.config import settings
from aerocms.core.results import CONFLICT
from aerocms.data.content import ContentRepository, ContentTypeRepository
from aerocms.data.languages import LanguageRepository
from aerocms.data.sites import SiteRepository
from aerocms.models.blocks import HeroBlock
from aerocms.models.content import (
    ContentDocument,
    ContentTypeDocument,
    ContentTypeProperty,
    PropertyType,
    PublishingStatus,
)
from aerocms.models.languages import Language
from aerocms.models.site import SiteDocument
from aerocms.models.user import CmsRoles
from aerocms.services.auth import AuthService

logger = logging.getLogger(__name__)

SYSTEM_USER = "system"


class SiteBootstrapService:
    """Idempotent: every step checks for existing data before writing."""

    def __init__(
        self,
        sites: SiteRepository,
        content_types: ContentTypeRepository,
        content: ContentRepository,
        languages: Optional[LanguageRepository] = None,
        auth: Optional[AuthService] = None,
        clock: Clock = system_clock,
    ) -> None:
        self.sites = sites
        self.content_types = content_types
        self.content = content
        self.languages = languages
        self.auth = auth
        self.clock = clock

    async def run(self, admin_email: Optional[str] = None, admin_password: Optional[str] = None) -> None:
        site = await self.ensure_default_site()
        await self.ensure_content_types()
        await self.ensure_home_page(site)
        if self.languages is not None:
            await self.ensure_default_language(site)
        email = admin_email or settings.ADMIN_EMAIL
        password = admin_password or settings.ADMIN_PASSWORD
        if self.auth is not None and email and password:
            await self.ensure_admin(email, password)

    async def ensure_default_site(self) -> SiteDocument:
        existing = await self.sites.get_default()
        if existing is not None:
            return existing
        site = SiteDocument(
            name="My Aero Site",
            base_url="https://localhost:8080",
            description="Built with Aero CMS",
            hostnames=["localhost"],
            is_default=True,
        )
        await self.sites.save(site, SYSTEM_USER)
        logger.info("Seeded default site %s", site.id)
        return site

    async def ensure_content_types(self) -> None:
        if await self.content_types.get_by_alias(PAGE_CONTENT_TYPE) is None:
            await self.content_types.save(
                ContentTypeDocument(
                    name="Page",
                    alias=PAGE_CONTENT_TYPE,
                    description="Standard page type",
                    allow_at_root=True,
                    properties=[
                        ContentTypeProperty(name="Title", alias="title", required=True, sort_order=0),
                        ContentTypeProperty(
                            name="Description",
                            alias="description",
                            property_type=PropertyType.TEXTAREA,
                            sort_order=1,
                        ),
                    ],
                ),
                SYSTEM_USER,
            )
            logger.info("Seeded content type %s", PAGE_CONTENT_TYPE)
        if await self.content_types.get_by_alias(BLOG_POST_CONTENT_TYPE) is None:
            await self.content_types.save(
                ContentTypeDocument(
                    name="Blog post",
                    alias=BLOG_POST_CONTENT_TYPE,
                    description="Article listed on the blog",
                    allow_at_root=False,
                    properties=[
                        ContentTypeProperty(
                            name="Description", alias="description", property_type=PropertyType.TEXTAREA
                        ),
                        ContentTypeProperty(name="Tags", alias="tags", sort_order=1),
                        ContentTypeProperty(name="Author", alias="author", sort_order=2),
                    ],
                ),
                SYSTEM_USER,
            )
            logger.info("Seeded content type %s", BLOG_POST_CONTENT_TYPE)

    async def ensure_home_page(self, site: SiteDocument) -> None:
        if await self.content.get_by_slug("/") is not None:
            return
        page = ContentDocument(
            name="Home",
            slug="/",
            content_type_alias=PAGE_CONTENT_TYPE,
            status=PublishingStatus.PUBLISHED,
            published_at=self.clock.now(),
        )
        page.properties["siteId"] = site.id
        page.properties["title"] = "Welcome to Aero CMS"
        page.properties["description"] = "This is your seeded home page."
        hero = HeroBlock(sort_order=0)
        hero.heading = "Welcome to your new site!"
        hero.subtext = "Edit this page in the admin dashboard to get started."
        page.blocks.append(hero)
        await self.content.save(page, SYSTEM_USER)
        logger.info("Seeded home page %s", page.id)

    async def ensure_default_language(self, site: SiteDocument) -> None:
        if await self.languages.get_default() is not None:
            return
        language = Language(iso_code=site.default_culture, culture_name=site.default_culture, is_default=True)
        await self.languages.save(language, SYSTEM_USER)

    async def ensure_admin(self, email: str, password: str) -> None:
        result = await self.auth.register(email, password, "Administrator", [CmsRoles.ADMIN], SYSTEM_USER)
        if result.success:
            logger.info("Seeded admin user %s", email)
        elif result.error_code != CONFLICT:
            logger.warning("Could not seed admin user: %s", result.message)
