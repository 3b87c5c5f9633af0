"""FastAPI dependency providers.

Repositories resolve their database lazily, so the module-level instances
below are safe to create at import time. Tests swap any of them through
``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request

from aerocms.api.security import authenticate_user, optional_user
from aerocms.content.finders import ContentFinderPipeline, DefaultContentFinder, NotFoundContentFinder
from aerocms.content.hooks import DeliveryCacheInvalidationHook, MediaReferenceHook, SearchTextHook
from aerocms.content.markdown import MarkdownImportService, MarkdownRenderer
from aerocms.content.pages import PageService
from aerocms.content.publishing import PublishingWorkflow
from aerocms.content.rendering import BlockRenderer
from aerocms.content.sections import SectionService
from aerocms.core.clock import Clock, system_clock
from aerocms.core.config import settings
from aerocms.data.content import ContentRepository, ContentTypeRepository
from aerocms.data.hooks import SaveHookPipeline
from aerocms.data.languages import DictionaryRepository, LanguageRepository
from aerocms.data.media import MediaRepository, RedirectRepository
from aerocms.data.sites import SiteRepository
from aerocms.data.tags import TagItemRepository, TagRepository
from aerocms.data.users import UserRepository
from aerocms.media.service import MediaReferenceValidator, MediaService
from aerocms.media.storage import StorageProvider, create_storage_provider
from aerocms.models.site import SiteDocument
from aerocms.models.user import User
from aerocms.seo.analyzer import SeoAnalyzer
from aerocms.seo.redirects import RedirectResolver
from aerocms.seo.sitemap import SitemapGenerator
from aerocms.services.auth import AuthService
from aerocms.services.blog import BlogService
from aerocms.services.languages import DictionaryService, LanguageService
from aerocms.services.redirects import RedirectService
from aerocms.services.tags import TagService

markdown_renderer = MarkdownRenderer()
block_renderer = BlockRenderer(markdown_renderer)

media_repository = MediaRepository()
redirect_repository = RedirectRepository()

content_save_hooks = SaveHookPipeline()
content_save_hooks.register(MediaReferenceHook(MediaReferenceValidator(media_repository)))
content_save_hooks.register(SearchTextHook(markdown_renderer))
content_save_hooks.register(DeliveryCacheInvalidationHook())

redirect_resolver = RedirectResolver(redirect_repository.get_active, ttl_seconds=settings.REDIRECT_CACHE_SECONDS)

_storage_provider: Optional[StorageProvider] = None


def get_clock() -> Clock:
    return system_clock


def get_renderer() -> BlockRenderer:
    return block_renderer


def get_content_repository() -> ContentRepository:
    return ContentRepository(hooks=content_save_hooks)


def get_content_type_repository() -> ContentTypeRepository:
    return ContentTypeRepository()


def get_site_repository() -> SiteRepository:
    return SiteRepository()


def get_media_repository() -> MediaRepository:
    return media_repository


def get_redirect_repository() -> RedirectRepository:
    return redirect_repository


def get_user_repository() -> UserRepository:
    return UserRepository()


def get_storage_provider() -> StorageProvider:
    global _storage_provider
    if _storage_provider is None:
        _storage_provider = create_storage_provider()
    return _storage_provider


def get_page_service(
    repository: ContentRepository = Depends(get_content_repository),
    clock: Clock = Depends(get_clock),
) -> PageService:
    return PageService(repository, clock)


def get_section_service() -> SectionService:
    return SectionService()


def get_publishing_workflow(
    repository: ContentRepository = Depends(get_content_repository),
    content_types: ContentTypeRepository = Depends(get_content_type_repository),
    clock: Clock = Depends(get_clock),
) -> PublishingWorkflow:
    return PublishingWorkflow(repository, content_types, clock)


def get_markdown_import_service(
    repository: ContentRepository = Depends(get_content_repository),
) -> MarkdownImportService:
    return MarkdownImportService(repository, markdown_renderer)


def get_finder_pipeline(
    repository: ContentRepository = Depends(get_content_repository),
    clock: Clock = Depends(get_clock),
) -> ContentFinderPipeline:
    return ContentFinderPipeline([DefaultContentFinder(repository, clock), NotFoundContentFinder(repository, clock)])


def get_seo_analyzer(renderer: BlockRenderer = Depends(get_renderer)) -> SeoAnalyzer:
    return SeoAnalyzer(renderer=renderer)


def get_sitemap_generator(
    repository: ContentRepository = Depends(get_content_repository),
    clock: Clock = Depends(get_clock),
) -> SitemapGenerator:
    return SitemapGenerator(repository, clock)


def get_media_service(
    repository: MediaRepository = Depends(get_media_repository),
    storage: StorageProvider = Depends(get_storage_provider),
) -> MediaService:
    return MediaService(repository, storage)


def get_redirect_service(
    repository: RedirectRepository = Depends(get_redirect_repository),
) -> RedirectService:
    return RedirectService(repository, redirect_resolver)


def get_tag_service() -> TagService:
    return TagService(TagRepository(), TagItemRepository())


def get_language_service() -> LanguageService:
    return LanguageService(LanguageRepository())


def get_dictionary_service(languages: LanguageService = Depends(get_language_service)) -> DictionaryService:
    return DictionaryService(DictionaryRepository(), languages)


def get_blog_service(
    repository: ContentRepository = Depends(get_content_repository),
    renderer: BlockRenderer = Depends(get_renderer),
    tags: TagService = Depends(get_tag_service),
    clock: Clock = Depends(get_clock),
) -> BlogService:
    return BlogService(repository, renderer, tags, clock)


def get_auth_service(users: UserRepository = Depends(get_user_repository)) -> AuthService:
    return AuthService(users)


async def get_current_user(request: Request, user: User = Depends(authenticate_user)) -> User:
    return user


async def get_optional_user(user: Optional[User] = Depends(optional_user)) -> Optional[User]:
    return user


def get_current_site(request: Request) -> Optional[SiteDocument]:
    return getattr(request.state, "site", None)
