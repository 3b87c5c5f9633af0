import pytest

from aerocms.bootstrap import SiteBootstrapService
from aerocms.core.config import settings
from aerocms.data.content import ContentRepository, ContentTypeRepository
from aerocms.data.languages import LanguageRepository
from aerocms.data.sites import SiteRepository
from aerocms.data.users import UserRepository
from aerocms.models.blocks import HeroBlock
from aerocms.models.user import CmsRoles
from aerocms.services.auth import AuthService


@pytest.fixture
def service(database, clock, monkeypatch):
    monkeypatch.setattr(settings, "PASSWORD_HASH_ITERATIONS", 1000)
    return SiteBootstrapService(
        SiteRepository(database),
        ContentTypeRepository(database),
        ContentRepository(database),
        languages=LanguageRepository(database),
        auth=AuthService(UserRepository(database)),
        clock=clock,
    )


@pytest.mark.asyncio
async def test_first_run_seeds_everything(service, database, clock):
    await service.run("admin@example.com", "change-me-now")

    site = await service.sites.get_default()
    home = await service.content.get_by_slug("/")
    admin = await UserRepository(database).get_by_email("admin@example.com")

    assert site.hostnames == ["localhost"]
    assert {ct.alias for ct in await service.content_types.get_all()} == {"page", "blogPost"}
    assert home.is_visible(clock.now())
    assert home.properties["siteId"] == site.id
    assert isinstance(home.blocks[0], HeroBlock)
    assert (await service.languages.get_default()).iso_code == site.default_culture
    assert admin.roles == [CmsRoles.ADMIN]


@pytest.mark.asyncio
async def test_bootstrap_is_idempotent(service, database):
    await service.run("admin@example.com", "change-me-now")
    await service.run("admin@example.com", "change-me-now")

    assert len(database["sites"].documents) == 1
    assert len(database["content"].documents) == 1
    assert len(database["content_types"].documents) == 2
    assert len(database["users"].documents) == 1


@pytest.mark.asyncio
async def test_missing_steps_are_filled_in(service, database):
    await service.ensure_default_site()

    await service.run()

    assert len(database["content"].documents) == 1
    assert database["users"].documents == []
