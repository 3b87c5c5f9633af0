import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from aerocms.api.middleware.redirects import RedirectMiddleware
from aerocms.data.media import RedirectRepository
from aerocms.models.seo import SeoRedirectDocument
from aerocms.seo.redirects import RedirectResolver, RedirectTable, is_regex
from aerocms.services.redirects import RedirectService


def _redirect(from_url, to_url, status_code=301, is_active=True):
    return SeoRedirectDocument(from_url=from_url, to_url=to_url, status_code=status_code, is_active=is_active)


def test_is_regex():
    assert is_regex("^/old/(.*)$")
    assert not is_regex("/plain/path")


def test_exact_then_case_insensitive_then_pattern():
    table = RedirectTable.compile(
        [
            _redirect("/About", "/about-us"),
            _redirect("^/blog/(\\d+)/(.*)$", "/posts/$2", 302),
            _redirect("/disabled", "/nowhere", is_active=False),
        ]
    )

    assert table.match("/About").location == "/about-us"
    assert table.match("/ABOUT").location == "/about-us"
    pattern = table.match("/blog/2020/hello")
    assert pattern.location == "/posts/hello"
    assert pattern.status_code == 302
    assert table.match("/disabled") is None
    assert table.match("/unknown") is None


def test_invalid_pattern_falls_back_to_literal():
    table = RedirectTable.compile([_redirect("/broken(", "/fixed")])
    assert table.match("/broken(").location == "/fixed"


def test_pattern_targets_expand_dollar_and_backslash_groups():
    table = RedirectTable.compile(
        [
            _redirect("^/news/(\\d+)$", "/blog?page=$1"),
            _redirect("^/docs/(.*)$", "/guides/\\1"),
        ]
    )

    assert table.match("/news/7").location == "/blog?page=7"
    assert table.match("/docs/setup").location == "/guides/setup"


def test_unexpandable_target_is_skipped():
    table = RedirectTable.compile(
        [
            _redirect("^/old/(.*)$", "/new/$2"),
            _redirect("^/old/(.*)$", "/fallback/$1", 302),
        ]
    )

    found = table.match("/old/page")

    assert found.location == "/fallback/page"
    assert found.status_code == 302


def test_blank_target_is_ignored():
    table = RedirectTable.compile([_redirect("/gone", "  "), _redirect("^/x/(.*)$", "")])

    assert table.match("/gone") is None
    assert table.match("/x/y") is None


@pytest.mark.asyncio
async def test_resolver_caches_until_ttl_expires():
    loads = []
    now = [0.0]

    async def loader():
        loads.append(now[0])
        return [_redirect("/a", "/b")]

    resolver = RedirectResolver(loader, ttl_seconds=300, timer=lambda: now[0])

    await resolver.resolve("/a")
    now[0] = 299
    await resolver.resolve("/a")
    now[0] = 300
    await resolver.resolve("/a")
    resolver.invalidate()
    await resolver.resolve("/a")

    assert loads == [0.0, 300, 300]


@pytest.mark.asyncio
async def test_redirect_service_validates_and_invalidates(database):
    repository = RedirectRepository(database)
    resolver = RedirectResolver(repository.get_active)
    service = RedirectService(repository, resolver)

    created = await service.save_redirect("/old", "/new")
    assert created.success
    assert (await resolver.resolve("/old")).location == "/new"

    assert (await service.save_redirect("/old", "/other")).error_code == "conflict"
    assert not (await service.save_redirect("/same", "/same")).success
    assert not (await service.save_redirect("/x", "/y", status_code=307)).success

    updated = await service.save_redirect("/old", "/newer", redirect_id=created.value.id)
    assert updated.success
    assert (await resolver.resolve("/old")).location == "/newer"

    assert (await service.delete_redirect(created.value.id)).success
    assert await resolver.resolve("/old") is None


def test_middleware_passes_through_when_resolver_fails():
    async def broken_loader():
        raise RuntimeError("redirect table unavailable")

    app = FastAPI()

    @app.get("/landing")
    async def landing():
        return {"ok": True}

    app.add_middleware(RedirectMiddleware, resolver=RedirectResolver(broken_loader))

    response = TestClient(app).get("/landing", follow_redirects=False)

    assert response.status_code == 200
    assert response.json() == {"ok": True}
