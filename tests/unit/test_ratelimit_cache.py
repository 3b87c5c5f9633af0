import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from aerocms.api.middleware.ratelimit import RateLimitMiddleware
from aerocms.core.database import database_manager
from aerocms.utils.cache import Cache


def _app(limit: int) -> FastAPI:
    app = FastAPI()

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    app.add_middleware(RateLimitMiddleware, requests=limit)
    return app


def test_rate_limit_blocks_after_limit(monkeypatch, redis_stub):
    monkeypatch.setattr(database_manager, "redis", redis_stub)
    client = TestClient(_app(2))

    first = client.get("/ping")
    client.get("/ping")
    blocked = client.get("/ping")

    assert first.headers["X-RateLimit-Remaining"] == "1"
    assert blocked.status_code == 429
    assert blocked.json()["code"] == "rate_limited"
    assert blocked.headers["Retry-After"] == "60"
    assert list(redis_stub.values) == ["ratelimit:ip:testclient"]


def test_rate_limit_keys_by_api_key(monkeypatch, redis_stub):
    monkeypatch.setattr(database_manager, "redis", redis_stub)
    client = TestClient(_app(5))

    client.get("/ping", headers={"X-API-Key": "aero_abcdefghijklmnop"})

    assert list(redis_stub.values) == ["ratelimit:api:aero_abcdefg"]


def test_rate_limit_passes_through_without_redis(monkeypatch):
    monkeypatch.setattr(database_manager, "redis", None)
    client = TestClient(_app(1))

    responses = [client.get("/ping") for _ in range(3)]

    assert all(response.status_code == 200 for response in responses)
    assert "X-RateLimit-Limit" not in responses[0].headers


@pytest.mark.asyncio
async def test_cache_round_trip(monkeypatch, redis_stub):
    monkeypatch.setattr(database_manager, "redis", redis_stub)
    cache = Cache(prefix="test")

    await cache.set("delivery:/about", {"status_code": 200}, ttl=30)

    assert await cache.get("delivery:/about") == {"status_code": 200}
    assert redis_stub.expiry["test:delivery:/about"] == 30
    await cache.delete("delivery:/about")
    assert await cache.get("delivery:/about") is None


@pytest.mark.asyncio
async def test_cache_without_redis_misses(monkeypatch):
    monkeypatch.setattr(database_manager, "redis", None)

    await Cache().set("key", "value")

    assert await Cache().get("key") is None
