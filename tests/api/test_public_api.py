import io
import logging

from PIL import Image

from aerocms.core.config import settings

POST = """---
title: Launch Day
tags: [news]
author: Sam
---
We shipped the **new site** today.
"""


def _publish_post(client, editor, admin):
    post = client.post("/api/content/import/markdown", json={"markdown": POST}, headers=editor).json()
    client.post(f"/api/content/{post['id']}/publish", headers=admin)
    return post


def test_redirects_are_served_before_routing(client, admin):
    created = client.post(
        "/api/seo/redirects", json={"from_url": "/old-page", "to_url": "/new-page"}, headers=admin
    )
    client.post(
        "/api/seo/redirects",
        json={"from_url": "^/archive/(\\d+)$", "to_url": "/blog?page=$1", "status_code": 302},
        headers=admin,
    )

    exact = client.get("/Old-Page", follow_redirects=False)
    pattern = client.get("/archive/3", follow_redirects=False)

    assert created.status_code == 201
    assert exact.status_code == 301
    assert exact.headers["location"] == "/new-page"
    assert pattern.status_code == 302
    assert pattern.headers["location"] == "/blog?page=3"
    assert len(client.get("/api/seo/redirects", headers=admin).json()) == 2


def test_bad_redirect_target_falls_through_to_routing(client, admin):
    client.post(
        "/api/seo/redirects", json={"from_url": "^/old/(.*)$", "to_url": "/new/$2"}, headers=admin
    )

    response = client.get("/old/page", follow_redirects=False)

    assert response.status_code == 404
    assert "location" not in response.headers


def test_duplicate_redirect_conflicts(client, admin):
    client.post("/api/seo/redirects", json={"from_url": "/a", "to_url": "/b"}, headers=admin)

    response = client.post("/api/seo/redirects", json={"from_url": "/a", "to_url": "/c"}, headers=admin)

    assert response.status_code == 409


def test_non_api_errors_redirect_to_error_page(client):
    response = client.get("/about", headers={"Authorization": "Bearer broken"}, follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/error?code=401"


def test_error_page(client):
    response = client.get("/error", params={"code": 404})

    assert response.status_code == 404
    assert "could not be found" in response.text


def test_blog_api_and_pages(client, editor, admin):
    post = _publish_post(client, editor, admin)

    index = client.get("/api/blog").json()
    detail = client.get(f"/api/blog/{post['slug']}").json()
    page = client.get(f"/blog/{post['slug']}")
    listing = client.get("/blog")

    assert [item["slug"] for item in index["posts"]] == ["launch-day"]
    assert index["total_posts"] == 1
    assert detail["author"] == "Sam"
    assert "<strong>new site</strong>" in detail["html"]
    assert page.status_code == 200
    assert "Launch Day" in page.text
    assert "/blog/launch-day" in listing.text
    assert client.get("/api/blog/unknown").status_code == 404
    assert client.get("/blog/unknown").status_code == 404


def test_sitemap_lists_visible_pages_and_posts(client, admin, editor):
    site = client.post(
        "/api/sites", json={"name": "Main", "base_url": "https://example.org", "is_default": True}, headers=admin
    ).json()
    client.post("/api/content/pages", json={"site_id": site["id"], "name": "Team"}, headers=editor)
    _publish_post(client, editor, admin)

    response = client.get("/sitemap.xml")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    assert "<loc>https://example.org/team</loc>" in response.text
    assert "<loc>https://example.org/blog/launch-day</loc>" in response.text


def test_sitemap_without_site(client):
    assert client.get("/sitemap.xml").status_code == 404


def test_media_upload(client, editor):
    buffer = io.BytesIO()
    Image.new("RGB", (8, 6), "blue").save(buffer, format="PNG")

    uploaded = client.post(
        "/api/media",
        files={"file": ("Team Photo.png", buffer.getvalue(), "image/png")},
        data={"alt_text": "The team"},
        headers=editor,
    )
    rejected = client.post(
        "/api/media",
        files={"file": ("virus.exe", b"MZ", "application/octet-stream")},
        headers=editor,
    )

    media = uploaded.json()
    assert uploaded.status_code == 201
    assert (media["width"], media["height"]) == (8, 6)
    assert media["url"].startswith("/media/")
    assert media["url"].endswith("/Team-Photo.png")
    assert rejected.status_code == 400
    assert rejected.json()["detail"] == "File not allowed"

    patched = client.patch(f"/api/media/{media['id']}", json={"alt_text": "Everyone"}, headers=editor)
    assert patched.json()["alt_text"] == "Everyone"
    assert client.delete(f"/api/media/{media['id']}", headers=editor).status_code == 204
    assert client.get("/api/media", headers=editor).json() == []


def test_login_and_passwordless(client, admin, monkeypatch):
    monkeypatch.setattr(settings, "PASSWORDLESS_TOKEN_IN_RESPONSE", True)
    registered = client.post(
        "/api/auth/register",
        json={"email": "writer@aerocms.io", "password": "long-enough", "roles": ["Contributor"]},
        headers=admin,
    )
    login = client.post("/api/auth/login", json={"email": "writer@aerocms.io", "password": "long-enough"})
    wrong = client.post("/api/auth/login", json={"email": "writer@aerocms.io", "password": "nope-nope"})
    magic = client.post("/api/auth/passwordless", json={"email": "writer@aerocms.io"})
    verified = client.post("/api/auth/passwordless/verify", json={"token": magic.json()["token"]})
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {login.json()['access_token']}"})

    assert registered.status_code == 201
    assert login.json()["roles"] == ["Contributor"]
    assert wrong.status_code == 401
    assert magic.status_code == 202
    assert verified.json()["user_id"] == registered.json()["id"]
    assert me.json()["email"] == "writer@aerocms.io"



def test_passwordless_request_never_returns_token_by_default(client, admin, caplog):
    client.post(
        "/api/auth/register",
        json={"email": "boss@aerocms.io", "password": "long-enough", "roles": ["Admin"]},
        headers=admin,
    )

    with caplog.at_level(logging.INFO, logger="aerocms.api.routes.auth"):
        response = client.post("/api/auth/passwordless", json={"email": "boss@aerocms.io"})
    unknown = client.post("/api/auth/passwordless", json={"email": "nobody@aerocms.io"})

    assert response.status_code == 202
    assert response.json()["token"] is None
    assert unknown.json()["token"] is None
    assert "boss@aerocms.io" in caplog.text


def test_api_key_authentication(client, admin):
    created = client.post(
        "/api/admin/api-keys",
        json={"name": "deploy", "email": "deploy@aerocms.io", "roles": ["Creator"]},
        headers=admin,
    ).json()
    headers = {"X-API-Key": created["key"]}

    me = client.get("/api/auth/me", headers=headers).json()
    client.delete(f"/api/admin/api-keys/{created['id']}", headers=admin)

    assert me["auth_method"] == "api_key"
    assert me["roles"] == ["Creator"]
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_tags_and_languages(client, admin, editor):
    tag = client.post("/api/tags", json={"tag_name": "Release Notes"}, headers=editor).json()
    client.put("/api/tags/items/post-1", json={"tag_ids": [tag["id"]]}, headers=editor)

    client.post("/api/languages", json={"iso_code": "en", "is_default": True}, headers=admin)
    client.put("/api/dictionary", json={"key": "readMore", "translations": {"en": "Read more"}}, headers=editor)

    assert tag["slug"] == "release-notes"
    assert [item["tag_name"] for item in client.get("/api/tags/items/post-1").json()] == ["Release Notes"]
    assert client.get("/api/dictionary/translate", params={"key": "readMore", "culture": "de-DE"}).json()["value"] == "Read more"
    assert client.post("/api/languages", json={"iso_code": "en"}, headers=admin).status_code == 409


def test_metrics_endpoint(client):
    client.get("/api/admin/health")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "aerocms_http_requests_total" in response.text


def test_redirect_cache_flush_requires_admin(client, admin, editor):
    assert client.post("/api/admin/cache/redirects", headers=editor).status_code == 403
    assert client.post("/api/admin/cache/redirects", headers=admin).status_code == 204
