from typing import Dict

import pytest
from fastapi.testclient import TestClient

from aerocms.api.dependencies import get_storage_provider, redirect_resolver
from aerocms.api.main import app
from aerocms.core.config import settings
from aerocms.core.database import database_manager
from aerocms.core.security import create_access_token
from aerocms.media.storage import DiskStorageProvider
from aerocms.models.user import CmsRoles


@pytest.fixture
def client(database, tmp_path, monkeypatch):
    monkeypatch.setattr(database_manager, "mongodb", {settings.MONGODB_DATABASE: database})
    monkeypatch.setattr(database_manager, "redis", None)
    monkeypatch.setattr(settings, "PASSWORD_HASH_ITERATIONS", 1000)
    redirect_resolver.invalidate()
    app.dependency_overrides[get_storage_provider] = lambda: DiskStorageProvider(tmp_path, "/media")
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
    redirect_resolver.invalidate()


def auth_header(*roles: str, subject: str = "user-1") -> Dict[str, str]:
    token = create_access_token(subject, claims={"roles": list(roles), "email": f"{subject}@aerocms.io"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin() -> Dict[str, str]:
    return auth_header(CmsRoles.ADMIN, subject="admin")


@pytest.fixture
def editor() -> Dict[str, str]:
    return auth_header(CmsRoles.CREATOR, subject="editor")


@pytest.fixture
def contributor() -> Dict[str, str]:
    return auth_header(CmsRoles.CONTRIBUTOR, subject="contributor")


@pytest.fixture
def viewer() -> Dict[str, str]:
    return auth_header(CmsRoles.VIEWER, subject="viewer")
