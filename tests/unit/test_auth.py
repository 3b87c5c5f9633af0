from datetime import timedelta

import pytest

from aerocms.core.auth import APIKeyManager
from aerocms.core.config import settings
from aerocms.core.exceptions import ServiceUnavailableError, UnauthorizedError
from aerocms.core.results import CONFLICT, INVALID
from aerocms.core.security import (
    create_access_token,
    create_passwordless_token,
    hash_password,
    verify_access_token,
    verify_password,
)
from aerocms.data.users import UserRepository
from aerocms.models.user import CmsRoles, User
from aerocms.services.auth import AuthService


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    monkeypatch.setattr(settings, "PASSWORD_HASH_ITERATIONS", 1000)


def test_password_hashing():
    encoded = hash_password("correct horse")

    assert encoded.startswith("pbkdf2_sha256$1000$")
    assert verify_password("correct horse", encoded)
    assert not verify_password("wrong horse", encoded)
    assert not verify_password("anything", None)
    assert not verify_password("anything", "md5$garbage")


def test_corrupted_stored_hash_fails_verification():
    assert not verify_password("anything", "pbkdf2_sha256$1000$not@base64!$abc")
    assert not verify_password("anything", "pbkdf2_sha256$1000$abc$abc")
    assert not verify_password("anything", "pbkdf2_sha256$0$c2FsdA==$abc")
    assert not verify_password("anything", "pbkdf2_sha256$1000$c2FsdA==$\u00e9t\u00e9")


def test_access_token_round_trip_and_purpose():
    token = create_access_token("user-1", claims={"roles": [CmsRoles.ADMIN]})
    magic = create_passwordless_token("user-1", "a@example.com")

    assert verify_access_token(token)["roles"] == [CmsRoles.ADMIN]
    assert verify_access_token(magic, purpose="passwordless")["email"] == "a@example.com"
    with pytest.raises(UnauthorizedError):
        verify_access_token(magic)
    with pytest.raises(UnauthorizedError):
        verify_access_token(token, purpose="passwordless")
    with pytest.raises(UnauthorizedError):
        verify_access_token(create_access_token("user-1", expires_delta=timedelta(seconds=-5)))
    with pytest.raises(UnauthorizedError):
        verify_access_token("not-a-token")


def test_role_matrix():
    admin = User(id="1", email="a@x.io", roles=[CmsRoles.ADMIN])
    creator = User(id="2", email="c@x.io", roles=[CmsRoles.CREATOR])
    viewer = User(id="3", email="v@x.io", roles=[CmsRoles.VIEWER])

    assert admin.has_any_role(CmsRoles.CONTRIBUTOR)
    assert creator.has_any_role(*CmsRoles.PUBLISHERS)
    assert not creator.has_any_role(CmsRoles.ADMIN)
    assert not viewer.has_any_role(*CmsRoles.EDITORS)


@pytest.mark.asyncio
async def test_register_and_authenticate(database):
    service = AuthService(UserRepository(database))

    registered = await service.register("Alice@Example.com", "s3cret-pass", roles=[CmsRoles.CREATOR])
    issued = await service.authenticate("alice@example.com", "s3cret-pass")

    assert registered.value.email == "alice@example.com"
    assert registered.value.display_name == "alice"
    assert verify_access_token(issued.access_token)["roles"] == [CmsRoles.CREATOR]
    assert issued.user.last_login_at is not None
    with pytest.raises(UnauthorizedError):
        await service.authenticate("alice@example.com", "wrong-pass")


@pytest.mark.asyncio
async def test_register_validation(database):
    service = AuthService(UserRepository(database))
    await service.register("bob@example.com", "long-enough")

    assert (await service.register("bob@example.com", "long-enough")).error_code == CONFLICT
    assert (await service.register("bob", "long-enough")).error_code == INVALID
    assert (await service.register("c@example.com", "short")).error_code == INVALID
    assert (await service.register("d@example.com", "long-enough", roles=["Wizard"])).error_code == INVALID


@pytest.mark.asyncio
async def test_passwordless_flow(database):
    service = AuthService(UserRepository(database))
    account = (await service.register("eve@example.com", "long-enough")).value

    token = await service.request_passwordless("eve@example.com")
    issued = await service.complete_passwordless(token)

    assert issued.user.id == account.id
    assert await service.request_passwordless("nobody@example.com") is None
    with pytest.raises(UnauthorizedError):
        await service.complete_passwordless(issued.access_token)


@pytest.mark.asyncio
async def test_api_keys(database):
    manager = APIKeyManager(database=database)

    token, record = await manager.create_key(name="ci", email="ci@example.com", roles=[CmsRoles.CONTRIBUTOR])
    expired_token, _ = await manager.create_key(
        name="old", email="old@example.com", roles=[], expires_in=timedelta(seconds=-1)
    )

    assert "hashed_key" not in record
    assert (await manager.resolve(token))["roles"] == [CmsRoles.CONTRIBUTOR]
    assert await manager.resolve(expired_token) is None
    assert [key["name"] for key in await manager.list_keys()] == ["ci"]
    assert await manager.revoke_key(record["id"])
    assert await manager.resolve(token) is None


@pytest.mark.asyncio
async def test_api_keys_require_a_database(monkeypatch):
    from aerocms.core.database import database_manager

    monkeypatch.setattr(database_manager, "mongodb", None)
    with pytest.raises(ServiceUnavailableError):
        await APIKeyManager().create_key(name="x", email="x@example.com", roles=[])
