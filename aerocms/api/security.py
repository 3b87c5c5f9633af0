"""Authentication utilities for API routes."""

from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from aerocms.core.auth import api_key_manager
from aerocms.core.exceptions import UnauthorizedError
from aerocms.core.security import verify_access_token
from aerocms.models.user import User

_http_bearer = HTTPBearer(auto_error=False)
_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def optional_user(
    request: Request,
    bearer_token: Optional[HTTPAuthorizationCredentials] = Depends(_http_bearer),
    api_key: Optional[str] = Depends(_api_key_header),
) -> Optional[User]:
    if bearer_token and bearer_token.credentials:
        try:
            payload = verify_access_token(bearer_token.credentials)
        except UnauthorizedError as exc:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
        subject = payload.get("sub")
        if subject is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

        user = User(
            id=subject,
            email=payload.get("email", f"{subject}@aerocms.local"),
            name=payload.get("name") or subject,
            roles=list(payload.get("roles") or []),
        )
        request.state.user = user
        return user

    if api_key:
        record = await api_key_manager.resolve(api_key)
        if record is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
        user = User(
            id=record.get("id", "api-key"),
            email=record.get("email", "service@aerocms.local"),
            name=record.get("name", "service"),
            roles=list(record.get("roles") or []),
            auth_method="api_key",
        )
        request.state.user = user
        return user

    return None


async def authenticate_user(user: Optional[User] = Depends(optional_user)) -> User:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user


def require_roles(*roles: str) -> Callable:
    """Dependency factory allowing users holding any of ``roles``; Admin always passes."""

    async def dependency(user: User = Depends(authenticate_user)) -> User:
        if not user.has_any_role(*roles):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return user

    return dependency


__all__ = ["authenticate_user", "optional_user", "require_roles"]
