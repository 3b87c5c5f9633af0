"""Administrative endpoints for Aero CMS."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field

from aerocms.api.dependencies import redirect_resolver
from aerocms.api.security import require_roles
from aerocms.core.auth import api_key_manager
from aerocms.core.config import settings
from aerocms.core.database import database_manager
from aerocms.core.security import create_access_token
from aerocms.models.user import CmsRoles, User
from aerocms.utils.audit import audit_log

router = APIRouter(prefix="/admin", tags=["admin"])

admins = require_roles(CmsRoles.ADMIN)


class APIKeyCreateRequest(BaseModel):
    name: str
    email: EmailStr
    roles: List[str] = Field(default_factory=lambda: [CmsRoles.VIEWER])
    expires_minutes: Optional[int] = Field(None, gt=0)


class APIKeyResponse(BaseModel):
    id: str
    key: str
    name: str
    email: EmailStr
    roles: List[str]
    created_at: str


class APIKeySummary(BaseModel):
    id: str
    name: str
    email: EmailStr
    roles: List[str]
    created_at: str
    expires_at: Optional[str] = None
    revoked: bool


class JWTIssueRequest(BaseModel):
    subject: str
    roles: List[str] = Field(default_factory=lambda: [CmsRoles.VIEWER])
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    expires_minutes: int = Field(60, gt=0, le=24 * 60)


class JWTIssueResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: str
    claims: Dict[str, Any]


def _check_roles(roles: List[str]) -> None:
    unknown = [role for role in roles if role not in CmsRoles.ALL]
    if unknown:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"Unknown roles: {unknown}")


@router.get("/health")
async def healthcheck() -> Dict[str, str]:
    """Liveness probe."""

    return {
        "status": "ok",
        "environment": settings.ENVIRONMENT,
        "database": "connected" if database_manager.mongodb is not None else "disconnected",
    }


@router.get("/config")
async def configuration_snapshot(current_user: User = Depends(admins)) -> Dict[str, str]:
    """Return a limited configuration snapshot for admins."""

    return {
        "api_title": settings.API_TITLE,
        "environment": settings.ENVIRONMENT,
        "mongodb_database": settings.MONGODB_DATABASE,
        "storage_backend": settings.STORAGE_BACKEND,
        "error_page_path": settings.ERROR_PAGE_PATH,
    }


@router.post("/cache/redirects", status_code=status.HTTP_204_NO_CONTENT)
@audit_log
async def flush_redirect_cache(current_user: User = Depends(admins)) -> None:
    """Force the next request to reload the redirect table."""

    redirect_resolver.invalidate()


@router.post(
    "/api-keys",
    response_model=APIKeyResponse,
    status_code=status.HTTP_201_CREATED,
)
@audit_log
async def create_api_key(
    payload: APIKeyCreateRequest,
    current_user: User = Depends(admins),
) -> APIKeyResponse:
    _check_roles(payload.roles)
    expires = timedelta(minutes=payload.expires_minutes) if payload.expires_minutes else None
    token, record = await api_key_manager.create_key(
        name=payload.name,
        email=payload.email,
        roles=payload.roles,
        expires_in=expires,
    )
    return APIKeyResponse(
        id=record["id"],
        key=token,
        name=record["name"],
        email=record["email"],
        roles=record["roles"],
        created_at=record["created_at"].isoformat(),
    )


@router.get(
    "/api-keys",
    response_model=List[APIKeySummary],
)
async def list_api_keys(
    include_revoked: bool = False,
    current_user: User = Depends(admins),
) -> List[APIKeySummary]:
    records = await api_key_manager.list_keys(include_revoked=include_revoked)
    summaries: List[APIKeySummary] = []
    for record in records:
        summaries.append(
            APIKeySummary(
                id=record.get("id"),
                name=record.get("name"),
                email=record.get("email"),
                roles=list(record.get("roles") or []),
                created_at=record.get("created_at").isoformat() if record.get("created_at") else "",
                expires_at=record.get("expires_at").isoformat() if record.get("expires_at") else None,
                revoked=bool(record.get("revoked", False)),
            )
        )
    return summaries


@router.delete(
    "/api-keys/{key_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
@audit_log
async def revoke_api_key(
    key_id: str,
    current_user: User = Depends(admins),
) -> None:
    success = await api_key_manager.revoke_key(key_id)
    if not success:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="API key not found")


@router.post(
    "/jwt",
    response_model=JWTIssueResponse,
    status_code=status.HTTP_201_CREATED,
)
@audit_log
async def issue_jwt(
    payload: JWTIssueRequest,
    current_user: User = Depends(admins),
) -> JWTIssueResponse:
    _check_roles(payload.roles)
    expires = timedelta(minutes=payload.expires_minutes)
    claims: Dict[str, Any] = {"roles": payload.roles}
    if payload.email:
        claims["email"] = payload.email
    if payload.name:
        claims["name"] = payload.name
    token = create_access_token(
        subject=payload.subject,
        expires_delta=expires,
        claims=claims,
    )
    expires_at = (datetime.now(timezone.utc) + expires).isoformat()
    return JWTIssueResponse(access_token=token, expires_at=expires_at, claims=claims)
