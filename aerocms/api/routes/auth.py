"""Login, registration and passwordless endpoints."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field

from aerocms.api.dependencies import get_auth_service, get_current_user
from aerocms.api.security import require_roles
from aerocms.core.config import settings
from aerocms.models.user import CmsRoles, User, UserDocument
from aerocms.services.auth import AuthService, IssuedToken
from aerocms.utils.audit import audit_log

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    display_name: str = ""
    roles: List[str] = Field(default_factory=lambda: [CmsRoles.VIEWER])


class PasswordlessRequest(BaseModel):
    email: EmailStr


class PasswordlessVerifyRequest(BaseModel):
    token: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    roles: List[str]


class PasswordlessResponse(BaseModel):
    detail: str = "If the account exists a login link has been issued."
    token: Optional[str] = None


class UserSummary(BaseModel):
    id: str
    email: str
    display_name: str
    roles: List[str]
    is_active: bool


def _token_response(issued: IssuedToken) -> TokenResponse:
    return TokenResponse(access_token=issued.access_token, user_id=issued.user.id, roles=issued.user.roles)


def _summary(user: UserDocument) -> UserSummary:
    return UserSummary(
        id=user.id, email=user.email, display_name=user.display_name, roles=user.roles, is_active=user.is_active
    )


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)) -> TokenResponse:
    return _token_response(await auth.authenticate(payload.email, payload.password))


@router.post("/register", response_model=UserSummary, status_code=status.HTTP_201_CREATED)
@audit_log
async def register(
    payload: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
    current_user: User = Depends(require_roles(CmsRoles.ADMIN)),
) -> UserSummary:
    result = await auth.register(
        payload.email, payload.password, payload.display_name, payload.roles, user=current_user.id
    )
    return _summary(result.raise_for_errors())


@router.post("/passwordless", response_model=PasswordlessResponse, status_code=status.HTTP_202_ACCEPTED)
async def request_passwordless(
    payload: PasswordlessRequest, auth: AuthService = Depends(get_auth_service)
) -> PasswordlessResponse:
    token = await auth.request_passwordless(payload.email)
    if token is not None:
        # No mail transport: the token goes to the log for the operator.
        logger.info("Passwordless login token for %s: %s", payload.email, token)
    if token is None or not settings.PASSWORDLESS_TOKEN_IN_RESPONSE:
        return PasswordlessResponse()
    return PasswordlessResponse(token=token)


@router.post("/passwordless/verify", response_model=TokenResponse)
async def verify_passwordless(
    payload: PasswordlessVerifyRequest, auth: AuthService = Depends(get_auth_service)
) -> TokenResponse:
    return _token_response(await auth.complete_passwordless(payload.token))


@router.get("/me", response_model=User)
async def me(current_user: User = Depends(get_current_user)) -> User:
    return current_user
