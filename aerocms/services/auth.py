"""User registration, password login and passwordless (magic link) login."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from aerocms.core.exceptions import UnauthorizedError
from aerocms.core.results import CONFLICT, INVALID, HandlerResult
from aerocms.core.security import (
    PASSWORDLESS_PURPOSE,
    create_access_token,
    create_passwordless_token,
    hash_password,
    verify_access_token,
    verify_password,
)
from aerocms.data.users import UserRepository
from aerocms.models.user import CmsRoles, UserDocument

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


@dataclass
class IssuedToken:
    access_token: str
    user: UserDocument
    token_type: str = "bearer"


def token_for(user: UserDocument) -> str:
    return create_access_token(
        user.id,
        claims={"email": user.email, "name": user.display_name, "roles": list(user.roles)},
    )


class AuthService:
    def __init__(self, users: UserRepository) -> None:
        self.users = users

    async def register(
        self,
        email: str,
        password: str,
        display_name: str = "",
        roles: Optional[Iterable[str]] = None,
        user: Optional[str] = None,
    ) -> HandlerResult[UserDocument]:
        email = (email or "").strip().lower()
        if "@" not in email:
            return HandlerResult.fail("A valid email address is required.", code=INVALID)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            return HandlerResult.fail(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters.", code=INVALID
            )
        roles = list(roles) if roles else [CmsRoles.VIEWER]
        unknown = [role for role in roles if role not in CmsRoles.ALL]
        if unknown:
            return HandlerResult.fail(f"Unknown roles: {', '.join(unknown)}", code=INVALID)
        if await self.users.get_by_email(email) is not None:
            return HandlerResult.fail("A user with this email already exists.", code=CONFLICT)

        account = UserDocument(
            email=email,
            display_name=display_name or email.split("@", 1)[0],
            password_hash=hash_password(password),
            roles=roles,
        )
        result = await self.users.save(account, user)
        if result.success:
            logger.info("Registered user %s with roles %s", account.id, roles)
        return result

    async def authenticate(self, email: str, password: str) -> IssuedToken:
        account = await self.users.get_by_email(email or "")
        if account is None or not account.is_active or not verify_password(password, account.password_hash):
            logger.info("Failed login for %s", email)
            raise UnauthorizedError("Invalid email or password")
        return await self._issue(account)

    async def request_passwordless(self, email: str) -> Optional[str]:
        """Return a magic-link token, or None when no active account matches.

        Delivery of the token is left to the caller.
        """

        account = await self.users.get_by_email(email or "")
        if account is None or not account.is_active:
            logger.info("Passwordless login requested for unknown email %s", email)
            return None
        logger.info("Issued passwordless token for user %s", account.id)
        return create_passwordless_token(account.id, account.email)

    async def complete_passwordless(self, token: str) -> IssuedToken:
        payload = verify_access_token(token, purpose=PASSWORDLESS_PURPOSE)
        account = await self.users.get_by_id(payload.get("sub", ""))
        if account is None or not account.is_active or account.email != payload.get("email"):
            raise UnauthorizedError("Invalid token")
        return await self._issue(account)

    async def _issue(self, account: UserDocument) -> IssuedToken:
        account.last_login_at = datetime.now(timezone.utc)
        await self.users.save(account, account.id)
        return IssuedToken(access_token=token_for(account), user=account)
