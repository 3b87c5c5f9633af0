"""Token and password primitives for Aero CMS."""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from aerocms.core.config import settings
from aerocms.core.exceptions import UnauthorizedError

PASSWORDLESS_PURPOSE = "passwordless"
_HASH_SCHEME = "pbkdf2_sha256"


def create_access_token(
    subject: str,
    expires_delta: timedelta | None = None,
    claims: Optional[Dict[str, Any]] = None,
) -> str:
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload: Dict[str, Any] = {
        "sub": subject,
        "exp": expire,
        "iat": issued_at,
    }
    if claims:
        payload.update(claims)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_access_token(token: str, *, purpose: Optional[str] = None) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise UnauthorizedError("Invalid token") from exc
    if payload.get("purpose") != purpose:
        raise UnauthorizedError("Invalid token")
    return payload


def create_passwordless_token(subject: str, email: str) -> str:
    """Short-lived magic-link token; only accepted by the passwordless exchange."""

    return create_access_token(
        subject,
        expires_delta=timedelta(minutes=settings.PASSWORDLESS_TOKEN_EXPIRE_MINUTES),
        claims={"email": email, "purpose": PASSWORDLESS_PURPOSE},
    )


def hash_password(password: str, *, iterations: Optional[int] = None) -> str:
    rounds = iterations or settings.PASSWORD_HASH_ITERATIONS
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    return "$".join(
        [
            _HASH_SCHEME,
            str(rounds),
            base64.b64encode(salt).decode("ascii"),
            base64.b64encode(digest).decode("ascii"),
        ]
    )


def verify_password(password: str, encoded: Optional[str]) -> bool:
    if not encoded:
        return False
    try:
        scheme, rounds, salt, expected = encoded.split("$", 3)
        iterations = int(rounds)
        salt_bytes = base64.b64decode(salt, validate=True)
    except ValueError:
        # binascii.Error is a ValueError
        return False
    if scheme != _HASH_SCHEME or iterations <= 0:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt_bytes, iterations)
    return hmac.compare_digest(base64.b64encode(digest), expected.encode("utf-8"))


__all__ = [
    "PASSWORDLESS_PURPOSE",
    "create_access_token",
    "create_passwordless_token",
    "hash_password",
    "verify_access_token",
    "verify_password",
]
