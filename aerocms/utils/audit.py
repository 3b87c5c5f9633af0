"""Audit logging utilities."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from functools import wraps
from inspect import iscoroutinefunction
from typing import Any, Callable, Dict

logger = logging.getLogger("aerocms.audit")


class AuditLogger:
    """Structured audit logger."""

    def record(self, action: str, actor: str, details: Dict[str, Any]) -> None:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "action": action,
            "actor": actor,
            "details": details,
        }
        logger.info(json.dumps(payload, default=str))


audit_logger = AuditLogger()


def audit_log(func: Callable) -> Callable:
    """Decorator that emits structured audit records around function execution."""

    if iscoroutinefunction(func):

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            user_id = _resolve_user(kwargs)
            metadata = _build_metadata(func, kwargs)
            audit_logger.record("start", user_id, metadata)
            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                audit_logger.record("error", user_id, metadata | {"error": str(exc)})
                raise
            audit_logger.record("success", user_id, metadata)
            return result

        return async_wrapper

    @wraps(func)
    def sync_wrapper(*args, **kwargs):
        user_id = _resolve_user(kwargs)
        metadata = _build_metadata(func, kwargs)
        audit_logger.record("start", user_id, metadata)
        try:
            result = func(*args, **kwargs)
        except Exception as exc:  # pragma: no cover - sync branch rarely used
            audit_logger.record("error", user_id, metadata | {"error": str(exc)})
            raise
        audit_logger.record("success", user_id, metadata)
        return result

    return sync_wrapper


def _resolve_user(kwargs: Dict[str, Any]) -> str:
    user = kwargs.get("current_user") or kwargs.get("user")
    if user and getattr(user, "id", None):
        return str(user.id)
    if isinstance(user, str):
        return user
    return "anonymous"


def _build_metadata(func: Callable, kwargs: Dict[str, Any]) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {
        "action": func.__qualname__,
    }
    for key in ("content_id", "page_id", "media_id", "redirect_id", "key_id"):
        if key in kwargs:
            metadata[key] = kwargs[key]
    payload = kwargs.get("payload")
    if payload is not None and hasattr(payload, "model_dump"):
        metadata["payload_keys"] = sorted(payload.model_dump(exclude_unset=True).keys())
    elif isinstance(payload, dict):
        metadata["payload_keys"] = sorted(payload.keys())
    return metadata


__all__ = ["audit_logger", "audit_log", "AuditLogger"]
