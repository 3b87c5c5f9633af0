"""Success/failure wrapper returned by CMS services."""

from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from aerocms.core.exceptions import ApplicationError, ConflictError, NotFoundError

T = TypeVar("T")

NOT_FOUND = "not_found"
CONFLICT = "conflict"
INVALID = "invalid"


class HandlerResult(BaseModel, Generic[T]):
    """Outcome of a service operation.

    Expected failures (missing documents, duplicate slugs, illegal workflow
    transitions) are reported through ``errors`` rather than raised, so the
    HTTP layer can decide how to surface them.
    """

    success: bool = True
    errors: List[str] = Field(default_factory=list)
    value: Optional[T] = None
    error_code: Optional[str] = None

    @classmethod
    def ok(cls, value: Optional[T] = None) -> "HandlerResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, *errors: str, code: Optional[str] = None) -> "HandlerResult[T]":
        return cls(success=False, errors=list(errors), error_code=code)

    @property
    def message(self) -> str:
        return "; ".join(self.errors)

    def raise_for_errors(self) -> Optional[T]:
        """Return ``value`` on success, otherwise raise the matching application error."""

        if self.success:
            return self.value
        if self.error_code == NOT_FOUND:
            raise NotFoundError(self.message)
        if self.error_code == CONFLICT:
            raise ConflictError(self.message)
        raise ApplicationError(self.message or "Operation failed", code=self.error_code or INVALID)


__all__ = ["HandlerResult", "NOT_FOUND", "CONFLICT", "INVALID"]
