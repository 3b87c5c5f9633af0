"""Slug generation."""

from __future__ import annotations

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def generate_slug(text: str) -> str:
    """Lower-case ASCII slug: ``"Hello, World!"`` becomes ``"hello-world"``."""

    folded = unicodedata.normalize("NFKD", text or "").encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub("-", folded.lower()).strip("-")


def normalise_path(slug: str) -> str:
    """Ensure a page slug starts with exactly one ``/``."""

    return "/" + (slug or "").strip().lstrip("/")
