"""Shared fixtures: an in-memory stand-in for a motor database."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from aerocms.core.clock import FixedClock

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for key, expected in query.items():
        actual = document.get(key)
        if isinstance(expected, dict) and "$in" in expected:
            if actual not in expected["$in"]:
                return False
        elif isinstance(actual, list) and not isinstance(expected, list):
            if expected not in actual:
                return False
        elif actual != expected:
            return False
    return True


def _sort_key(value: Any):
    return (value is None, value if value is not None else 0)


class StubCursor:
    def __init__(self, documents: List[Dict[str, Any]]) -> None:
        self._documents = documents

    def sort(self, key, direction=None):
        order = [(key, direction or 1)] if isinstance(key, str) else list(key)
        for field, field_direction in reversed(order):
            self._documents.sort(key=lambda doc: _sort_key(doc.get(field)), reverse=field_direction < 0)
        return self

    def skip(self, count: int):
        self._documents = self._documents[count:]
        return self

    def limit(self, count: int):
        if count:
            self._documents = self._documents[:count]
        return self

    def __aiter__(self):
        self._iterator = iter(self._documents)
        return self

    async def __anext__(self):
        try:
            return next(self._iterator)
        except StopIteration:
            raise StopAsyncIteration


class StubCollection:
    def __init__(self) -> None:
        self.documents: List[Dict[str, Any]] = []

    def find(self, query=None):
        return StubCursor([copy.deepcopy(doc) for doc in self.documents if _matches(doc, query or {})])

    async def find_one(self, query):
        for document in self.documents:
            if _matches(document, query):
                return copy.deepcopy(document)
        return None

    async def count_documents(self, query):
        return sum(1 for doc in self.documents if _matches(doc, query))

    async def insert_one(self, document):
        document.setdefault("_id", f"oid-{len(self.documents) + 1}")
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def replace_one(self, query, replacement, upsert=False):
        for index, document in enumerate(self.documents):
            if _matches(document, query):
                self.documents[index] = copy.deepcopy(replacement)
                return SimpleNamespace(matched_count=1, modified_count=1)
        if upsert:
            self.documents.append(copy.deepcopy(replacement))
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def update_one(self, query, update):
        for document in self.documents:
            if _matches(document, query):
                document.update(update.get("$set", {}))
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, query):
        for index, document in enumerate(self.documents):
            if _matches(document, query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def delete_many(self, query):
        before = len(self.documents)
        self.documents = [doc for doc in self.documents if not _matches(doc, query)]
        return SimpleNamespace(deleted_count=before - len(self.documents))


class StubRedis:
    def __init__(self) -> None:
        self.values: Dict[str, Any] = {}
        self.expiry: Dict[str, Any] = {}

    async def ttl(self, key):
        if key not in self.values:
            return -2
        return self.expiry.get(key, -1)

    async def incr(self, key):
        self.values[key] = int(self.values.get(key, 0)) + 1
        return self.values[key]

    async def expire(self, key, seconds):
        self.expiry[key] = seconds

    async def get(self, key):
        return self.values.get(key)

    async def set(self, key, value, ex=None):
        self.values[key] = value
        self.expiry[key] = ex

    async def delete(self, key):
        self.values.pop(key, None)


class StubDatabase:
    def __init__(self) -> None:
        self.collections: Dict[str, StubCollection] = {}

    def __getitem__(self, name: str) -> StubCollection:
        return self.collections.setdefault(name, StubCollection())


@pytest.fixture
def database() -> StubDatabase:
    return StubDatabase()


@pytest.fixture
def redis_stub() -> StubRedis:
    return StubRedis()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def past() -> datetime:
    return NOW - timedelta(days=1)


@pytest.fixture
def future() -> datetime:
    return NOW + timedelta(days=1)
