"""API key management backed by MongoDB."""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from aerocms.core.clock import ensure_utc
from aerocms.core.database import database_manager
from aerocms.core.exceptions import ServiceUnavailableError


class APIKeyManager:
    """Persist and verify API keys backed by MongoDB."""

    def __init__(self, collection: str = "api_keys", database=None) -> None:
        self.collection_name = collection
        self._database = database

    async def _collection(self):
        database = self._database if self._database is not None else database_manager.database
        if database is None:
            return None
        return database[self.collection_name]

    async def create_key(
        self,
        *,
        name: str,
        email: str,
        roles: List[str],
        expires_in: Optional[timedelta] = None,
    ) -> Tuple[str, Dict[str, Any]]:
        token = secrets.token_urlsafe(32)
        now = datetime.now(timezone.utc)
        record: Dict[str, Any] = {
            "id": secrets.token_hex(8),
            "name": name,
            "email": email,
            "roles": list(roles),
            "hashed_key": self._hash(token),
            "created_at": now,
            "revoked": False,
        }
        if expires_in:
            record["expires_at"] = now + expires_in

        collection = await self._collection()
        if collection is None:
            raise ServiceUnavailableError("MongoDB unavailable; cannot persist API key.")
        await collection.insert_one(dict(record))
        record.pop("hashed_key")
        return token, record

    async def list_keys(self, include_revoked: bool = False) -> List[Dict[str, Any]]:
        collection = await self._collection()
        if collection is None:
            return []
        query: Dict[str, Any] = {}
        if not include_revoked:
            query["revoked"] = False
        cursor = collection.find(query).sort("created_at", -1)
        results: List[Dict[str, Any]] = []
        async for document in cursor:
            document.pop("hashed_key", None)
            document.pop("_id", None)
            results.append(document)
        return results

    async def revoke_key(self, key_id: str) -> bool:
        collection = await self._collection()
        if collection is None:
            return False
        result = await collection.update_one({"id": key_id}, {"$set": {"revoked": True}})
        return result.modified_count > 0

    async def resolve(self, raw_key: str) -> Optional[Dict[str, Any]]:
        collection = await self._collection()
        if collection is None:
            return None
        document = await collection.find_one({"hashed_key": self._hash(raw_key), "revoked": False})
        if not document:
            return None
        expires_at = ensure_utc(document.get("expires_at"))
        if expires_at and expires_at < datetime.now(timezone.utc):
            await collection.update_one({"id": document["id"]}, {"$set": {"revoked": True}})
            return None
        document.pop("hashed_key", None)
        document.pop("_id", None)
        return document

    def _hash(self, value: str) -> str:
        return hashlib.sha256(value.encode("utf-8")).hexdigest()


api_key_manager = APIKeyManager()

__all__ = ["api_key_manager", "APIKeyManager"]
