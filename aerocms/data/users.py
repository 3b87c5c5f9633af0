"""User repository."""

from __future__ import annotations

from typing import Optional

from aerocms.data.base import ASCENDING, BaseRepository
from aerocms.models.user import UserDocument


class UserRepository(BaseRepository[UserDocument]):
    collection_name = "users"
    model = UserDocument
    default_sort = (("email", ASCENDING),)

    async def get_by_email(self, email: str) -> Optional[UserDocument]:
        return await self.find_one({"email": email.strip().lower()})
