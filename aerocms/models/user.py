"""CMS users and roles."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from aerocms.models.base import CmsDocument


class CmsRoles:
    ADMIN = "Admin"
    CREATOR = "Creator"
    CONTRIBUTOR = "Contributor"
    VIEWER = "Viewer"

    ALL = (ADMIN, CREATOR, CONTRIBUTOR, VIEWER)
    EDITORS = (ADMIN, CREATOR, CONTRIBUTOR)
    PUBLISHERS = (ADMIN, CREATOR)


class UserDocument(CmsDocument):
    email: str
    display_name: str = ""
    password_hash: Optional[str] = None
    roles: List[str] = Field(default_factory=lambda: [CmsRoles.VIEWER])
    is_active: bool = True
    last_login_at: Optional[datetime] = None


class User(BaseModel):
    """Authenticated principal attached to a request."""

    id: str
    email: str
    name: str = ""
    roles: List[str] = Field(default_factory=list)
    auth_method: str = "jwt"

    def has_any_role(self, *roles: str) -> bool:
        if CmsRoles.ADMIN in self.roles:
            return True
        return any(role in self.roles for role in roles)
