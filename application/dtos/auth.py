"""
Authenticated caller as seen by this service.

Tokens are issued by the Auth service; we only read identity and roles.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Role(str, Enum):
    ADMIN = "Admin"
    RECEPTIONIST = "Receptionist"
    MEMBER = "Member"


class Principal(BaseModel):
    subject: str
    username: Optional[str] = None
    roles: set[str] = Field(default_factory=set)

    def has_any_role(self, *roles: Role | str) -> bool:
        wanted = {r.value if isinstance(r, Role) else r for r in roles}
        return bool(self.roles & wanted)
