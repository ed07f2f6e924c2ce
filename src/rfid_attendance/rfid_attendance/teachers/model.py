from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Teacher:
    """Domain entity: an authenticatable account (admin or teacher).

    Note: Plain data object, no DB access here.
    """

    teacher_id: int
    username: str
    password_hash: str
    name: str
    email: str
    role: Role
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_public(self) -> dict:
        return {
            "id": self.teacher_id,
            "username": self.username,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_login": self.last_login.isoformat() if self.last_login else None,
        }
