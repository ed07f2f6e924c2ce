from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import CapabilityKind, Role


@dataclass(frozen=True)
class CurrentUser:
    """Identity resolved from a session token and attached to the request."""

    teacher_id: int
    username: str
    name: str
    email: str
    role: Role

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
        }


@dataclass(frozen=True)
class SessionRecord:
    """A stored session joined with its owning account."""

    token: str
    expires_at: datetime
    user: CurrentUser


@dataclass(frozen=True)
class SessionGrant:
    """What a successful login hands back to the caller."""

    token: str
    expires_at: datetime
    user: CurrentUser


@dataclass(frozen=True)
class Capability:
    kind: CapabilityKind
    class_name: Optional[str] = None

    @classmethod
    def admin_only(cls) -> "Capability":
        return cls(CapabilityKind.ADMIN_ONLY)

    @classmethod
    def class_teacher_role(cls) -> "Capability":
        return cls(CapabilityKind.CLASS_TEACHER_ROLE)

    @classmethod
    def has_class_access(cls, class_name: str) -> "Capability":
        return cls(CapabilityKind.HAS_CLASS_ACCESS, class_name)

    @classmethod
    def can_mark_attendance(cls, class_name: Optional[str] = None) -> "Capability":
        return cls(CapabilityKind.CAN_MARK_ATTENDANCE, class_name)


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a passed authorization check.

    is_class_teacher_for_class is only meaningful for class-scoped checks.
    """

    user: CurrentUser
    capability: Capability
    is_class_teacher_for_class: bool = False

    @property
    def sees_full_class_detail(self) -> bool:
        return self.user.is_admin or self.is_class_teacher_for_class
