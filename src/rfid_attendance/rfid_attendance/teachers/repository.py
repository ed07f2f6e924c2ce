from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Teacher


class TeacherRepository(Protocol):
    """Repository interface for Teacher accounts.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Teacher]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Teacher]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Teacher]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def create(self, *, username: str, password_hash: str, name: str, email: str, role: Role) -> int:
        raise NotImplementedError

    def update_profile(self, teacher_id: int, *, name: str, email: str) -> bool:
        raise NotImplementedError

    def update_role(self, teacher_id: int, *, role: Role) -> bool:
        raise NotImplementedError

    def update_last_login(self, teacher_id: int, *, when: datetime) -> None:
        raise NotImplementedError

    def delete_by_id(self, teacher_id: int) -> bool:
        """Delete the account; assignments and sessions cascade."""

        raise NotImplementedError
