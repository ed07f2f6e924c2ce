from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import SessionRecord


class SessionRepository(Protocol):
    def create(self, *, token: str, teacher_id: int, expires_at: datetime) -> None:
        raise NotImplementedError

    def get(self, token: str) -> Optional[SessionRecord]:
        raise NotImplementedError

    def delete(self, token: str) -> bool:
        raise NotImplementedError

    def delete_expired(self, *, now: datetime) -> int:
        """Purge sessions with expires_at <= now. Returns the number removed."""

        raise NotImplementedError
