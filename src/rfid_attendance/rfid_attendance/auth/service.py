from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..core.constants import SESSION_TOKEN_BYTES, SESSION_TTL_HOURS
from ..core.exceptions import AuthenticationError, ValidationError
from ..teachers.repository import TeacherRepository
from .model import CurrentUser, SessionGrant
from .repository import SessionRepository

logger = logging.getLogger("rfid_attendance.auth")

_GENERIC_LOGIN_FAILURE = "Invalid username or password"


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    return generate_password_hash(secrets.token_hex(16))


def _new_token() -> str:
    return secrets.token_hex(SESSION_TOKEN_BYTES)


class AuthService:
    """Use case: login / logout and resolving a session token to an identity."""

    def __init__(
        self,
        teachers: TeacherRepository,
        sessions: SessionRepository,
        *,
        session_ttl_hours: int = SESSION_TTL_HOURS,
        token_factory: Callable[[], str] = _new_token,
    ):
        self._teachers = teachers
        self._sessions = sessions
        self._ttl = timedelta(hours=int(session_ttl_hours))
        self._token_factory = token_factory

    @property
    def session_ttl(self) -> timedelta:
        return self._ttl

    def login(self, username: str, password: str, *, now: Optional[datetime] = None) -> SessionGrant:
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Username and password are required")

        teacher = self._teachers.get_by_username(username)

        # Unknown usernames are checked against a throwaway hash so both failure
        # paths do the same work.
        password_hash = teacher.password_hash if teacher else _dummy_password_hash()
        try:
            ok = check_password_hash(password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not teacher or not ok:
            logger.info("login failed for %r: %s", username, "unknown username" if not teacher else "bad password")
            raise AuthenticationError(_GENERIC_LOGIN_FAILURE)

        now = now or now_local()
        token = self._token_factory()
        expires_at = now + self._ttl
        self._sessions.create(token=token, teacher_id=teacher.teacher_id, expires_at=expires_at)
        self._teachers.update_last_login(teacher.teacher_id, when=now)

        logger.info("user logged in: %s (%s)", teacher.username, teacher.role.value)
        return SessionGrant(
            token=token,
            expires_at=expires_at,
            user=CurrentUser(
                teacher_id=teacher.teacher_id,
                username=teacher.username,
                name=teacher.name,
                email=teacher.email,
                role=teacher.role,
            ),
        )

    def authenticate(self, token: Optional[str], *, now: Optional[datetime] = None) -> CurrentUser:
        if not token:
            raise AuthenticationError("Not authenticated")

        now = now or now_local()
        purged = self._sessions.delete_expired(now=now)
        if purged:
            logger.debug("purged %d expired session(s)", purged)

        record = self._sessions.get(token)
        if not record or record.expires_at <= now:
            raise AuthenticationError("Invalid or expired session")
        return record.user

    def logout(self, token: Optional[str]) -> bool:
        if not token:
            return False
        removed = self._sessions.delete(token)
        if removed:
            logger.info("session closed")
        return removed
