from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, read_with_retry
from .model import CurrentUser, SessionRecord
from .repository import SessionRepository


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, token: str, teacher_id: int, expires_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO sessions(token, teacher_id, expires_at) VALUES(%s,%s,%s)",
                (token, int(teacher_id), expires_at),
            )

    def get(self, token: str) -> Optional[SessionRecord]:
        def query(cur) -> Optional[SessionRecord]:
            cur.execute(
                """
                SELECT s.token, s.expires_at,
                       t.teacher_id, t.username, t.name, t.email, t.role
                FROM sessions s
                JOIN teachers t ON t.teacher_id = s.teacher_id
                WHERE s.token=%s
                """,
                (token,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return SessionRecord(
                token=row["token"],
                expires_at=row["expires_at"],
                user=CurrentUser(
                    teacher_id=int(row["teacher_id"]),
                    username=row["username"],
                    name=row["name"],
                    email=row["email"],
                    role=Role(row["role"]),
                ),
            )

        return read_with_retry(self._conn_factory, query)

    def delete(self, token: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sessions WHERE token=%s", (token,))
            return cur.rowcount > 0

    def delete_expired(self, *, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sessions WHERE expires_at <= %s", (now,))
            return int(cur.rowcount)
