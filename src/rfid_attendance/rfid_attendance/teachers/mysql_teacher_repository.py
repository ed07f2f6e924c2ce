from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, read_with_retry
from .model import Teacher
from .repository import TeacherRepository

_COLUMNS = "teacher_id, username, password_hash, name, email, role, created_at, last_login"


def _to_teacher(row: dict) -> Teacher:
    return Teacher(
        teacher_id=int(row["teacher_id"]),
        username=row["username"],
        password_hash=row["password_hash"],
        name=row["name"],
        email=row["email"],
        role=Role(row["role"]),
        created_at=row.get("created_at"),
        last_login=row.get("last_login"),
    )


class MySQLTeacherRepository(TeacherRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_where(self, column: str, value) -> Optional[Teacher]:
        def query(cur) -> Optional[Teacher]:
            cur.execute(f"SELECT {_COLUMNS} FROM teachers WHERE {column}=%s", (value,))
            row = fetchone(cur)
            return _to_teacher(row) if row else None

        return read_with_retry(self._conn_factory, query)

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        return self._get_where("teacher_id", int(teacher_id))

    def get_by_username(self, username: str) -> Optional[Teacher]:
        return self._get_where("username", username)

    def get_by_email(self, email: str) -> Optional[Teacher]:
        return self._get_where("email", email)

    def list_all(self) -> Sequence[Teacher]:
        def query(cur) -> list[Teacher]:
            cur.execute(f"SELECT {_COLUMNS} FROM teachers ORDER BY name ASC")
            return [_to_teacher(r) for r in fetchall(cur)]

        return read_with_retry(self._conn_factory, query)

    def count(self) -> int:
        def query(cur) -> int:
            cur.execute("SELECT COUNT(*) AS n FROM teachers")
            return int(fetchone(cur)["n"])

        return read_with_retry(self._conn_factory, query)

    def create(self, *, username: str, password_hash: str, name: str, email: str, role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teachers(username, password_hash, name, email, role)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (username, password_hash, name, email, role.value),
            )
            return int(cur.lastrowid)

    def update_profile(self, teacher_id: int, *, name: str, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE teachers SET name=%s, email=%s WHERE teacher_id=%s",
                (name, email, int(teacher_id)),
            )
            return cur.rowcount > 0

    def update_role(self, teacher_id: int, *, role: Role) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE teachers SET role=%s WHERE teacher_id=%s", (role.value, int(teacher_id)))
            return cur.rowcount > 0

    def update_last_login(self, teacher_id: int, *, when: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE teachers SET last_login=%s WHERE teacher_id=%s", (when, int(teacher_id)))

    def delete_by_id(self, teacher_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM teachers WHERE teacher_id=%s", (int(teacher_id),))
            return cur.rowcount > 0
