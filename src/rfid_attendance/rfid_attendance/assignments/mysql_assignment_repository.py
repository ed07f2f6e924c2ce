from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

import mysql.connector

from ..core.constants import ASSIGNMENT_LOCK_NAME, ASSIGNMENT_LOCK_TIMEOUT_SECONDS
from ..core.exceptions import StorageError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, read_with_retry
from .model import Assignment
from .repository import AssignmentRepository, AssignmentStore

logger = logging.getLogger("rfid_attendance.storage")

_SELECT = """
    SELECT tc.teacher_id, tc.class_name, tc.is_class_teacher, tc.assigned_at, t.name AS teacher_name
    FROM teacher_classes tc
    JOIN teachers t ON t.teacher_id = tc.teacher_id
"""


def _to_assignment(row: dict) -> Assignment:
    return Assignment(
        teacher_id=int(row["teacher_id"]),
        class_name=row["class_name"],
        is_class_teacher=bool(row["is_class_teacher"]),
        teacher_name=row.get("teacher_name"),
        assigned_at=row.get("assigned_at"),
    )


class _CursorAssignmentStore(AssignmentStore):
    """AssignmentStore bound to an open cursor (and therefore to its transaction)."""

    def __init__(self, cur):
        self._cur = cur

    def _one(self, where: str, params: tuple) -> Optional[Assignment]:
        self._cur.execute(f"{_SELECT} WHERE {where}", params)
        row = fetchone(self._cur)
        return _to_assignment(row) if row else None

    def _many(self, where: str, params: tuple) -> list[Assignment]:
        self._cur.execute(
            f"{_SELECT} WHERE {where} ORDER BY tc.class_name ASC, tc.is_class_teacher DESC, t.name ASC",
            params,
        )
        return [_to_assignment(r) for r in fetchall(self._cur)]

    def get(self, *, teacher_id: int, class_name: str) -> Optional[Assignment]:
        return self._one("tc.teacher_id=%s AND tc.class_name=%s", (int(teacher_id), class_name))

    def get_by_teacher(self, teacher_id: int) -> Sequence[Assignment]:
        return self._many("tc.teacher_id=%s", (int(teacher_id),))

    def get_by_class(self, class_name: str) -> Sequence[Assignment]:
        return self._many("tc.class_name=%s", (class_name,))

    def get_all(self) -> Sequence[Assignment]:
        return self._many("1=1", ())

    def get_ct_assignment(self, teacher_id: int) -> Optional[Assignment]:
        return self._one("tc.teacher_id=%s AND tc.is_class_teacher=1", (int(teacher_id),))

    def get_class_ct(self, class_name: str) -> Optional[Assignment]:
        return self._one("tc.class_name=%s AND tc.is_class_teacher=1", (class_name,))

    def upsert(self, *, teacher_id: int, class_name: str, is_class_teacher: bool) -> None:
        self._cur.execute(
            """
            INSERT INTO teacher_classes(teacher_id, class_name, is_class_teacher)
            VALUES(%s,%s,%s)
            ON DUPLICATE KEY UPDATE is_class_teacher=VALUES(is_class_teacher)
            """,
            (int(teacher_id), class_name, 1 if is_class_teacher else 0),
        )

    def remove(self, *, teacher_id: int, class_name: str) -> bool:
        self._cur.execute(
            "DELETE FROM teacher_classes WHERE teacher_id=%s AND class_name=%s",
            (int(teacher_id), class_name),
        )
        return self._cur.rowcount > 0


class MySQLAssignmentRepository(AssignmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[AssignmentStore]:
        # GET_LOCK serializes assignment mutations across all app processes; the
        # unique indexes on teacher_classes are the last line if it is bypassed.
        with db_cursor(self._conn_factory) as (conn, cur):
            cur.execute(
                "SELECT GET_LOCK(%s, %s) AS acquired",
                (ASSIGNMENT_LOCK_NAME, ASSIGNMENT_LOCK_TIMEOUT_SECONDS),
            )
            row = fetchone(cur)
            if not row or row.get("acquired") != 1:
                logger.error("could not acquire assignment lock %r", ASSIGNMENT_LOCK_NAME)
                raise StorageError("Assignment store is busy, try again", transient=True)

            try:
                # Fresh READ COMMITTED transaction so checks see rows committed
                # by whoever held the lock before us.
                conn.commit()
                conn.start_transaction(isolation_level="READ COMMITTED")
                yield _CursorAssignmentStore(cur)
                conn.commit()
            finally:
                try:
                    cur.execute("SELECT RELEASE_LOCK(%s)", (ASSIGNMENT_LOCK_NAME,))
                    cur.fetchall()
                except mysql.connector.Error as e:
                    # The lock dies with the connection anyway.
                    logger.warning("could not release assignment lock: %s", e)

    def _read(self, fn):
        return read_with_retry(self._conn_factory, lambda cur: fn(_CursorAssignmentStore(cur)))

    def get(self, *, teacher_id: int, class_name: str) -> Optional[Assignment]:
        return self._read(lambda s: s.get(teacher_id=teacher_id, class_name=class_name))

    def get_by_teacher(self, teacher_id: int) -> Sequence[Assignment]:
        return self._read(lambda s: s.get_by_teacher(teacher_id))

    def get_by_class(self, class_name: str) -> Sequence[Assignment]:
        return self._read(lambda s: s.get_by_class(class_name))

    def get_all(self) -> Sequence[Assignment]:
        return self._read(lambda s: s.get_all())

    def get_ct_assignment(self, teacher_id: int) -> Optional[Assignment]:
        return self._read(lambda s: s.get_ct_assignment(teacher_id))

    def get_class_ct(self, class_name: str) -> Optional[Assignment]:
        return self._read(lambda s: s.get_class_ct(class_name))

    def upsert(self, *, teacher_id: int, class_name: str, is_class_teacher: bool) -> None:
        with self.transaction() as store:
            store.upsert(teacher_id=teacher_id, class_name=class_name, is_class_teacher=is_class_teacher)

    def remove(self, *, teacher_id: int, class_name: str) -> bool:
        with self.transaction() as store:
            return store.remove(teacher_id=teacher_id, class_name=class_name)
