from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, read_with_retry
from .model import AttendanceRecord, AttendanceStats
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, card_id, student_id, student_name, class_name, scanned_at, recorded_at"


def _to_record(row: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(row["attendance_id"]),
        card_id=row["card_id"],
        student_id=int(row["student_id"]) if row.get("student_id") is not None else None,
        student_name=row["student_name"],
        class_name=row.get("class_name"),
        scanned_at=row["scanned_at"],
        recorded_at=row.get("recorded_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _many(self, sql: str, params: tuple) -> list[AttendanceRecord]:
        def query(cur) -> list[AttendanceRecord]:
            cur.execute(sql, params)
            return [_to_record(r) for r in fetchall(cur)]

        return read_with_retry(self._conn_factory, query)

    def create(
        self,
        *,
        card_id: str,
        student_id: Optional[int],
        student_name: str,
        class_name: Optional[str],
        scanned_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(card_id, student_id, student_name, class_name, scanned_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (card_id, student_id, student_name, class_name, scanned_at),
            )
            return int(cur.lastrowid)

    def list_latest(self, *, limit: int) -> Sequence[AttendanceRecord]:
        return self._many(
            f"SELECT {_COLUMNS} FROM attendance ORDER BY recorded_at DESC, attendance_id DESC LIMIT %s",
            (int(limit),),
        )

    def list_by_class(self, class_name: str, *, limit: int) -> Sequence[AttendanceRecord]:
        return self._many(
            f"SELECT {_COLUMNS} FROM attendance WHERE class_name=%s ORDER BY scanned_at DESC LIMIT %s",
            (class_name, int(limit)),
        )

    def list_by_class_on(self, class_name: str, *, day: date) -> Sequence[AttendanceRecord]:
        return self._many(
            f"""
            SELECT {_COLUMNS} FROM attendance
            WHERE class_name=%s AND DATE(scanned_at)=%s
            ORDER BY scanned_at DESC
            """,
            (class_name, day),
        )

    def list_by_student(self, student_id: int, *, limit: int) -> Sequence[AttendanceRecord]:
        return self._many(
            f"SELECT {_COLUMNS} FROM attendance WHERE student_id=%s ORDER BY scanned_at DESC LIMIT %s",
            (int(student_id), int(limit)),
        )

    def count_by_student(self, student_id: int) -> int:
        def query(cur) -> int:
            cur.execute("SELECT COUNT(*) AS n FROM attendance WHERE student_id=%s", (int(student_id),))
            return int(fetchone(cur)["n"])

        return read_with_retry(self._conn_factory, query)

    def get_last_by_student(self, student_id: int) -> Optional[AttendanceRecord]:
        rows = self.list_by_student(student_id, limit=1)
        return rows[0] if rows else None

    def delete_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance")
            return int(cur.rowcount)

    def stats(self, *, today: date) -> AttendanceStats:
        def query(cur) -> AttendanceStats:
            cur.execute(
                """
                SELECT
                    COUNT(*) AS total_records,
                    COUNT(DISTINCT card_id) AS unique_students,
                    COALESCE(SUM(DATE(scanned_at) = %s), 0) AS today_count,
                    MIN(scanned_at) AS first_record,
                    MAX(scanned_at) AS last_record
                FROM attendance
                """,
                (today,),
            )
            r = fetchone(cur) or {}
            return AttendanceStats(
                total_records=int(r.get("total_records") or 0),
                unique_students=int(r.get("unique_students") or 0),
                today_count=int(r.get("today_count") or 0),
                first_record=r.get("first_record"),
                last_record=r.get("last_record"),
            )

        return read_with_retry(self._conn_factory, query)
