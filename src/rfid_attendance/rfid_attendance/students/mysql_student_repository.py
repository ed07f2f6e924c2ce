from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, read_with_retry
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, card_id, name, class_name, roll_number, registered_at"


def _to_student(row: dict) -> Student:
    return Student(
        student_id=int(row["student_id"]),
        card_id=row["card_id"],
        name=row["name"],
        class_name=row.get("class_name"),
        roll_number=row.get("roll_number"),
        registered_at=row.get("registered_at"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _one(self, where: str, params: tuple) -> Optional[Student]:
        def query(cur) -> Optional[Student]:
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE {where}", params)
            row = fetchone(cur)
            return _to_student(row) if row else None

        return read_with_retry(self._conn_factory, query)

    def _many(self, where: str, params: tuple) -> list[Student]:
        def query(cur) -> list[Student]:
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE {where} ORDER BY name ASC", params)
            return [_to_student(r) for r in fetchall(cur)]

        return read_with_retry(self._conn_factory, query)

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._one("student_id=%s", (int(student_id),))

    def get_by_card_id(self, card_id: str) -> Optional[Student]:
        return self._one("card_id=%s", (card_id,))

    def list_all(self) -> Sequence[Student]:
        return self._many("1=1", ())

    def list_by_class(self, class_name: str) -> Sequence[Student]:
        return self._many("class_name=%s", (class_name,))

    def count(self) -> int:
        def query(cur) -> int:
            cur.execute("SELECT COUNT(*) AS n FROM students")
            return int(fetchone(cur)["n"])

        return read_with_retry(self._conn_factory, query)

    def create(self, *, card_id: str, name: str, class_name: Optional[str], roll_number: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO students(card_id, name, class_name, roll_number) VALUES(%s,%s,%s,%s)",
                (card_id, name, class_name, roll_number),
            )
            return int(cur.lastrowid)

    def update(
        self,
        student_id: int,
        *,
        card_id: str,
        name: str,
        class_name: Optional[str],
        roll_number: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET card_id=%s, name=%s, class_name=%s, roll_number=%s
                WHERE student_id=%s
                """,
                (card_id, name, class_name, roll_number, int(student_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (int(student_id),))
            return cur.rowcount > 0
