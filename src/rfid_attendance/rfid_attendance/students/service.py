from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.validators import optional_text, require_non_empty
from ..core.constants import (
    DEFAULT_STUDENT_HISTORY_LIMIT,
    MAX_CARD_ID_LENGTH,
    MAX_CLASS_NAME_LENGTH,
    MAX_NAME_LENGTH,
    MAX_ROLL_NUMBER_LENGTH,
)
from ..core.exceptions import DomainError, DuplicateError, NotFoundError
from .model import BulkImportResult, Student
from .repository import StudentRepository

logger = logging.getLogger("rfid_attendance.students")


class StudentService:
    """Use case: register and maintain students and their badge ids."""

    def __init__(self, students: StudentRepository, attendance: AttendanceRepository):
        self._students = students
        self._attendance = attendance

    def register(
        self,
        *,
        card_id: str,
        name: str,
        class_name: Optional[str] = None,
        roll_number: Optional[str] = None,
    ) -> Student:
        card_id = require_non_empty(card_id, "Card ID", max_len=MAX_CARD_ID_LENGTH)
        name = require_non_empty(name, "Student name", max_len=MAX_NAME_LENGTH)

        if self._students.get_by_card_id(card_id):
            raise DuplicateError("Card ID already registered")

        student_id = self._students.create(
            card_id=card_id,
            name=name,
            class_name=optional_text(class_name, "Class name", max_len=MAX_CLASS_NAME_LENGTH),
            roll_number=optional_text(roll_number, "Roll number", max_len=MAX_ROLL_NUMBER_LENGTH),
        )
        logger.info("student registered: %s (%s)", name, card_id)
        return self._require(student_id)

    def list_all(self) -> Sequence[Student]:
        return self._students.list_all()

    def list_by_class(self, class_name: str) -> Sequence[Student]:
        return self._students.list_by_class(class_name)

    def count(self) -> int:
        return self._students.count()

    def list_with_stats(self) -> list[dict]:
        out: list[dict] = []
        for s in self._students.list_all():
            last = self._attendance.get_last_by_student(s.student_id)
            row = s.to_dict()
            row["stats"] = {
                "total_attendance": self._attendance.count_by_student(s.student_id),
                "last_seen": last.scanned_at.isoformat() if last else None,
            }
            out.append(row)
        return out

    def get_details(self, student_id: int, *, history_limit: int = DEFAULT_STUDENT_HISTORY_LIMIT) -> dict:
        student = self._require(student_id)
        row = student.to_dict()
        row["stats"] = {
            "total_attendance": self._attendance.count_by_student(student.student_id),
            "recent_attendance": [
                r.to_dict() for r in self._attendance.list_by_student(student.student_id, limit=history_limit)
            ],
        }
        return row

    def update(
        self,
        student_id: int,
        *,
        name: str,
        card_id: Optional[str] = None,
        class_name: Optional[str] = None,
        roll_number: Optional[str] = None,
    ) -> Student:
        name = require_non_empty(name, "Student name", max_len=MAX_NAME_LENGTH)
        existing = self._require(student_id)

        new_card_id = optional_text(card_id, "Card ID", max_len=MAX_CARD_ID_LENGTH) or existing.card_id
        if new_card_id != existing.card_id:
            holder = self._students.get_by_card_id(new_card_id)
            if holder and holder.student_id != existing.student_id:
                raise DuplicateError("This card ID is already registered to another student")

        self._students.update(
            existing.student_id,
            card_id=new_card_id,
            name=name,
            class_name=optional_text(class_name, "Class name", max_len=MAX_CLASS_NAME_LENGTH),
            roll_number=optional_text(roll_number, "Roll number", max_len=MAX_ROLL_NUMBER_LENGTH),
        )
        logger.info("student updated: %s (id=%s)", name, existing.student_id)
        return self._require(existing.student_id)

    def delete(self, student_id: int) -> None:
        student = self._require(student_id)
        # Attendance rows keep their copied name/class for history.
        if not self._students.delete_by_id(student.student_id):
            raise NotFoundError("Student not found")
        logger.info("student deleted: %s (id=%s)", student.name, student.student_id)

    def bulk_import(self, rows: Iterable[Mapping]) -> BulkImportResult:
        """Register already-parsed rows one by one; bad rows are reported, not fatal."""

        result = BulkImportResult()
        for index, raw in enumerate(rows, start=1):
            if not isinstance(raw, Mapping):
                result.fail(index, "Each student must be an object")
                continue
            card_id = optional_text(raw.get("cardId") or raw.get("card_id"))
            name = optional_text(raw.get("name"))
            if not card_id or not name:
                result.fail(index, "Missing cardId or name")
                continue
            try:
                self.register(
                    card_id=card_id,
                    name=name,
                    class_name=raw.get("studentClass") or raw.get("class_name"),
                    roll_number=raw.get("rollNumber") or raw.get("roll_number"),
                )
                result.success += 1
            except DomainError as e:
                result.fail(index, str(e), card_id=card_id)

        logger.info("bulk import: %d success, %d failed", result.success, result.failed)
        return result

    def _require(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")
        return student
