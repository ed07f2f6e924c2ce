from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, AttendanceStats


class AttendanceRepository(Protocol):
    def create(
        self,
        *,
        card_id: str,
        student_id: Optional[int],
        student_name: str,
        class_name: Optional[str],
        scanned_at: datetime,
    ) -> int:
        raise NotImplementedError

    def list_latest(self, *, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_by_class(self, class_name: str, *, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_by_class_on(self, class_name: str, *, day: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_by_student(self, student_id: int, *, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_by_student(self, student_id: int) -> int:
        raise NotImplementedError

    def get_last_by_student(self, student_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def delete_all(self) -> int:
        raise NotImplementedError

    def stats(self, *, today: date) -> AttendanceStats:
        raise NotImplementedError
