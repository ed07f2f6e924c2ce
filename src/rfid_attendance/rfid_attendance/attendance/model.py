from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ScanStatus
from ..students.model import Student


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one badge scan.

    student_name/class_name are copied at scan time so history survives student edits.
    """

    attendance_id: int
    card_id: str
    student_id: Optional[int]
    student_name: str
    class_name: Optional[str]
    scanned_at: datetime
    recorded_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "card_id": self.card_id,
            "student_id": self.student_id,
            "student_name": self.student_name,
            "class_name": self.class_name,
            "timestamp": self.scanned_at.isoformat(),
            "recorded_at": self.recorded_at.isoformat() if self.recorded_at else None,
        }


@dataclass(frozen=True)
class AttendanceStats:
    total_records: int
    unique_students: int
    today_count: int
    first_record: Optional[datetime] = None
    last_record: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "total_records": self.total_records,
            "unique_students": self.unique_students,
            "today_count": self.today_count,
            "first_record": self.first_record.isoformat() if self.first_record else None,
            "last_record": self.last_record.isoformat() if self.last_record else None,
        }


@dataclass(frozen=True)
class ScanResult:
    attendance_id: int
    card_id: str
    student: Optional[Student]
    status: ScanStatus
    scanned_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "card_id": self.card_id,
            "student": self.student.to_dict() if self.student else None,
            "status": self.status.value,
            "timestamp": self.scanned_at.isoformat(),
        }
