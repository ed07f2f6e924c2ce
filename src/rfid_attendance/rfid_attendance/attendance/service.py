from __future__ import annotations

import hmac
import logging
from datetime import date, datetime
from typing import Optional, Sequence, Union

from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.validators import require_non_empty
from ..core.constants import (
    DEFAULT_ATTENDANCE_LIMIT,
    LATEST_ATTENDANCE_LIMIT,
    MAX_CARD_ID_LENGTH,
    UNKNOWN_CLASS_NAME,
    UNKNOWN_STUDENT_NAME,
)
from ..core.enums import ScanStatus
from ..core.exceptions import AuthenticationError, ValidationError
from ..students.repository import StudentRepository
from .model import AttendanceRecord, AttendanceStats, ScanResult
from .repository import AttendanceRepository

logger = logging.getLogger("rfid_attendance.attendance")


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        *,
        rfid_api_key: Optional[str] = None,
    ):
        self._attendance = attendance
        self._students = students
        self._rfid_api_key = rfid_api_key or None

    def record_scan(
        self,
        card_id: str,
        *,
        api_key: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ScanResult:
        """Record a scan coming from the badge reader.

        Unknown cards are still stored (as an unknown student) so the scan is not lost.
        """

        if self._rfid_api_key and not hmac.compare_digest(str(api_key or ""), self._rfid_api_key):
            logger.warning("rejected reader scan with a bad api key")
            raise AuthenticationError("Invalid reader API key")

        result = self._store(card_id, now or now_local())
        if result.student:
            logger.info("attendance recorded: %s (%s)", result.student.name, result.student.class_name)
        else:
            logger.warning("unknown card scanned: %s", result.card_id)
        return result

    def record(
        self,
        card_id: str,
        *,
        timestamp: Union[str, datetime, None] = None,
        now: Optional[datetime] = None,
    ) -> ScanResult:
        """Manual entry by a class teacher; the timestamp defaults to now."""

        if isinstance(timestamp, str) and timestamp.strip():
            try:
                when = parse_iso_datetime(timestamp)
            except ValueError:
                raise ValidationError("time must be an ISO-8601 timestamp")
        elif isinstance(timestamp, datetime):
            when = timestamp
        else:
            when = now or now_local()

        result = self._store(card_id, when)
        logger.info("manual attendance recorded for card %s", result.card_id)
        return result

    def _store(self, card_id: str, when: datetime) -> ScanResult:
        card_id = require_non_empty(card_id, "cardId", max_len=MAX_CARD_ID_LENGTH)
        student = self._students.get_by_card_id(card_id)
        attendance_id = self._attendance.create(
            card_id=card_id,
            student_id=student.student_id if student else None,
            student_name=student.name if student else UNKNOWN_STUDENT_NAME,
            class_name=student.class_name if student else UNKNOWN_CLASS_NAME,
            scanned_at=when,
        )
        return ScanResult(
            attendance_id=attendance_id,
            card_id=card_id,
            student=student,
            status=ScanStatus.PRESENT if student else ScanStatus.UNKNOWN_CARD,
            scanned_at=when,
        )

    def class_history(self, class_name: str, *, limit: int = DEFAULT_ATTENDANCE_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.list_by_class(class_name, limit=max(1, int(limit)))

    def class_today(self, class_name: str, *, detailed: bool, today: Optional[date] = None) -> dict:
        """Today's view of a class.

        detailed=True (admin or the class's CT) adds the scan records and the absent
        students; otherwise only the counts are returned.
        """

        today = today or now_local().date()
        students = self._students.list_by_class(class_name)
        records = self._attendance.list_by_class_on(class_name, day=today)

        present_ids = {r.student_id for r in records if r.student_id is not None}
        total = len(students)
        present = len(present_ids)
        data: dict = {"stats": {"total": total, "present": present, "absent": max(total - present, 0)}}

        if detailed:
            data["records"] = [r.to_dict() for r in records]
            data["absent_students"] = [s.to_dict() for s in students if s.student_id not in present_ids]
        return data

    def latest(self) -> Sequence[AttendanceRecord]:
        return self._attendance.list_latest(limit=LATEST_ATTENDANCE_LIMIT)

    def clear_all(self) -> int:
        deleted = self._attendance.delete_all()
        logger.info("cleared %d attendance records", deleted)
        return deleted

    def stats(self, *, today: Optional[date] = None) -> AttendanceStats:
        return self._attendance.stats(today=today or now_local().date())
