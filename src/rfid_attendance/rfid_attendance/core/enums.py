from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role tag stored on an account.

    Informational only: class-level authority comes from assignment rows.
    """

    ADMIN = "admin"
    TEACHER = "teacher"
    CLASS_TEACHER = "class_teacher"
    SUBJECT_TEACHER = "subject_teacher"


class CapabilityKind(str, Enum):
    ADMIN_ONLY = "admin_only"
    CLASS_TEACHER_ROLE = "class_teacher_role"
    HAS_CLASS_ACCESS = "has_class_access"
    CAN_MARK_ATTENDANCE = "can_mark_attendance"


class ScanStatus(str, Enum):
    PRESENT = "present"
    UNKNOWN_CARD = "unknown_card"
