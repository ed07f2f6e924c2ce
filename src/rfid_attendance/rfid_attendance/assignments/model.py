from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class Assignment:
    """Relation row binding a teacher to a class.

    is_class_teacher=True marks the CT (homeroom) row, False a subject teacher row.
    teacher_name is filled by read queries for display and error messages.
    """

    teacher_id: int
    class_name: str
    is_class_teacher: bool
    teacher_name: Optional[str] = None
    assigned_at: Optional[datetime] = None

    @property
    def assignment_type(self) -> str:
        return "Class Teacher" if self.is_class_teacher else "Subject Teacher"

    def to_dict(self) -> dict:
        return {
            "teacher_id": self.teacher_id,
            "teacher_name": self.teacher_name,
            "class_name": self.class_name,
            "is_class_teacher": self.is_class_teacher,
            "assigned_at": self.assigned_at.isoformat() if self.assigned_at else None,
        }


@dataclass(frozen=True)
class ClassAssignments:
    """Read-model: one class with its CT and its subject teachers."""

    class_name: str
    class_teacher: Optional[Assignment] = None
    subject_teachers: List[Assignment] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "class_name": self.class_name,
            "class_teacher": self.class_teacher.to_dict() if self.class_teacher else None,
            "subject_teachers": [a.to_dict() for a in self.subject_teachers],
        }
