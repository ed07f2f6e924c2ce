from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, Tuple

from ..common.validators import parse_positive_int, require_non_empty
from ..core.constants import MAX_CLASS_NAME_LENGTH
from ..core.exceptions import (
    AssignmentConflictError,
    CannotDowngradeError,
    ClassAlreadyHasClassTeacherError,
    ConflictingClassTeacherError,
    InvalidTargetError,
    NotFoundError,
)
from ..teachers.repository import TeacherRepository
from .model import Assignment, ClassAssignments
from .repository import AssignmentRepository, AssignmentStore

logger = logging.getLogger("rfid_attendance.assignments")


class AssignmentService:
    """Use case: assign teachers to classes as Class Teacher (CT) or Subject Teacher (ST).

    Invariants kept after every mutation:
    - a teacher holds at most one CT row,
    - a class has at most one CT row,
    - admin accounts hold no rows.
    Subject teacher rows are unrestricted.
    """

    def __init__(self, assignments: AssignmentRepository, teachers: TeacherRepository):
        self._assignments = assignments
        self._teachers = teachers

    def assign(self, *, teacher_id: int, class_name: str, is_class_teacher: bool) -> Assignment:
        teacher_id = parse_positive_int(teacher_id, "Teacher ID")
        class_name = require_non_empty(class_name, "Class name", max_len=MAX_CLASS_NAME_LENGTH)
        is_class_teacher = bool(is_class_teacher)

        with self._assignments.transaction() as store:
            # Role changes take the same lock, so an admin promotion cannot slip
            # in between this read and the write below.
            teacher = self._teachers.get_by_id(teacher_id)
            if not teacher:
                raise NotFoundError("Teacher not found")
            if teacher.is_admin:
                raise InvalidTargetError("Cannot assign classes to admin users")

            try:
                existing = self._check(
                    store,
                    teacher_id=teacher_id,
                    class_name=class_name,
                    is_class_teacher=is_class_teacher,
                )
            except AssignmentConflictError as e:
                logger.info(
                    "rejected assignment teacher=%s class=%s ct=%s: %s",
                    teacher_id, class_name, is_class_teacher, type(e).__name__,
                )
                raise

            if existing is None or existing.is_class_teacher != is_class_teacher:
                store.upsert(teacher_id=teacher_id, class_name=class_name, is_class_teacher=is_class_teacher)

        assignment = Assignment(
            teacher_id=teacher_id,
            class_name=class_name,
            is_class_teacher=is_class_teacher,
            teacher_name=teacher.name,
        )
        logger.info("teacher %s assigned to %s as %s", teacher_id, class_name, assignment.assignment_type)
        return assignment

    @staticmethod
    def _check(
        store: AssignmentStore,
        *,
        teacher_id: int,
        class_name: str,
        is_class_teacher: bool,
    ) -> Optional[Assignment]:
        """Raise on the first violated rule; return the current row for the pair."""

        existing = store.get(teacher_id=teacher_id, class_name=class_name)

        if is_class_teacher:
            current_ct = store.get_ct_assignment(teacher_id)
            if current_ct and current_ct.class_name != class_name:
                raise ConflictingClassTeacherError(current_ct.class_name)

            class_ct = store.get_class_ct(class_name)
            if class_ct and class_ct.teacher_id != teacher_id:
                raise ClassAlreadyHasClassTeacherError(
                    class_name, class_ct.teacher_name or f"#{class_ct.teacher_id}"
                )
        elif existing and existing.is_class_teacher:
            raise CannotDowngradeError(class_name)

        return existing

    def remove(self, *, teacher_id: int, class_name: str) -> bool:
        """Delete the (teacher, class) row. Idempotent: returns False if it was absent."""

        teacher_id = parse_positive_int(teacher_id, "Teacher ID")
        class_name = require_non_empty(class_name, "Class name", max_len=MAX_CLASS_NAME_LENGTH)

        with self._assignments.transaction() as store:
            removed = store.remove(teacher_id=teacher_id, class_name=class_name)

        if removed:
            logger.info("teacher %s removed from %s", teacher_id, class_name)
        return removed

    @contextmanager
    def locked(self) -> Iterator[AssignmentStore]:
        """Hold the assignment lock. Teacher role changes run under it."""
        with self._assignments.transaction() as store:
            yield store

    # Read side: no invariant enforcement.

    def get_by_teacher(self, teacher_id: int) -> Sequence[Assignment]:
        return self._assignments.get_by_teacher(int(teacher_id))

    def get_by_class(self, class_name: str) -> Sequence[Assignment]:
        return self._assignments.get_by_class(class_name)

    def get_all(self) -> Sequence[Assignment]:
        return self._assignments.get_all()

    def get_ct_assignment(self, teacher_id: int) -> Optional[Assignment]:
        return self._assignments.get_ct_assignment(int(teacher_id))

    def get_class_ct(self, class_name: str) -> Optional[Assignment]:
        return self._assignments.get_class_ct(class_name)

    def get_grouped(self) -> List[ClassAssignments]:
        grouped: dict[str, ClassAssignments] = {}
        for a in self._assignments.get_all():
            entry = grouped.setdefault(a.class_name, ClassAssignments(class_name=a.class_name))
            if a.is_class_teacher:
                grouped[a.class_name] = ClassAssignments(
                    class_name=a.class_name,
                    class_teacher=a,
                    subject_teachers=entry.subject_teachers,
                )
            else:
                entry.subject_teachers.append(a)
        return [grouped[name] for name in sorted(grouped)]

    def split_by_type(self, teacher_id: int) -> Tuple[List[Assignment], List[Assignment]]:
        """Return (CT rows, ST rows) for a teacher."""

        rows = self.get_by_teacher(teacher_id)
        return [a for a in rows if a.is_class_teacher], [a for a in rows if not a.is_class_teacher]

    def has_class_access(self, teacher_id: int, class_name: str) -> bool:
        return any(a.class_name == class_name for a in self.get_by_teacher(teacher_id))

    def is_class_teacher_of(self, teacher_id: int, class_name: str) -> bool:
        ct = self.get_ct_assignment(teacher_id)
        return bool(ct and ct.class_name == class_name)
