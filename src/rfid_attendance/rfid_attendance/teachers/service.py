from __future__ import annotations

import logging
from typing import List, Optional

from werkzeug.security import generate_password_hash

from ..assignments.service import AssignmentService
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH, MAX_USERNAME_LENGTH, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import DuplicateError, InvalidTargetError, NotFoundError, ValidationError
from .model import Teacher
from .repository import TeacherRepository

logger = logging.getLogger("rfid_attendance.teachers")


def parse_role(value: Optional[str], *, default: Role = Role.TEACHER) -> Role:
    if value is None or not str(value).strip():
        return default
    try:
        return Role(str(value).strip())
    except ValueError:
        valid = ", ".join(r.value for r in Role)
        raise ValidationError(f"Invalid role. Must be one of: {valid}")


class TeacherService:
    """Use case: manage teacher and admin accounts (admin)."""

    def __init__(self, teachers: TeacherRepository, assignments: AssignmentService):
        self._teachers = teachers
        self._assignments = assignments

    def create_teacher(
        self,
        *,
        username: str,
        password: str,
        name: str,
        email: str,
        role: Role = Role.TEACHER,
    ) -> Teacher:
        username = require_non_empty(username, "Username", max_len=MAX_USERNAME_LENGTH)
        require_non_empty(password, "Password")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        name = require_non_empty(name, "Name", max_len=MAX_NAME_LENGTH)
        email = require_email(email, max_len=MAX_EMAIL_LENGTH)

        if self._teachers.get_by_username(username):
            raise DuplicateError("Username already exists")
        if self._teachers.get_by_email(email):
            raise DuplicateError("Email already exists")

        teacher_id = self._teachers.create(
            username=username,
            password_hash=generate_password_hash(password),
            name=name,
            email=email,
            role=role,
        )
        logger.info("teacher created: %s (%s)", username, role.value)
        return self._require(teacher_id)

    def get(self, teacher_id: int) -> Teacher:
        return self._require(teacher_id)

    def list_with_classes(self) -> List[dict]:
        out: list[dict] = []
        for t in self._teachers.list_all():
            row = t.to_public()
            row["classes"] = [a.to_dict() for a in self._assignments.get_by_teacher(t.teacher_id)]
            out.append(row)
        return out

    def count(self) -> int:
        return self._teachers.count()

    def update_teacher(self, teacher_id: int, *, name: str, email: str, role: Optional[Role] = None) -> Teacher:
        name = require_non_empty(name, "Name", max_len=MAX_NAME_LENGTH)
        email = require_email(email, max_len=MAX_EMAIL_LENGTH)
        teacher = self._require(teacher_id)

        other = self._teachers.get_by_email(email)
        if other and other.teacher_id != teacher.teacher_id:
            raise DuplicateError("Email already exists")

        if role is None or role == teacher.role:
            self._teachers.update_profile(teacher.teacher_id, name=name, email=email)
        else:
            # Admins hold no assignment rows: check and write under the assignment lock.
            with self._assignments.locked() as store:
                if role == Role.ADMIN and store.get_by_teacher(teacher.teacher_id):
                    raise InvalidTargetError("Remove this teacher's class assignments before making them admin")
                self._teachers.update_profile(teacher.teacher_id, name=name, email=email)
                self._teachers.update_role(teacher.teacher_id, role=role)

        logger.info("teacher updated: %s", teacher.teacher_id)
        return self._require(teacher.teacher_id)

    def delete_teacher(self, teacher_id: int, *, current_user_id: int) -> None:
        teacher = self._require(teacher_id)
        if teacher.teacher_id == int(current_user_id):
            raise InvalidTargetError("You cannot delete your own account")

        if not self._teachers.delete_by_id(teacher.teacher_id):
            raise NotFoundError("Teacher not found")
        logger.info("teacher deleted: %s", teacher.teacher_id)

    def _require(self, teacher_id: int) -> Teacher:
        teacher = self._teachers.get_by_id(int(teacher_id))
        if not teacher:
            raise NotFoundError("Teacher not found")
        return teacher
