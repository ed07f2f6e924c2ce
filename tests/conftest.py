from __future__ import annotations

from datetime import datetime

import pytest

from src.rfid_attendance.rfid_attendance.container import wire_container
from src.rfid_attendance.rfid_attendance.core.enums import Role
from tests.fakes import InMemoryAssignments, InMemoryAttendance, InMemorySessions, InMemoryStudents, InMemoryTeachers


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 8, 15, 0)


@pytest.fixture
def teachers() -> InMemoryTeachers:
    return InMemoryTeachers()


@pytest.fixture
def assignments(teachers) -> InMemoryAssignments:
    return InMemoryAssignments(teachers)


@pytest.fixture
def sessions(teachers) -> InMemorySessions:
    return InMemorySessions(teachers)


@pytest.fixture
def students() -> InMemoryStudents:
    return InMemoryStudents()


@pytest.fixture
def attendance() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def container(teachers, assignments, sessions, students, attendance):
    return wire_container(
        teachers_repo=teachers,
        assignments_repo=assignments,
        sessions_repo=sessions,
        students_repo=students,
        attendance_repo=attendance,
    )


@pytest.fixture
def admin(teachers):
    return teachers.add("admin", role=Role.ADMIN, password="admin123", name="Admin")


@pytest.fixture
def t1(teachers):
    return teachers.add("asha", role=Role.CLASS_TEACHER, name="Asha Rao")


@pytest.fixture
def t2(teachers):
    return teachers.add("bilal", role=Role.CLASS_TEACHER, name="Bilal Khan")
