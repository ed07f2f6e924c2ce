from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .assignments.mysql_assignment_repository import MySQLAssignmentRepository
from .assignments.repository import AssignmentRepository
from .assignments.service import AssignmentService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .auth.guard import AccessGuard
from .auth.mysql_session_repository import MySQLSessionRepository
from .auth.repository import SessionRepository
from .auth.service import AuthService
from .core.constants import SESSION_TTL_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .teachers.mysql_teacher_repository import MySQLTeacherRepository
from .teachers.repository import TeacherRepository
from .teachers.service import TeacherService


@dataclass(frozen=True)
class Container:
    teachers_repo: TeacherRepository
    assignments_repo: AssignmentRepository
    sessions_repo: SessionRepository
    students_repo: StudentRepository
    attendance_repo: AttendanceRepository

    auth_service: AuthService
    access_guard: AccessGuard
    assignment_service: AssignmentService
    teacher_service: TeacherService
    student_service: StudentService
    attendance_service: AttendanceService

    conn: Optional[DatabaseConnection] = None


def wire_container(
    *,
    teachers_repo: TeacherRepository,
    assignments_repo: AssignmentRepository,
    sessions_repo: SessionRepository,
    students_repo: StudentRepository,
    attendance_repo: AttendanceRepository,
    session_ttl_hours: int = SESSION_TTL_HOURS,
    rfid_api_key: Optional[str] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build the services on top of any repository implementations."""

    assignment_service = AssignmentService(assignments_repo, teachers_repo)

    return Container(
        teachers_repo=teachers_repo,
        assignments_repo=assignments_repo,
        sessions_repo=sessions_repo,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        auth_service=AuthService(teachers_repo, sessions_repo, session_ttl_hours=session_ttl_hours),
        access_guard=AccessGuard(assignment_service),
        assignment_service=assignment_service,
        teacher_service=TeacherService(teachers_repo, assignment_service),
        student_service=StudentService(students_repo, attendance_repo),
        attendance_service=AttendanceService(attendance_repo, students_repo, rfid_api_key=rfid_api_key),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    session_ttl_hours: int = SESSION_TTL_HOURS,
    rfid_api_key: Optional[str] = None,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    return wire_container(
        teachers_repo=MySQLTeacherRepository(conn),
        assignments_repo=MySQLAssignmentRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        session_ttl_hours=session_ttl_hours,
        rfid_api_key=rfid_api_key,
        conn=conn,
    )
