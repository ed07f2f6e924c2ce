from __future__ import annotations

import mysql.connector
import pytest

from src.rfid_attendance.rfid_attendance.assignments.mysql_assignment_repository import MySQLAssignmentRepository
from src.rfid_attendance.rfid_attendance.assignments.service import AssignmentService
from src.rfid_attendance.rfid_attendance.core.exceptions import ConflictingClassTeacherError, StorageError

CT_OF_TEACHER = "tc.teacher_id=%s AND tc.is_class_teacher=1"


class ScriptedCursor:
    """Cursor double: answers queries by SQL fragment and logs what ran."""

    def __init__(self, steps: list, answers: dict, fail_on: str | None = None):
        self._steps = steps
        self._answers = answers
        self._fail_on = fail_on
        self._last = ""
        self.rowcount = 0

    def execute(self, sql, params=()):
        sql = " ".join(sql.split())
        self._last = sql
        if "GET_LOCK" in sql:
            self._steps.append("GET_LOCK")
        elif "RELEASE_LOCK" in sql:
            self._steps.append("RELEASE_LOCK")
        else:
            self._steps.append(sql.split()[0])
        if self._fail_on and self._fail_on in sql:
            raise mysql.connector.errors.OperationalError("lost connection")
        self.rowcount = 1 if sql.startswith(("INSERT", "DELETE")) else 0

    def fetchone(self):
        for fragment, row in self._answers.items():
            if fragment in self._last:
                return row
        return None

    def fetchall(self):
        row = self.fetchone()
        return [row] if row else []

    def close(self):
        self._steps.append("cursor.close")


class ScriptedConnection:
    def __init__(self, answers: dict, fail_on: str | None = None):
        self.steps: list = []
        self._cursor = ScriptedCursor(self.steps, answers, fail_on)

    def cursor(self, dictionary=False):
        return self._cursor

    def commit(self):
        self.steps.append("commit")

    def rollback(self):
        self.steps.append("rollback")

    def start_transaction(self, isolation_level=None):
        self.steps.append(f"start_transaction:{isolation_level}")

    def close(self):
        self.steps.append("close")


class ScriptedFactory:
    def __init__(self, conn: ScriptedConnection):
        self.conn = conn

    def connect(self):
        return self.conn


def repo_with(answers: dict, fail_on: str | None = None):
    conn = ScriptedConnection(answers, fail_on)
    return MySQLAssignmentRepository(ScriptedFactory(conn)), conn


LOCKED = {"GET_LOCK": {"acquired": 1}}


def test_transaction_locks_then_restarts_read_committed_then_releases():
    repo, conn = repo_with(LOCKED)

    with repo.transaction() as store:
        store.upsert(teacher_id=1, class_name="10A", is_class_teacher=True)

    assert conn.steps == [
        "GET_LOCK",
        "commit",
        "start_transaction:READ COMMITTED",
        "INSERT",
        "commit",
        "RELEASE_LOCK",
        "commit",
        "cursor.close",
        "close",
    ]


def test_transaction_releases_lock_and_rolls_back_on_error():
    repo, conn = repo_with(LOCKED)

    with pytest.raises(RuntimeError):
        with repo.transaction() as store:
            store.upsert(teacher_id=1, class_name="10A", is_class_teacher=True)
            raise RuntimeError("boom")

    assert conn.steps[-4:] == ["RELEASE_LOCK", "cursor.close", "rollback", "close"]
    assert conn.steps.count("commit") == 1


@pytest.mark.parametrize("lock_row", [{"acquired": 0}, {"acquired": None}, None])
def test_lock_timeout_is_a_transient_storage_error(lock_row):
    repo, conn = repo_with({"GET_LOCK": lock_row} if lock_row else {})

    with pytest.raises(StorageError) as exc:
        with repo.transaction():
            pytest.fail("body must not run without the lock")

    assert exc.value.transient is True
    assert "RELEASE_LOCK" not in conn.steps
    assert conn.steps[-2:] == ["rollback", "close"]


def test_lock_release_failure_keeps_the_committed_write():
    repo, conn = repo_with(LOCKED, fail_on="RELEASE_LOCK")

    with repo.transaction() as store:
        store.remove(teacher_id=1, class_name="10A")

    assert conn.steps[:5] == ["GET_LOCK", "commit", "start_transaction:READ COMMITTED", "DELETE", "commit"]
    assert conn.steps[-2:] == ["cursor.close", "close"]
    assert "rollback" not in conn.steps


def test_rejected_assign_releases_the_lock(teachers, t1):
    ct_row = {"teacher_id": t1.teacher_id, "class_name": "10A", "is_class_teacher": 1, "teacher_name": t1.name}
    repo, conn = repo_with({**LOCKED, CT_OF_TEACHER: ct_row})

    with pytest.raises(ConflictingClassTeacherError):
        AssignmentService(repo, teachers).assign(teacher_id=t1.teacher_id, class_name="10B", is_class_teacher=True)

    assert "INSERT" not in conn.steps
    assert conn.steps[:3] == ["GET_LOCK", "commit", "start_transaction:READ COMMITTED"]
    assert conn.steps[-4:] == ["RELEASE_LOCK", "cursor.close", "rollback", "close"]
