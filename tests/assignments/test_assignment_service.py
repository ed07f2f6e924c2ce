from __future__ import annotations

import random
import threading
from contextlib import contextmanager

import pytest

from src.rfid_attendance.rfid_attendance.assignments.service import AssignmentService
from src.rfid_attendance.rfid_attendance.auth.guard import AccessGuard
from src.rfid_attendance.rfid_attendance.auth.model import Capability, CurrentUser
from src.rfid_attendance.rfid_attendance.core.enums import Role
from src.rfid_attendance.rfid_attendance.core.exceptions import (
    AssignmentConflictError,
    AuthorizationError,
    CannotDowngradeError,
    ClassAlreadyHasClassTeacherError,
    ConflictingClassTeacherError,
    InvalidTargetError,
    NotFoundError,
    ValidationError,
)
from src.rfid_attendance.rfid_attendance.teachers.service import TeacherService


@pytest.fixture
def service(assignments, teachers) -> AssignmentService:
    return AssignmentService(assignments, teachers)


def assert_invariants(assignments, teachers):
    ct_rows = [k for k, is_ct in assignments.rows.items() if is_ct]
    ct_teachers = [tid for tid, _ in ct_rows]
    ct_classes = [cls for _, cls in ct_rows]
    assert len(ct_teachers) == len(set(ct_teachers))
    assert len(ct_classes) == len(set(ct_classes))
    for tid, _ in assignments.rows:
        assert teachers.get_by_id(tid).role != Role.ADMIN


def test_assign_class_teacher_creates_ct_row(service, assignments, t1):
    a = service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)

    assert a.is_class_teacher is True
    assert a.teacher_name == "Asha Rao"
    assert assignments.rows == {(t1.teacher_id, "10A"): True}


def test_second_ct_class_for_same_teacher_is_rejected(service, assignments, t1):
    service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)

    with pytest.raises(ConflictingClassTeacherError) as exc:
        service.assign(teacher_id=t1.teacher_id, class_name="10B", is_class_teacher=True)

    assert exc.value.current_class == "10A"
    assert "10A" in str(exc.value)
    assert assignments.rows == {(t1.teacher_id, "10A"): True}


def test_class_with_ct_rejects_another_ct(service, assignments, t1, t2):
    service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)

    with pytest.raises(ClassAlreadyHasClassTeacherError) as exc:
        service.assign(teacher_id=t2.teacher_id, class_name="10A", is_class_teacher=True)

    assert exc.value.teacher_name == "Asha Rao"
    assert (t2.teacher_id, "10A") not in assignments.rows


def test_ct_cannot_be_downgraded_to_subject_teacher(service, assignments, t1):
    service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)

    with pytest.raises(CannotDowngradeError):
        service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=False)

    assert assignments.rows[(t1.teacher_id, "10A")] is True


def test_subject_teacher_can_be_promoted_when_class_has_no_ct(service, assignments, t1):
    service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=False)
    service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)

    assert assignments.rows == {(t1.teacher_id, "10A"): True}


def test_subject_teacher_rows_are_unrestricted(service, assignments, t1, t2):
    service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)
    for cls in ("10A", "10B", "10C"):
        service.assign(teacher_id=t2.teacher_id, class_name=cls, is_class_teacher=False)
    service.assign(teacher_id=t1.teacher_id, class_name="10B", is_class_teacher=False)

    assert len(assignments.rows) == 5
    ct, st = service.split_by_type(t1.teacher_id)
    assert [a.class_name for a in ct] == ["10A"]
    assert [a.class_name for a in st] == ["10B"]


def test_repeating_the_same_assignment_is_a_no_op(service, assignments, t1):
    service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)
    writes = assignments.writes

    service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)

    assert assignments.writes == writes
    assert assignments.rows == {(t1.teacher_id, "10A"): True}


def test_remove_is_idempotent(service, assignments, t1):
    service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)

    assert service.remove(teacher_id=t1.teacher_id, class_name="10A") is True
    assert service.remove(teacher_id=t1.teacher_id, class_name="10A") is False
    assert assignments.rows == {}


def test_removing_ct_frees_both_teacher_and_class(service, t1, t2):
    service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)
    service.remove(teacher_id=t1.teacher_id, class_name="10A")

    service.assign(teacher_id=t2.teacher_id, class_name="10A", is_class_teacher=True)
    service.assign(teacher_id=t1.teacher_id, class_name="10B", is_class_teacher=True)

    assert service.get_class_ct("10A").teacher_id == t2.teacher_id
    assert service.get_ct_assignment(t1.teacher_id).class_name == "10B"


def test_admin_cannot_be_assigned(service, assignments, admin):
    with pytest.raises(InvalidTargetError):
        service.assign(teacher_id=admin.teacher_id, class_name="10A", is_class_teacher=False)
    assert assignments.rows == {}


def test_unknown_teacher_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.assign(teacher_id=999, class_name="10A", is_class_teacher=True)


@pytest.mark.parametrize(
    "teacher_id,class_name",
    [("abc", "10A"), (None, "10A"), (True, "10A"), (1, ""), (1, "   "), (1, "X" * 65)],
)
def test_assign_validates_input(service, t1, teacher_id, class_name):
    with pytest.raises(ValidationError):
        service.assign(teacher_id=teacher_id, class_name=class_name, is_class_teacher=False)


def test_grouped_view_lists_ct_and_subject_teachers(service, t1, t2):
    service.assign(teacher_id=t1.teacher_id, class_name="10B", is_class_teacher=True)
    service.assign(teacher_id=t2.teacher_id, class_name="10B", is_class_teacher=False)
    service.assign(teacher_id=t2.teacher_id, class_name="10A", is_class_teacher=False)

    grouped = service.get_grouped()

    assert [g.class_name for g in grouped] == ["10A", "10B"]
    assert grouped[0].class_teacher is None
    assert grouped[1].class_teacher.teacher_id == t1.teacher_id
    assert [a.teacher_id for a in grouped[1].subject_teachers] == [t2.teacher_id]


def test_access_helpers(service, t1):
    service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)
    service.assign(teacher_id=t1.teacher_id, class_name="10B", is_class_teacher=False)

    assert service.has_class_access(t1.teacher_id, "10B")
    assert not service.has_class_access(t1.teacher_id, "10C")
    assert service.is_class_teacher_of(t1.teacher_id, "10A")
    assert not service.is_class_teacher_of(t1.teacher_id, "10B")


def test_random_operation_sequences_keep_invariants(service, assignments, teachers, admin):
    rng = random.Random(20260302)
    staff = [teachers.add(f"teacher{i}", role=Role.CLASS_TEACHER) for i in range(5)]
    ids = [t.teacher_id for t in staff] + [admin.teacher_id]
    classes = ["9A", "9B", "10A", "10B"]

    for _ in range(400):
        tid = rng.choice(ids)
        cls = rng.choice(classes)
        try:
            if rng.random() < 0.75:
                service.assign(teacher_id=tid, class_name=cls, is_class_teacher=rng.random() < 0.5)
            else:
                service.remove(teacher_id=tid, class_name=cls)
        except (AssignmentConflictError, InvalidTargetError):
            pass
        assert_invariants(assignments, teachers)


def test_concurrent_ct_requests_for_one_class_admit_one(service, assignments, teachers):
    staff = [teachers.add(f"racer{i}", role=Role.CLASS_TEACHER) for i in range(8)]
    barrier = threading.Barrier(len(staff))
    outcomes = []

    def attempt(teacher_id):
        barrier.wait()
        try:
            service.assign(teacher_id=teacher_id, class_name="10A", is_class_teacher=True)
            outcomes.append("ok")
        except ClassAlreadyHasClassTeacherError:
            outcomes.append("rejected")

    threads = [threading.Thread(target=attempt, args=(t.teacher_id,)) for t in staff]
    for th in threads:
        th.start()
    for th in threads:
        th.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("rejected") == len(staff) - 1
    assert_invariants(assignments, teachers)


def test_concurrent_ct_requests_for_one_teacher_admit_one(service, assignments, teachers, t1):
    classes = [f"11{c}" for c in "ABCDEF"]
    barrier = threading.Barrier(len(classes))
    outcomes = []

    def attempt(class_name):
        barrier.wait()
        try:
            service.assign(teacher_id=t1.teacher_id, class_name=class_name, is_class_teacher=True)
            outcomes.append("ok")
        except ConflictingClassTeacherError:
            outcomes.append("rejected")

    threads = [threading.Thread(target=attempt, args=(c,)) for c in classes]
    for th in threads:
        th.start()
    for th in threads:
        th.join()

    assert outcomes.count("ok") == 1
    assert_invariants(assignments, teachers)


def test_promotion_to_admin_before_assign_write_blocks_the_assign(service, assignments, teachers, t1, monkeypatch):
    teacher_service = TeacherService(teachers, service)
    plain_transaction = assignments.transaction
    promoted = []

    # The promotion lands right as assign asks for the lock.
    @contextmanager
    def promote_then_lock():
        if not promoted:
            promoted.append(True)
            teacher_service.update_teacher(t1.teacher_id, name=t1.name, email=t1.email, role=Role.ADMIN)
        with plain_transaction() as store:
            yield store

    monkeypatch.setattr(assignments, "transaction", promote_then_lock)

    with pytest.raises(InvalidTargetError):
        service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)

    assert teachers.get_by_id(t1.teacher_id).role == Role.ADMIN
    assert assignments.rows == {}


def test_promotion_after_assign_is_rejected(service, assignments, teachers, t1):
    teacher_service = TeacherService(teachers, service)
    service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)

    with pytest.raises(InvalidTargetError):
        teacher_service.update_teacher(t1.teacher_id, name=t1.name, email=t1.email, role=Role.ADMIN)

    assert teachers.get_by_id(t1.teacher_id).role == Role.CLASS_TEACHER
    assert_invariants(assignments, teachers)


def test_concurrent_promotion_and_assign_never_leave_admin_with_rows(service, assignments, teachers):
    teacher_service = TeacherService(teachers, service)

    for i in range(30):
        t = teachers.add(f"swing{i}", role=Role.CLASS_TEACHER)
        barrier = threading.Barrier(2)

        def promote():
            barrier.wait()
            try:
                teacher_service.update_teacher(t.teacher_id, name=t.name, email=t.email, role=Role.ADMIN)
            except InvalidTargetError:
                pass

        def assign():
            barrier.wait()
            try:
                service.assign(teacher_id=t.teacher_id, class_name=f"C{i}", is_class_teacher=True)
            except InvalidTargetError:
                pass

        threads = [threading.Thread(target=promote), threading.Thread(target=assign)]
        for th in threads:
            th.start()
        for th in threads:
            th.join()

        assert_invariants(assignments, teachers)


def test_class_names_are_case_sensitive(service, assignments, teachers, t1, t2):
    service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)

    # "10a" is another class: no downgrade conflict, and its CT slot is free.
    service.assign(teacher_id=t1.teacher_id, class_name="10a", is_class_teacher=False)
    service.assign(teacher_id=t2.teacher_id, class_name="10a", is_class_teacher=True)

    assert assignments.rows == {
        (t1.teacher_id, "10A"): True,
        (t1.teacher_id, "10a"): False,
        (t2.teacher_id, "10a"): True,
    }

    guard = AccessGuard(service)
    asha = CurrentUser(teacher_id=t1.teacher_id, username=t1.username, name=t1.name, email=t1.email, role=t1.role)
    bilal = CurrentUser(teacher_id=t2.teacher_id, username=t2.username, name=t2.name, email=t2.email, role=t2.role)
    assert not guard.authorize(asha, Capability.has_class_access("10a")).is_class_teacher_for_class
    assert guard.authorize(bilal, Capability.has_class_access("10a")).is_class_teacher_for_class
    with pytest.raises(AuthorizationError):
        guard.authorize(bilal, Capability.has_class_access("10A"))
