from __future__ import annotations

import pytest

from src.rfid_attendance.rfid_attendance.core.exceptions import StorageError
from src.rfid_attendance.rfid_attendance.main import create_app


@pytest.fixture
def client(container):
    app = create_app(container, settings_module="config.testing")
    return app.test_client()


def login(client, username, password="secret123") -> dict:
    resp = client.post("/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return {"X-Session-Id": resp.get_json()["data"]["session_id"]}


@pytest.fixture
def admin_headers(client, admin):
    return login(client, "admin", "admin123")


def test_login_returns_session_and_assignments(client, container, t1):
    container.assignment_service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)

    resp = client.post("/auth/login", json={"username": "asha", "password": "secret123"})

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["data"]["user"]["username"] == "asha"
    assert [a["class_name"] for a in body["data"]["assignments"]["ct"]] == ["10A"]
    assert body["data"]["redirect_to"] == "/teacher-dashboard.html"
    assert "sessionId=" in resp.headers["Set-Cookie"]


def test_login_failure_is_generic_401(client, t1):
    for payload in ({"username": "asha", "password": "nope"}, {"username": "ghost", "password": "nope"}):
        resp = client.post("/auth/login", json=payload)
        assert resp.status_code == 401
        assert resp.get_json() == {"success": False, "message": "Invalid username or password"}


def test_protected_route_without_session_is_401(client):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"X-Session-Id": "bogus"}).status_code == 401


def test_cookie_session_and_logout(client, t1):
    client.post("/auth/login", json={"username": "asha", "password": "secret123"})

    assert client.get("/auth/me").status_code == 200
    assert client.post("/auth/logout").status_code == 200
    assert client.get("/auth/me").status_code == 401


def test_assign_class_maps_conflicts_to_409(client, admin_headers, t1, t2):
    ok = client.post(
        "/admin/assign-class",
        json={"teacherId": t1.teacher_id, "className": "10A", "isClassTeacher": True},
        headers=admin_headers,
    )
    clash = client.post(
        "/admin/assign-class",
        json={"teacherId": t2.teacher_id, "className": "10A", "isClassTeacher": True},
        headers=admin_headers,
    )

    assert ok.status_code == 200
    assert ok.get_json()["message"] == "Successfully assigned as Class Teacher of 10A"
    assert clash.status_code == 409
    assert "already has a Class Teacher" in clash.get_json()["message"]


def test_assign_class_input_errors(client, admin_headers, admin):
    missing = client.post("/admin/assign-class", json={"className": "10A"}, headers=admin_headers)
    to_admin = client.post(
        "/admin/assign-class", json={"teacherId": admin.teacher_id, "className": "10A"}, headers=admin_headers
    )
    unknown = client.post("/admin/assign-class", json={"teacherId": 404, "className": "10A"}, headers=admin_headers)
    flag_id = client.post("/admin/assign-class", json={"teacherId": True, "className": "10A"}, headers=admin_headers)

    assert missing.status_code == 400
    assert to_admin.status_code == 400
    assert unknown.status_code == 404
    assert flag_id.status_code == 400


def test_admin_routes_reject_teachers(client, t1):
    headers = login(client, "asha")

    resp = client.post("/admin/assign-class", json={"teacherId": t1.teacher_id, "className": "10A"}, headers=headers)

    assert resp.status_code == 403
    assert resp.get_json()["message"] == "Admin access required"


def test_remove_assignment_is_idempotent(client, container, admin_headers, t1):
    container.assignment_service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=False)
    payload = {"teacherId": t1.teacher_id, "className": "10A"}

    first = client.delete("/admin/assign-class", json=payload, headers=admin_headers)
    second = client.delete("/admin/assign-class", json=payload, headers=admin_headers)

    assert first.get_json()["data"] == {"removed": True}
    assert second.status_code == 200
    assert second.get_json()["data"] == {"removed": False}


def test_grouped_class_assignments(client, container, admin_headers, t1, t2):
    container.assignment_service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)
    container.assignment_service.assign(teacher_id=t2.teacher_id, class_name="10A", is_class_teacher=False)

    data = client.get("/admin/class-assignments?grouped=1", headers=admin_headers).get_json()["data"]

    assert data[0]["class_teacher"]["teacher_id"] == t1.teacher_id
    assert [a["teacher_id"] for a in data[0]["subject_teachers"]] == [t2.teacher_id]


def test_class_today_detail_depends_on_ct(client, container, students, t1, t2):
    container.assignment_service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)
    container.assignment_service.assign(teacher_id=t2.teacher_id, class_name="10A", is_class_teacher=False)
    students.add("C1", "Dev", "10A")
    students.add("C2", "Mia", "10A")
    client.post("/api/rfid/scan", json={"cardId": "C1"})

    ct_view = client.get("/attendance/class/10A/today", headers=login(client, "asha")).get_json()["data"]
    st_view = client.get("/attendance/class/10A/today", headers=login(client, "bilal")).get_json()["data"]

    assert ct_view["stats"] == {"total": 2, "present": 1, "absent": 1}
    assert [s["name"] for s in ct_view["absent_students"]] == ["Mia"]
    assert st_view == {"stats": {"total": 2, "present": 1, "absent": 1}}


def test_class_routes_require_an_assignment(client, t1):
    resp = client.get("/attendance/class/10A", headers=login(client, "asha"))

    assert resp.status_code == 403
    assert resp.get_json()["message"] == "You do not have access to this class"


def test_mark_attendance_only_for_own_ct_class(client, container, students, attendance, t1):
    container.assignment_service.assign(teacher_id=t1.teacher_id, class_name="10A", is_class_teacher=True)
    students.add("C1", "Dev", "10A")
    headers = login(client, "asha")

    own = client.post("/attendance", json={"cardId": "C1", "className": "10A"}, headers=headers)
    other = client.post("/attendance", json={"cardId": "C1", "className": "10B"}, headers=headers)

    assert own.status_code == 201
    assert other.status_code == 403
    assert len(attendance.records) == 1


def test_student_registration_and_duplicate_card(client, admin_headers):
    payload = {"cardId": "C7", "name": "Lena", "studentClass": "10A"}

    first = client.post("/students/register", json=payload, headers=admin_headers)
    again = client.post("/students/register", json=payload, headers=admin_headers)

    assert first.status_code == 201
    assert again.status_code == 409


def test_bulk_import_requires_a_list(client, admin_headers):
    resp = client.post("/admin/students/bulk-import", json={"students": []}, headers=admin_headers)

    assert resp.status_code == 400


def test_teacher_management(client, admin_headers, admin):
    created = client.post(
        "/admin/teachers",
        json={"username": "nina", "password": "pa55word", "name": "Nina", "email": "nina@school.test",
              "role": "class_teacher"},
        headers=admin_headers,
    )
    teacher_id = created.get_json()["data"]["id"]
    listed = client.get("/admin/teachers", headers=admin_headers).get_json()["data"]
    self_delete = client.delete(f"/admin/teachers/{admin.teacher_id}", headers=admin_headers)
    deleted = client.delete(f"/admin/teachers/{teacher_id}", headers=admin_headers)

    assert created.status_code == 201
    assert "nina" in [t["username"] for t in listed]
    assert self_delete.status_code == 400
    assert deleted.status_code == 200


def test_unknown_card_scan_is_recorded(client, attendance):
    resp = client.post("/api/rfid/scan", json={"cardId": "ZZZ"})

    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "unknown_card"
    assert attendance.records[0].student_name == "Unknown Student"


def test_unknown_route_is_json_404(client):
    resp = client.get("/no-such-page")

    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_health_reports_storage_failure(client, attendance, monkeypatch):
    healthy = client.get("/health")
    assert healthy.status_code == 200
    assert healthy.get_json()["status"] == "healthy"
    assert healthy.get_json()["database"] == "connected"
    assert healthy.get_json()["stats"]["total_records"] == 0

    def broken(**_kwargs):
        raise StorageError("connection lost", transient=True)

    monkeypatch.setattr(attendance, "stats", broken)
    resp = client.get("/health")

    assert resp.status_code == 503
    assert resp.get_json()["status"] == "unhealthy"
