from __future__ import annotations

from flask import Flask

from ..auth.decorators import Guards
from ..common.http import json_body, ok
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container, guards: Guards) -> None:
    @app.route("/students/register", methods=["POST"], endpoint="register_student")
    @guards.class_teacher_required
    def register_student():
        body = json_body()
        student = container.student_service.register(
            card_id=body.get("cardId", ""),
            name=body.get("name", ""),
            class_name=body.get("studentClass"),
            roll_number=body.get("rollNumber"),
        )
        return ok(student.to_dict(), message="Student registered successfully", http_status=201)

    @app.route("/students", methods=["GET"], endpoint="list_students")
    @guards.login_required
    def list_students():
        students = container.student_service.list_all()
        return ok([s.to_dict() for s in students], count=len(students))

    @app.route("/students/class/<class_name>", methods=["GET"], endpoint="class_students")
    @guards.class_access_required
    def class_students(class_name: str):
        students = container.student_service.list_by_class(class_name)
        return ok([s.to_dict() for s in students], count=len(students))

    @app.route("/admin/students", methods=["GET"], endpoint="admin_students")
    @guards.admin_required
    def admin_students():
        rows = container.student_service.list_with_stats()
        return ok(rows, count=len(rows))

    @app.route("/admin/students/<int:student_id>", methods=["GET"], endpoint="admin_student")
    @guards.admin_required
    def admin_student(student_id: int):
        return ok(container.student_service.get_details(student_id))

    @app.route("/admin/students/<int:student_id>", methods=["PUT"], endpoint="admin_update_student")
    @guards.admin_required
    def admin_update_student(student_id: int):
        body = json_body()
        student = container.student_service.update(
            student_id,
            name=body.get("name", ""),
            card_id=body.get("cardId"),
            class_name=body.get("studentClass"),
            roll_number=body.get("rollNumber"),
        )
        return ok(student.to_dict(), message="Student updated successfully")

    @app.route("/admin/students/<int:student_id>", methods=["DELETE"], endpoint="admin_delete_student")
    @guards.admin_required
    def admin_delete_student(student_id: int):
        container.student_service.delete(student_id)
        return ok(message="Student deleted successfully")

    @app.route("/admin/students/bulk-import", methods=["POST"], endpoint="admin_bulk_import")
    @guards.admin_required
    def admin_bulk_import():
        rows = json_body().get("students")
        if not isinstance(rows, list) or not rows:
            raise ValidationError("Students array is required")
        if not all(isinstance(r, dict) for r in rows):
            raise ValidationError("Each student must be an object")

        result = container.student_service.bulk_import(rows)
        return ok(result.to_dict(), message=f"Imported {result.success} students")
