from __future__ import annotations

from flask import Flask

from ..auth.decorators import Guards, current_user
from ..common.http import json_body, ok
from ..container import Container
from .service import parse_role


def register(app: Flask, container: Container, guards: Guards) -> None:
    @app.route("/admin/teachers", methods=["POST"], endpoint="create_teacher")
    @guards.admin_required
    def create_teacher():
        body = json_body()
        teacher = container.teacher_service.create_teacher(
            username=body.get("username", ""),
            password=body.get("password", ""),
            name=body.get("name", ""),
            email=body.get("email", ""),
            role=parse_role(body.get("role")),
        )
        return ok(teacher.to_public(), message="Teacher created successfully", http_status=201)

    @app.route("/admin/teachers", methods=["GET"], endpoint="list_teachers")
    @guards.admin_required
    def list_teachers():
        teachers = container.teacher_service.list_with_classes()
        return ok(teachers, count=len(teachers))

    @app.route("/admin/teachers/<int:teacher_id>", methods=["PUT"], endpoint="update_teacher")
    @guards.admin_required
    def update_teacher(teacher_id: int):
        body = json_body()
        role = parse_role(body.get("role")) if body.get("role") else None
        teacher = container.teacher_service.update_teacher(
            teacher_id,
            name=body.get("name", ""),
            email=body.get("email", ""),
            role=role,
        )
        return ok(teacher.to_public(), message="Teacher updated successfully")

    @app.route("/admin/teachers/<int:teacher_id>", methods=["DELETE"], endpoint="delete_teacher")
    @guards.admin_required
    def delete_teacher(teacher_id: int):
        container.teacher_service.delete_teacher(teacher_id, current_user_id=current_user().teacher_id)
        return ok(message="Teacher deleted successfully")
