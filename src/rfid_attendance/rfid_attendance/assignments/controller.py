from __future__ import annotations

from flask import Flask, request

from ..auth.decorators import Guards
from ..common.http import json_body, ok, parse_bool
from ..container import Container


def register(app: Flask, container: Container, guards: Guards) -> None:
    @app.route("/admin/assign-class", methods=["POST"], endpoint="assign_class")
    @guards.admin_required
    def assign_class():
        body = json_body()
        assignment = container.assignment_service.assign(
            teacher_id=body.get("teacherId"),
            class_name=body.get("className", ""),
            is_class_teacher=parse_bool(body.get("isClassTeacher", False)),
        )
        return ok(
            assignment.to_dict(),
            message=f"Successfully assigned as {assignment.assignment_type} of {assignment.class_name}",
        )

    @app.route("/admin/assign-class", methods=["DELETE"], endpoint="remove_class")
    @guards.admin_required
    def remove_class():
        body = json_body()
        removed = container.assignment_service.remove(
            teacher_id=body.get("teacherId"),
            class_name=body.get("className", ""),
        )
        return ok(
            {"removed": removed},
            message="Teacher removed from class" if removed else "Teacher was not assigned to this class",
        )

    @app.route("/admin/class-assignments", methods=["GET"], endpoint="class_assignments")
    @guards.admin_required
    def class_assignments():
        if parse_bool(request.args.get("grouped", "")):
            grouped = container.assignment_service.get_grouped()
            return ok([c.to_dict() for c in grouped], count=len(grouped))
        rows = container.assignment_service.get_all()
        return ok([a.to_dict() for a in rows], count=len(rows))

    @app.route("/admin/teachers/<int:teacher_id>/classes", methods=["GET"], endpoint="teacher_classes")
    @guards.admin_required
    def teacher_classes(teacher_id: int):
        rows = container.assignment_service.get_by_teacher(teacher_id)
        ct = container.assignment_service.get_ct_assignment(teacher_id)
        return ok(
            [a.to_dict() for a in rows],
            count=len(rows),
            class_teacher_of=ct.class_name if ct else None,
        )

    @app.route("/admin/classes/<class_name>/teachers", methods=["GET"], endpoint="class_teachers")
    @guards.admin_required
    def class_teachers(class_name: str):
        rows = container.assignment_service.get_by_class(class_name)
        ct = container.assignment_service.get_class_ct(class_name)
        return ok(
            [a.to_dict() for a in rows],
            count=len(rows),
            class_teacher=ct.to_dict() if ct else None,
        )
