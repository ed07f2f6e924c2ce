from __future__ import annotations

import logging

from flask import Flask

from ..common.http import json_body, ok
from ..container import Container
from ..core.constants import SESSION_COOKIE_NAME
from .decorators import Guards, current_user, session_token

ADMIN_DASHBOARD = "/admin-dashboard.html"
TEACHER_DASHBOARD = "/teacher-dashboard.html"

logger = logging.getLogger("rfid_attendance.auth")


def register(app: Flask, container: Container, guards: Guards) -> None:
    @app.route("/auth/login", methods=["POST"], endpoint="login")
    def login():
        body = json_body()
        grant = container.auth_service.login(body.get("username", ""), body.get("password", ""))

        ct, st = container.assignment_service.split_by_type(grant.user.teacher_id)
        logger.info(
            "%s logged in; CT of: %s; ST of: %s",
            grant.user.username,
            ", ".join(a.class_name for a in ct) or "None",
            ", ".join(a.class_name for a in st) or "None",
        )

        response, status = ok(
            {
                "session_id": grant.token,
                "expires_at": grant.expires_at.isoformat(),
                "user": grant.user.to_public(),
                "assignments": {
                    "ct": [a.to_dict() for a in ct],
                    "st": [a.to_dict() for a in st],
                },
                "redirect_to": ADMIN_DASHBOARD if grant.user.is_admin else TEACHER_DASHBOARD,
            },
            message="Login successful",
        )
        response.set_cookie(
            SESSION_COOKIE_NAME,
            grant.token,
            httponly=True,
            samesite="Lax",
            max_age=int(container.auth_service.session_ttl.total_seconds()),
        )
        return response, status

    @app.route("/auth/logout", methods=["POST"], endpoint="logout")
    @guards.login_required
    def logout():
        container.auth_service.logout(session_token())
        response, status = ok(message="Logged out successfully")
        response.delete_cookie(SESSION_COOKIE_NAME)
        return response, status

    @app.route("/auth/me", methods=["GET"], endpoint="me")
    @guards.login_required
    def me():
        user = current_user()
        classes = container.assignment_service.get_by_teacher(user.teacher_id)
        return ok({"user": user.to_public(), "classes": [a.to_dict() for a in classes]})
