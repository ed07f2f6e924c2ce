from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.decorators import Guards, current_access
from ..common.datetime_utils import now_local
from ..common.http import json_body, ok
from ..container import Container
from ..core.constants import DEFAULT_ATTENDANCE_LIMIT
from ..core.exceptions import StorageError


def register(app: Flask, container: Container, guards: Guards) -> None:
    @app.route("/api/rfid/scan", methods=["POST"], endpoint="rfid_scan")
    def rfid_scan():
        # Badge reader endpoint: no session, optional shared API key.
        body = json_body()
        result = container.attendance_service.record_scan(body.get("cardId", ""), api_key=body.get("apiKey"))
        message = "Attendance recorded successfully" if result.student else "Card scanned but not registered"
        return ok(result.to_dict(), message=message)

    @app.route("/api/rfid/test", methods=["GET"], endpoint="rfid_test")
    def rfid_test():
        return ok(message="RFID server is online", timestamp=now_local().isoformat())

    @app.route("/attendance", methods=["POST"], endpoint="mark_attendance")
    @guards.attendance_marker_required
    def mark_attendance():
        body = json_body()
        result = container.attendance_service.record(body.get("cardId", ""), timestamp=body.get("time"))
        return ok(result.to_dict(), message="Attendance recorded successfully", http_status=201)

    @app.route("/attendance/class/<class_name>", methods=["GET"], endpoint="class_attendance")
    @guards.class_access_required
    def class_attendance(class_name: str):
        limit = request.args.get("limit", type=int) or DEFAULT_ATTENDANCE_LIMIT
        records = container.attendance_service.class_history(class_name, limit=limit)
        return ok([r.to_dict() for r in records], count=len(records))

    @app.route("/attendance/class/<class_name>/today", methods=["GET"], endpoint="class_attendance_today")
    @guards.class_access_required
    def class_attendance_today(class_name: str):
        # Subject teachers only get the aggregate counts.
        data = container.attendance_service.class_today(
            class_name,
            detailed=current_access().sees_full_class_detail,
        )
        return ok(data)

    @app.route("/attendance/latest", methods=["GET"], endpoint="latest_attendance")
    @guards.admin_required
    def latest_attendance():
        records = container.attendance_service.latest()
        return ok([r.to_dict() for r in records], count=len(records))

    @app.route("/attendance/clear", methods=["DELETE"], endpoint="clear_attendance")
    @guards.admin_required
    def clear_attendance():
        deleted = container.attendance_service.clear_all()
        return ok({"deleted": deleted}, message=f"Cleared {deleted} records")

    @app.route("/test", methods=["GET"], endpoint="server_test")
    def server_test():
        return ok(message="Server is running!", timestamp=now_local().isoformat())

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        try:
            stats = container.attendance_service.stats()
        except StorageError:
            return jsonify({"success": False, "status": "unhealthy", "database": "unavailable"}), 503
        return ok(
            status="healthy",
            database="connected",
            stats={
                "students": container.student_service.count(),
                "teachers": container.teacher_service.count(),
                **stats.to_dict(),
            },
        )
