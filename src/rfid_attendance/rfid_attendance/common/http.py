from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AssignmentConflictError,
    AuthenticationError,
    AuthorizationError,
    DomainError,
    DuplicateError,
    InvalidTargetError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger("rfid_attendance.web")

# Most specific first.
_STATUS_BY_ERROR: tuple[tuple[type, int], ...] = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DuplicateError, 409),
    (AssignmentConflictError, 409),
    (InvalidTargetError, 400),
    (ValidationError, 400),
)


def status_for(exc: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


def ok(data: Any = None, *, message: Optional[str] = None, http_status: int = 200, **extra):
    body: dict = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), http_status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def json_body() -> dict:
    """Request payload as a dict: JSON body, falling back to form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def request_value(name: str) -> Optional[str]:
    value = json_body().get(name)
    if value is None:
        value = request.args.get(name)
    return value


def parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return fail(str(e), status_for(e))

    @app.errorhandler(StorageError)
    def handle_storage_error(e: StorageError):
        logger.error("storage failure on %s %s: %s", request.method, request.path, e)
        return fail("Database error, please try again", 500)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return fail(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        if bool(app.config.get("DEBUG", False)):
            return fail(f"Internal server error: {e}", 500)
        return fail("Internal server error", 500)
