from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, request

from config import get_settings_module

from .assignments.controller import register as register_assignments
from .attendance.controller import register as register_attendance
from .auth.controller import register as register_auth
from .auth.decorators import build_guards
from .common.http import register_error_handlers
from .container import Container, build_container
from .core.constants import SESSION_TTL_HOURS
from .database.bootstrap import apply_schema, ensure_default_admin, list_tables
from .database.connection import DBConfig
from .students.controller import register as register_students
from .teachers.controller import register as register_teachers

logger = logging.getLogger("rfid_attendance")

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _configure_logging(level_name: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level_name).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    """Application factory.

    Passing a container skips all database wiring (used by tests).
    """

    load_dotenv(override=False)
    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)

    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_mapping(db_config))

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_default_admin(
                db_config,
                username=getattr(settings, "DEFAULT_ADMIN_USERNAME", "admin"),
                password=getattr(settings, "DEFAULT_ADMIN_PASSWORD", "admin123"),
                email=getattr(settings, "DEFAULT_ADMIN_EMAIL", "admin@school.local"),
            )

        container = build_container(
            db_config=db_config,
            session_ttl_hours=int(getattr(settings, "SESSION_TTL_HOURS", SESSION_TTL_HOURS)),
            rfid_api_key=getattr(settings, "RFID_API_KEY", None) or None,
        )

    @app.before_request
    def log_request():
        logger.debug("%s %s", request.method, request.path)

    register_error_handlers(app)
    guards = build_guards(container)

    register_auth(app, container, guards)
    register_teachers(app, container, guards)
    register_assignments(app, container, guards)
    register_students(app, container, guards)
    register_attendance(app, container, guards)

    return app


def main() -> None:
    app = create_app()
    settings = importlib.import_module(get_settings_module())
    app.run(
        host=getattr(settings, "HOST", "0.0.0.0"),
        port=int(getattr(settings, "PORT", 8080)),
        debug=app.config["DEBUG"],
    )


if __name__ == "__main__":
    main()
