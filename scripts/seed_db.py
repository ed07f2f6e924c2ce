from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.rfid_attendance.rfid_attendance.database.bootstrap import ensure_default_admin


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    parser = argparse.ArgumentParser(description="Create the default admin account if it is missing.")
    parser.add_argument("--username", default=getattr(settings, "DEFAULT_ADMIN_USERNAME", "admin"))
    parser.add_argument("--password", default=getattr(settings, "DEFAULT_ADMIN_PASSWORD", "admin123"))
    parser.add_argument("--email", default=getattr(settings, "DEFAULT_ADMIN_EMAIL", "admin@school.local"))
    args = parser.parse_args()

    if not args.password:
        parser.error("an admin password is required (--password or DEFAULT_ADMIN_PASSWORD)")

    created = ensure_default_admin(db_config, username=args.username, password=args.password, email=args.email)
    print(f"OK: admin {args.username!r} {'created' if created else 'already exists'}")


if __name__ == "__main__":
    main()
