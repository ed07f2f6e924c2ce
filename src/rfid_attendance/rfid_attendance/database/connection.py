from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import mysql.connector
from mysql.connector.constants import ClientFlag


@dataclass(frozen=True)
class DBConfig:
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: str = "rfid_attendance"

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "DBConfig":
        """Build from a settings DB_CONFIG dict; missing keys keep the defaults."""
        defaults = cls()
        return cls(
            host=str(values.get("host", defaults.host)),
            port=int(values.get("port", defaults.port)),
            user=str(values.get("user", defaults.user)),
            password=str(values.get("password", defaults.password)),
            database=str(values.get("database", defaults.database)),
        )

    def connect_kwargs(self, *, with_database: bool = True) -> dict:
        kwargs: dict = {"host": self.host, "port": self.port, "user": self.user, "password": self.password}
        if with_database:
            kwargs["database"] = self.database
        return kwargs

    def __str__(self) -> str:
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


class DatabaseConnection:
    """Connection factory for the repositories.

    Every repository call opens its own short-lived connection and runs one
    transaction on it (see mysql_base.db_cursor).
    """

    def __init__(self, config: DBConfig):
        self.config = config

    def connect(self):
        return mysql.connector.connect(
            **self.config.connect_kwargs(),
            autocommit=False,
            # rowcount reports matched rows, so a no-op UPDATE still counts as found
            client_flags=[ClientFlag.FOUND_ROWS],
        )
