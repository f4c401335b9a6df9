from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import mysql.connector


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "DBConfig":
        """Build from a settings ``DB_CONFIG`` dict (port defaults to 3306)."""
        return cls(
            host=str(values["host"]),
            port=int(values.get("port", 3306)),
            user=str(values["user"]),
            password=str(values.get("password") or ""),
            database=str(values["database"]),
        )


class DatabaseConnection:
    """Process-wide MySQL connection factory.

    Repositories open a short-lived connection per call. Inside a
    ``transaction()`` block the current thread has one connection bound, and
    every repository call reuses it so the block commits or rolls back as a
    whole.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._local = threading.local()

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    def connect(self):
        cfg = self._config
        return mysql.connector.connect(
            host=cfg.host,
            port=cfg.port,
            user=cfg.user,
            password=cfg.password,
            database=cfg.database,
        )

    @property
    def bound(self) -> Any:
        """Connection of the open transaction on this thread, or None."""
        return getattr(self._local, "conn", None)

    def bind(self, conn: Any) -> None:
        self._local.conn = conn

    def unbind(self) -> None:
        self._local.conn = None
