"""
SQLite database adapter implementation.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any, Sequence

from ..dialects.sqlite import SQLiteDialect
from ..utils import get_logger, time_call
from .base import AdapterConnectionError, AdapterExecutionError, ConnectionConfig, DatabaseAdapter


@dataclass(slots=True)
class SQLiteConnectionState:
    connection: sqlite3.Connection


class SQLiteAdapter(DatabaseAdapter):
    """
    Adapter wrapping the Python stdlib sqlite3 module.
    """

    def __init__(self) -> None:
        self.dialect = SQLiteDialect()
        self._state: SQLiteConnectionState | None = None
        self.logger = get_logger("adapters.sqlite")

    # ------------------------------------------------------------------ #
    # Connection management
    # ------------------------------------------------------------------ #
    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        path = self._normalize_path(config.url)
        timeout = config.timeout if config.timeout is not None else 5.0

        try:
            connection = sqlite3.connect(
                path,
                isolation_level=None if config.autocommit else "",
                timeout=timeout,
                check_same_thread=False,
            )
        except sqlite3.Error as exc:
            raise AdapterConnectionError(
                f"Unable to open SQLite database {config.descriptive_label()}"
            ) from exc
        connection.row_factory = sqlite3.Row

        self._state = SQLiteConnectionState(connection)
        self.logger.debug("Connected", extra={"url": config.url})
        return connection

    @property
    def connected(self) -> bool:
        return self._state is not None

    def close(self) -> None:
        if self._state:
            self._state.connection.close()
            self._state = None

    def _ensure_connection(self) -> sqlite3.Connection:
        if not self._state:
            raise AdapterConnectionError("SQLiteAdapter is not connected.")
        return self._state.connection

    # ------------------------------------------------------------------ #
    # Execution helpers
    # ------------------------------------------------------------------ #
    def execute(self, sql: str, params: Sequence[Any] | None = None) -> sqlite3.Cursor:
        connection = self._ensure_connection()
        cursor = connection.cursor()
        params = params or ()
        try:
            with time_call("sqlite.execute", self.logger):
                cursor.execute(sql, params)
        except sqlite3.Error as exc:
            raise AdapterExecutionError(f"SQLite execution failed: {exc}") from exc
        self.logger.debug("SQL executed", extra={"sql": sql, "params": self._redact(params)})
        return cursor

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    def commit(self) -> None:
        connection = self._ensure_connection()
        connection.commit()

    def rollback(self) -> None:
        connection = self._ensure_connection()
        connection.rollback()

    @staticmethod
    def _normalize_path(url: str) -> str:
        if url == "sqlite:///:memory:":
            return ":memory:"
        prefix = "sqlite:///"
        if url.startswith(prefix):
            return url[len(prefix) :]
        return url

    @staticmethod
    def _redact(params: Sequence[Any]) -> Sequence[Any]:
        redacted = []
        for value in params:
            if isinstance(value, str) and "password" in value.lower():
                redacted.append("***")
            else:
                redacted.append(value)
        return redacted
