"""
Adapter protocol definitions for persistkit.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from ..dialects.base import Dialect


class AdapterError(RuntimeError):
    """Base error for adapter-related failures."""


class AdapterConfigurationError(AdapterError):
    """Raised when configuration is invalid or missing."""


class AdapterConnectionError(AdapterError):
    """Raised when establishing or using a connection fails."""


class AdapterExecutionError(AdapterError):
    """Raised when SQL execution fails."""


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(value: str, *, key: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise AdapterConfigurationError(f"Invalid boolean value for '{key}': {value!r}")


def _parse_float(value: str, *, key: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise AdapterConfigurationError(f"Invalid float value for '{key}': {value!r}") from exc


@dataclass
class ConnectionConfig:
    """
    Normalized connection configuration for adapters.

    Stores write through immediately, so ``autocommit`` defaults to ``True``;
    a flush that fails part way keeps the rows it already wrote.
    """

    url: str
    autocommit: bool = True
    timeout: float | None = None
    options: dict[str, Any] | None = None
    source: str | None = None

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a config from an environment variable holding the database URL.

        ``<env_var>_AUTOCOMMIT`` and ``<env_var>_TIMEOUT`` override the
        matching fields when present.
        """

        value = os.getenv(env_var)
        if not value:
            raise AdapterConfigurationError(f"Environment variable {env_var} is not set")

        autocommit_raw = os.getenv(f"{env_var}_AUTOCOMMIT")
        if autocommit_raw is not None and "autocommit" not in kwargs:
            kwargs["autocommit"] = _parse_bool(autocommit_raw, key=f"{env_var}_AUTOCOMMIT")
        timeout_raw = os.getenv(f"{env_var}_TIMEOUT")
        if timeout_raw is not None and "timeout" not in kwargs:
            kwargs["timeout"] = _parse_float(timeout_raw, key=f"{env_var}_TIMEOUT")

        return cls(url=value, source=env_var, **kwargs)

    def descriptive_label(self) -> str:
        """
        Describe the config source for diagnostics.
        """

        if self.source:
            return f"{self.source} ({self.url})"
        return self.url


class DatabaseAdapter(Protocol):
    """
    Adapter interface exposing database operations used by table stores.
    """

    dialect: Dialect

    def connect(self, config: ConnectionConfig) -> Any:
        """
        Establish a connection handle using the supplied configuration.
        """

    def close(self) -> None:
        """
        Close underlying resources. Implementations should be idempotent.
        """

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        """
        Execute a single SQL statement returning a cursor-like object.
        """

    def commit(self) -> None:
        """
        Commit the current transaction context.
        """

    def rollback(self) -> None:
        """
        Roll back the current transaction context.
        """
