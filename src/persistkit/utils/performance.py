"""
Threshold resolution for slow store write warnings.
"""

from __future__ import annotations

import os

SLOW_WRITE_ENV = "PERSISTKIT_SLOW_WRITE_MS"


def resolve_slow_write_ms(*, default: int = 100, override: int | None = None) -> int:
    """
    Pick the slow-write threshold: explicit override, then environment, then default.
    """
    if override is not None:
        return override
    raw = os.getenv(SLOW_WRITE_ENV)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid integer value for {SLOW_WRITE_ENV}: {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{SLOW_WRITE_ENV} must be non-negative, got {value}")
    return value
