"""
Utility helpers shared across persistkit packages.
"""

from .logging import configure_logging, get_logger, time_call
from .naming import camel_to_snake, sequence_table_name
from .performance import resolve_slow_write_ms

__all__ = [
    "camel_to_snake",
    "configure_logging",
    "get_logger",
    "resolve_slow_write_ms",
    "sequence_table_name",
    "time_call",
]
