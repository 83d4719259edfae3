"""
Dialect strategies used to render the fixed statements of table stores.
"""

from .base import Dialect
from .sqlite import SQLiteDialect

__all__ = ["Dialect", "SQLiteDialect"]
