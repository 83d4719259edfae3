"""
Backing stores written by a persistence context during flush.
"""

from .base import DuplicateKeyError, NotFoundError, Store, StoreError
from .memory import InMemoryStore
from .sqlite import SQLiteStore

__all__ = [
    "DuplicateKeyError",
    "InMemoryStore",
    "NotFoundError",
    "SQLiteStore",
    "Store",
    "StoreError",
]
