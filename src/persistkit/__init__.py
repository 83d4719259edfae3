"""
persistkit public package initialization.

Entities, a persistence context tracking their lifecycle, and the stores it
writes to.
"""

from .core.model import Model, ModelConfigurationError  # noqa: F401
from .core.fields import AutoField, IntegerField, StringField  # noqa: F401
from .domain import Customer  # noqa: F401
from .hooks import hooks  # noqa: F401
from .persistence import (  # noqa: F401
    EntityState,
    FlushError,
    FlushResult,
    InvalidStateError,
    NotManagedError,
    PersistenceContext,
    PersistenceError,
)
from .repository import CrudRepository, CustomerRepository  # noqa: F401
from .stores import (  # noqa: F401
    DuplicateKeyError,
    InMemoryStore,
    NotFoundError,
    SQLiteStore,
    Store,
    StoreError,
)

__all__ = [
    "Model",
    "AutoField",
    "IntegerField",
    "StringField",
    "ModelConfigurationError",
    "Customer",
    "hooks",
    "EntityState",
    "FlushError",
    "FlushResult",
    "InvalidStateError",
    "NotManagedError",
    "PersistenceContext",
    "PersistenceError",
    "CrudRepository",
    "CustomerRepository",
    "DuplicateKeyError",
    "InMemoryStore",
    "NotFoundError",
    "SQLiteStore",
    "Store",
    "StoreError",
]
