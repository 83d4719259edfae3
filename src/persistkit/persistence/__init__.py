"""
Persistence layer components: persistence context, unit of work, identity map.
"""

from .context import FlushResult, PersistenceContext
from .errors import FlushError, InvalidStateError, NotManagedError, PersistenceError
from .identity_map import IdentityMap
from .states import EntityEntry, EntityState
from .unit_of_work import UnitOfWork

__all__ = [
    "EntityEntry",
    "EntityState",
    "FlushError",
    "FlushResult",
    "IdentityMap",
    "InvalidStateError",
    "NotManagedError",
    "PersistenceContext",
    "PersistenceError",
    "UnitOfWork",
]
