"""
Error hierarchy raised by the persistence context.
"""

from __future__ import annotations

from typing import Any, Optional, Type


class PersistenceError(Exception):
    """Base error for persistence context failures."""


class InvalidStateError(PersistenceError):
    """Raised when an operation is illegal for the instance's tracking state."""


class NotManagedError(PersistenceError):
    """Raised when detach or remove targets an instance the context does not track."""


class FlushError(PersistenceError):
    """
    Wraps a store failure raised while synchronizing, naming the pending
    operation that failed. The underlying store error is chained as ``__cause__``.
    """

    def __init__(self, operation: str, model: Type[Any], identity: Any, cause: Optional[BaseException] = None) -> None:
        self.operation = operation
        self.model = model
        self.identity = identity
        message = f"{operation} of {model.__name__} with identity {identity!r} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
