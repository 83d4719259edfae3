"""
Store protocol: a key-indexed table written only by a persistence context.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

Row = Dict[str, Any]


class StoreError(RuntimeError):
    """Base error for store failures."""


class NotFoundError(StoreError):
    """Raised when an update or delete targets a missing row."""

    def __init__(self, identity: Any) -> None:
        self.identity = identity
        super().__init__(f"No row with identity {identity!r}")


class DuplicateKeyError(StoreError):
    """Raised when an insert reuses an identity already present in the store."""

    def __init__(self, identity: Any) -> None:
        self.identity = identity
        super().__init__(f"Row with identity {identity!r} already exists")


class Store(Protocol):
    """
    Backing medium for one entity table.

    Reads may bypass the persistence context (verification code does), writes
    must not.
    """

    def next_identity(self) -> int:
        """
        Reserve and return the next identity. Values increase monotonically and
        are never handed out twice, even when the row is never written.
        """

    def insert(self, identity: Any, fields: Mapping[str, Any]) -> None: ...

    def update(self, identity: Any, fields: Mapping[str, Any]) -> None: ...

    def delete(self, identity: Any) -> None: ...

    def read(self, identity: Any) -> Optional[Row]: ...

    def read_all(self) -> List[Tuple[Any, Row]]:
        """
        Every row as ``(identity, fields)`` ordered by identity.
        """

    def close(self) -> None: ...
