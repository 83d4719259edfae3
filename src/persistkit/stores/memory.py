"""
Dictionary-backed store.
"""

from __future__ import annotations

import itertools
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..utils import get_logger
from .base import DuplicateKeyError, NotFoundError, Row


class InMemoryStore:
    def __init__(self, *, start: int = 1) -> None:
        self._rows: Dict[Any, Row] = {}
        self._sequence = itertools.count(start)
        self._lock = RLock()
        self.logger = get_logger("stores.memory")

    def next_identity(self) -> int:
        with self._lock:
            return next(self._sequence)

    def insert(self, identity: Any, fields: Mapping[str, Any]) -> None:
        with self._lock:
            if identity in self._rows:
                raise DuplicateKeyError(identity)
            self._rows[identity] = dict(fields)
        self.logger.debug("insert", extra={"identity": identity})

    def update(self, identity: Any, fields: Mapping[str, Any]) -> None:
        with self._lock:
            if identity not in self._rows:
                raise NotFoundError(identity)
            self._rows[identity] = dict(fields)
        self.logger.debug("update", extra={"identity": identity})

    def delete(self, identity: Any) -> None:
        with self._lock:
            if self._rows.pop(identity, None) is None:
                raise NotFoundError(identity)
        self.logger.debug("delete", extra={"identity": identity})

    def read(self, identity: Any) -> Optional[Row]:
        with self._lock:
            row = self._rows.get(identity)
            return dict(row) if row is not None else None

    def read_all(self) -> List[Tuple[Any, Row]]:
        with self._lock:
            return [(identity, dict(self._rows[identity])) for identity in sorted(self._rows)]

    def find_by(self, field_name: str, value: Any) -> List[Tuple[Any, Row]]:
        return [(identity, row) for identity, row in self.read_all() if row.get(field_name) == value]

    def close(self) -> None:
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)
