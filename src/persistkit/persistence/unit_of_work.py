"""
Unit of Work tracking the pending writes of one persistence context.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Tuple, Type

from ..core.model import Model
from .states import EntityEntry, EntityState

Key = Tuple[Type[Model], Any]


class UnitOfWork:
    """
    Ordered queues of pending inserts and removals. Dicts are used as ordered
    sets so flush replays operations in the order they were requested.
    """

    def __init__(self) -> None:
        self.new: Dict[Key, EntityEntry] = {}
        self.deleted: Dict[Key, EntityEntry] = {}

    # Registration methods ----------------------------------------------
    def register_new(self, entry: EntityEntry) -> None:
        self.new[entry.key] = entry

    def register_deleted(self, entry: EntityEntry) -> None:
        self.deleted[entry.key] = entry

    def discard(self, key: Key) -> None:
        self.new.pop(key, None)
        self.deleted.pop(key, None)

    def collect_dirty(self, candidates: Iterable[EntityEntry]) -> List[EntityEntry]:
        return [
            entry
            for entry in candidates
            if entry.state is EntityState.MANAGED and not entry.is_new and entry.is_dirty()
        ]

    def has_pending(self) -> bool:
        return bool(self.new or self.deleted)

    def clear(self) -> None:
        self.new.clear()
        self.deleted.clear()
