"""
Identity map ensuring a single tracked instance per (model, identity).
"""

from __future__ import annotations

from threading import RLock
from typing import Any, Dict, List, Optional, Tuple, Type

from ..core.model import Model
from .states import EntityEntry

Key = Tuple[Type[Model], Any]


class IdentityMap:
    """
    Stores tracking entries keyed by (model, primary key) in the order the
    identities were first tracked.
    """

    def __init__(self) -> None:
        self._store: Dict[Key, EntityEntry] = {}
        self._lock = RLock()

    @staticmethod
    def _make_key(instance_or_model, pk) -> Key:
        if isinstance(instance_or_model, type):
            model = instance_or_model
        else:
            model = instance_or_model.__class__
        return (model, pk)

    def add(self, entry: EntityEntry) -> None:
        pk = entry.instance.pk
        if pk is None:
            raise ValueError("Cannot track an instance without an identity.")
        key = self._make_key(entry.instance, pk)
        with self._lock:
            self._store[key] = entry

    def get(self, model: Type[Model], pk) -> Optional[EntityEntry]:
        key = self._make_key(model, pk)
        with self._lock:
            return self._store.get(key)

    def entry_for(self, instance: Model) -> Optional[EntityEntry]:
        """
        Entry tracking this exact instance, or ``None`` for untracked or
        foreign instances sharing the identity.
        """
        pk = instance.pk
        if pk is None:
            return None
        entry = self.get(instance.__class__, pk)
        if entry is None or entry.instance is not instance:
            return None
        return entry

    def remove(self, model: Type[Model], pk) -> Optional[EntityEntry]:
        key = self._make_key(model, pk)
        with self._lock:
            return self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def values(self) -> List[EntityEntry]:
        with self._lock:
            return list(self._store.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, instance: Model) -> bool:
        return self.entry_for(instance) is not None
