"""
Tracking states and the per-identity tracking record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from ..core.model import Model


class EntityState(Enum):
    TRANSIENT = "transient"
    MANAGED = "managed"
    DETACHED = "detached"
    REMOVED = "removed"


@dataclass
class EntityEntry:
    """
    What a context knows about one identity: the tracked instance, its state,
    the values last synchronized (or loaded), and whether a row exists yet.
    """

    instance: Model
    state: EntityState
    snapshot: Dict[str, Any] = field(default_factory=dict)
    is_new: bool = False

    @property
    def key(self) -> tuple[type, Any]:
        return (self.instance.__class__, self.instance.pk)

    def is_dirty(self) -> bool:
        return self.instance.field_values() != self.snapshot

    def refresh_snapshot(self) -> None:
        self.snapshot = dict(self.instance.field_values())
