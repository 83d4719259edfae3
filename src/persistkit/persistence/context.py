"""
Persistence context coordinating the identity map, unit of work, and stores.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar

from ..adapters.base import AdapterError
from ..core.model import Model
from ..stores.base import Store, StoreError
from ..utils import get_logger, resolve_slow_write_ms, time_call
from .errors import FlushError, InvalidStateError, NotManagedError
from .identity_map import IdentityMap
from .states import EntityEntry, EntityState
from .unit_of_work import UnitOfWork

if TYPE_CHECKING:
    from ..hooks import HookDispatcher

TModel = TypeVar("TModel", bound=Model)


@dataclass
class FlushResult:
    """
    Identities written by one flush, per operation.
    """

    inserted: List[Any] = field(default_factory=list)
    updated: List[Any] = field(default_factory=list)
    deleted: List[Any] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.inserted) + len(self.updated) + len(self.deleted)


class PersistenceContext:
    """
    Tracks entity instances for one unit of work and writes their pending
    changes to the backing store on :meth:`flush`.

    Changes are detected by comparing each managed instance with the snapshot
    taken when it became managed, so plain attribute assignment is enough to
    schedule an update. Not safe for concurrent use.
    """

    def __init__(
        self,
        store: Optional[Store] = None,
        *,
        stores: Optional[Mapping[Type[Model], Store]] = None,
        hooks: Optional["HookDispatcher"] = None,
        slow_write_ms: Optional[int] = None,
    ) -> None:
        if store is None and not stores:
            raise ValueError("PersistenceContext requires a store.")
        self.store = store
        self._stores: Dict[Type[Model], Store] = dict(stores or {})
        self.identity_map = IdentityMap()
        self.unit_of_work = UnitOfWork()
        if hooks is None:
            from ..hooks import hooks as default_hooks

            hooks = default_hooks
        self.hooks = hooks
        self.slow_write_ms = resolve_slow_write_ms(default=100, override=slow_write_ms)
        self.logger = get_logger("persistence.context")
        self._closed = False

    # ------------------------------------------------------------------ #
    # Context management
    # ------------------------------------------------------------------ #
    def __enter__(self) -> "PersistenceContext":
        self._ensure_open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self.flush()
            else:
                self.logger.debug(
                    "Unit of work abandoned",
                    extra={"error": repr(exc), "pending": self.unit_of_work.has_pending()},
                )
        finally:
            self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def clear(self) -> None:
        """
        Drop every tracking entry; tracked instances become detached.
        """
        self.identity_map.clear()
        self.unit_of_work.clear()

    def close(self) -> None:
        self.clear()
        self._closed = True

    # ------------------------------------------------------------------ #
    # Lifecycle operations
    # ------------------------------------------------------------------ #
    def persist(self, instance: Model) -> None:
        self._ensure_open()
        entry = self.identity_map.entry_for(instance)
        if entry is not None:
            if entry.state is EntityState.REMOVED:
                raise InvalidStateError(
                    f"{self._describe(instance)} is scheduled for removal; use merge() to keep it."
                )
            return
        if instance.pk is not None:
            raise InvalidStateError(f"Detached {self._describe(instance)} passed to persist; use merge().")

        identity = self._store_for(instance.__class__).next_identity()
        setattr(instance, self._pk_name(instance.__class__), identity)
        self._track(instance, is_new=True)
        self.logger.debug("persist", extra={"model": instance.__class__.__name__, "identity": identity})
        self.hooks.fire("after_persist", instance, context=self)

    def contains(self, instance: Model) -> bool:
        self._ensure_open()
        entry = self.identity_map.entry_for(instance)
        return entry is not None and entry.state is EntityState.MANAGED

    def detach(self, instance: Model) -> None:
        self._ensure_open()
        entry = self._require_tracked(instance, "detach")
        self.identity_map.remove(instance.__class__, instance.pk)
        self.unit_of_work.discard(entry.key)
        self.logger.debug("detach", extra={"model": instance.__class__.__name__, "identity": instance.pk})
        self.hooks.fire("after_detach", instance, context=self)

    def merge(self, instance: TModel) -> TModel:
        """
        Copy the state of ``instance`` onto the managed instance for its
        identity and return that managed instance. ``instance`` itself is never
        tracked by this call.
        """
        self._ensure_open()
        model = instance.__class__
        identity = instance.pk

        if identity is None:
            managed = self._instantiate(model, instance.field_values())
            self.persist(managed)
        else:
            entry = self.identity_map.get(model, identity)
            if entry is not None:
                managed = entry.instance
                if managed is not instance:
                    managed.copy_values_from(instance)
                if entry.state is EntityState.REMOVED:
                    entry.state = EntityState.MANAGED
                    self.unit_of_work.discard(entry.key)
            else:
                row = self._store_for(model).read(identity)
                if row is None:
                    # Unknown to the store: persist a copy under a freshly generated identity.
                    managed = self._instantiate(model, instance.field_values())
                    self.persist(managed)
                else:
                    managed = self._manage_loaded(model, identity, row)
                    managed.copy_values_from(instance)

        self.logger.debug("merge", extra={"model": model.__name__, "identity": managed.pk})
        self.hooks.fire("after_merge", managed, context=self, source=instance)
        return managed

    def remove(self, instance: Model) -> None:
        self._ensure_open()
        entry = self._require_tracked(instance, "remove")
        if entry.state is EntityState.REMOVED:
            return
        if entry.is_new:
            # Never written, so there is nothing to delete.
            self.identity_map.remove(instance.__class__, instance.pk)
            self.unit_of_work.discard(entry.key)
        else:
            entry.state = EntityState.REMOVED
            self.unit_of_work.register_deleted(entry)
        self.logger.debug("remove", extra={"model": instance.__class__.__name__, "identity": instance.pk})
        self.hooks.fire("after_remove", instance, context=self)

    def state_of(self, instance: Model) -> EntityState:
        self._ensure_open()
        entry = self.identity_map.entry_for(instance)
        if entry is not None:
            return entry.state
        if instance.pk is not None:
            return EntityState.DETACHED
        return EntityState.TRANSIENT

    # ------------------------------------------------------------------ #
    # Synchronization
    # ------------------------------------------------------------------ #
    def flush(self) -> FlushResult:
        """
        Write pending inserts, then dirty managed instances, then removals.

        Stops at the first store failure with :class:`FlushError`; writes that
        already succeeded are kept and their entries updated accordingly.
        """
        self._ensure_open()
        result = FlushResult()
        self.hooks.fire("before_flush", None, context=self)

        for key, entry in list(self.unit_of_work.new.items()):
            values = entry.instance.field_values()
            self._write("insert", entry, lambda store: store.insert(entry.instance.pk, values))
            entry.is_new = False
            entry.snapshot = dict(values)
            self.unit_of_work.new.pop(key, None)
            result.inserted.append(entry.instance.pk)
            self.hooks.fire("after_insert", entry.instance, context=self)

        for entry in self.unit_of_work.collect_dirty(self.identity_map.values()):
            values = entry.instance.field_values()
            self._write("update", entry, lambda store: store.update(entry.instance.pk, values))
            entry.snapshot = dict(values)
            result.updated.append(entry.instance.pk)
            self.hooks.fire("after_update", entry.instance, context=self)

        for key, entry in list(self.unit_of_work.deleted.items()):
            self._write("delete", entry, lambda store: store.delete(entry.instance.pk))
            self.identity_map.remove(*key)
            self.unit_of_work.deleted.pop(key, None)
            result.deleted.append(entry.instance.pk)
            self.hooks.fire("after_delete", entry.instance, context=self)

        self.hooks.fire("after_flush", None, context=self, result=result)
        if result.total:
            self.logger.debug(
                "Flushed %s write(s)",
                result.total,
                extra={
                    "inserted": len(result.inserted),
                    "updated": len(result.updated),
                    "deleted": len(result.deleted),
                },
            )
        return result

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #
    def find(self, model: Type[TModel], identity: Any) -> Optional[TModel]:
        self._ensure_open()
        entry = self.identity_map.get(model, identity)
        if entry is not None:
            return entry.instance if entry.state is EntityState.MANAGED else None
        row = self._store_for(model).read(identity)
        if row is None:
            return None
        return self._manage_loaded(model, identity, row)

    def find_all(self, model: Type[TModel]) -> List[TModel]:
        """
        Flush pending work, then return a managed instance for every row.
        """
        self.flush()
        instances: List[TModel] = []
        for identity, row in self._store_for(model).read_all():
            entry = self.identity_map.get(model, identity)
            if entry is None:
                instances.append(self._manage_loaded(model, identity, row))
            elif entry.state is EntityState.MANAGED:
                instances.append(entry.instance)
        return instances

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _ensure_open(self) -> None:
        if self._closed:
            raise InvalidStateError("PersistenceContext is closed.")

    def _store_for(self, model: Type[Model]) -> Store:
        store = self._stores.get(model, self.store)
        if store is None:
            raise InvalidStateError(f"No store registered for model '{model.__name__}'.")
        return store

    def _require_tracked(self, instance: Model, operation: str) -> EntityEntry:
        entry = self.identity_map.entry_for(instance)
        if entry is None:
            raise NotManagedError(f"Cannot {operation} {self._describe(instance)}: not managed by this context.")
        return entry

    def _track(self, instance: Model, *, is_new: bool) -> EntityEntry:
        existing = self.identity_map.get(instance.__class__, instance.pk)
        if existing is not None and existing.instance is not instance:
            raise InvalidStateError(
                f"Another instance of {self._describe(instance)} is already tracked by this context."
            )
        entry = EntityEntry(instance=instance, state=EntityState.MANAGED, is_new=is_new)
        entry.refresh_snapshot()
        self.identity_map.add(entry)
        if is_new:
            self.unit_of_work.register_new(entry)
        return entry

    def _manage_loaded(self, model: Type[TModel], identity: Any, row: Mapping[str, Any]) -> TModel:
        instance = self._instantiate(model, {**row, self._pk_name(model): identity})
        self._track(instance, is_new=False)
        return instance

    def _write(self, operation: str, entry: EntityEntry, call: Callable[[Store], None]) -> None:
        model = entry.instance.__class__
        identity = entry.instance.pk
        store = self._store_for(model)
        try:
            with time_call(
                f"store.{operation}",
                self.logger,
                operation=operation,
                params=(model.__name__, identity),
                threshold_ms=self.slow_write_ms,
            ):
                call(store)
        except (StoreError, AdapterError) as exc:
            self.logger.error(
                "Flush failed during %s of %s %r", operation, model.__name__, identity
            )
            raise FlushError(operation, model, identity, exc) from exc

    @staticmethod
    def _instantiate(model: Type[TModel], data: Mapping[str, Any]) -> TModel:
        # Bypass subclass constructors; rows map onto fields directly.
        instance = model.__new__(model)
        Model.__init__(instance, **data)
        return instance

    @staticmethod
    def _pk_name(model: Type[Model]) -> str:
        pk_field = model._meta.primary_key
        if pk_field is None:
            raise InvalidStateError(f"Model '{model.__name__}' lacks a primary key.")
        return pk_field.require_name()

    @staticmethod
    def _describe(instance: Model) -> str:
        return f"{instance.__class__.__name__}(id={instance.pk!r})"
