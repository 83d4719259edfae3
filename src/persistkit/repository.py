"""
CRUD repositories layered over a persistence context.
"""

from __future__ import annotations

from typing import Any, Generic, Iterable, List, Optional, Type, TypeVar

from .core.model import Model
from .domain.customer import Customer
from .persistence import PersistenceContext

TModel = TypeVar("TModel", bound=Model)


class CrudRepository(Generic[TModel]):
    """
    Generic create/read/delete access for one model.

    Queries flush the context first, so entities saved in the same unit of
    work are always visible to them.
    """

    model: Type[TModel]

    def __init__(self, context: PersistenceContext, model: Optional[Type[TModel]] = None) -> None:
        self.context = context
        if model is not None:
            self.model = model
        if getattr(self, "model", None) is None:
            raise TypeError(f"{self.__class__.__name__} requires a model.")

    def save(self, entity: TModel) -> TModel:
        if entity.pk is None:
            self.context.persist(entity)
            return entity
        return self.context.merge(entity)

    def save_all(self, entities: Iterable[TModel]) -> List[TModel]:
        return [self.save(entity) for entity in entities]

    def find_by_id(self, identity: Any) -> Optional[TModel]:
        return self.context.find(self.model, identity)

    def exists_by_id(self, identity: Any) -> bool:
        return self.find_by_id(identity) is not None

    def find_all(self) -> List[TModel]:
        return self.context.find_all(self.model)

    def count(self) -> int:
        return len(self.find_all())

    def delete(self, entity: TModel) -> None:
        if not self.context.contains(entity):
            entity = self.context.merge(entity)
        self.context.remove(entity)

    def delete_by_id(self, identity: Any) -> None:
        entity = self.find_by_id(identity)
        if entity is None:
            raise LookupError(f"No {self.model.__name__} with identity {identity!r}")
        self.context.remove(entity)

    def delete_all(self) -> None:
        for entity in self.find_all():
            self.context.remove(entity)

    def _filter(self, **lookups: Any) -> List[TModel]:
        for name in lookups:
            self.model._meta.get_field(name)
        return [
            entity
            for entity in self.find_all()
            if all(getattr(entity, name) == value for name, value in lookups.items())
        ]


class CustomerRepository(CrudRepository[Customer]):
    model = Customer

    def find_by_last_name(self, last_name: str) -> List[Customer]:
        return self._filter(last_name=last_name)
