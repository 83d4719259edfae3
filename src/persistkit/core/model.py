"""
Entity base classes and metadata orchestration for persistkit.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Type

from ..utils import camel_to_snake
from .fields import AutoField, Field


class ModelConfigurationError(Exception):
    """Raised when a model class is misconfigured."""


@dataclass
class ModelOptions:
    """
    Container for model metadata calculated by :class:`ModelMeta`.
    """

    model: Type["Model"]
    table_name: str = ""
    abstract: bool = False
    fields: "OrderedDict[str, Field]" = field(default_factory=OrderedDict)
    primary_key: Optional[Field] = None

    def add_field(self, field_obj: Field) -> None:
        if field_obj.name in self.fields:
            raise ModelConfigurationError(
                f"Duplicate field name '{field_obj.name}' on model '{self.model.__name__}'"
            )
        self.fields[field_obj.name] = field_obj
        if field_obj.primary_key:
            if self.primary_key and self.primary_key is not field_obj:
                raise ModelConfigurationError(
                    f"Multiple primary keys defined on model '{self.model.__name__}'"
                )
            self.primary_key = field_obj

    def get_field(self, name: str) -> Field:
        try:
            return self.fields[name]
        except KeyError as exc:
            raise KeyError(f"Unknown field '{name}' on model '{self.model.__name__}'") from exc

    def get_fields(self) -> Iterable[Field]:
        return self.fields.values()

    def value_fields(self) -> list[Field]:
        return [f for f in self.fields.values() if not f.primary_key]


class ModelMeta(type):
    """
    Metaclass responsible for collecting fields and establishing metadata.
    """

    def __new__(mcls, name: str, bases: tuple[type, ...], attrs: Dict[str, Any]) -> "ModelMeta":
        # Allow creation of the base Model class without processing fields.
        if name == "Model" and bases == (object,):
            return super().__new__(mcls, name, bases, attrs)

        declared_fields: Dict[str, Field] = {}
        for attr_name, value in list(attrs.items()):
            if isinstance(value, Field):
                declared_fields[attr_name] = attrs.pop(attr_name)

        cls = super().__new__(mcls, name, bases, attrs)

        meta = getattr(cls, "Meta", None)
        table_name = camel_to_snake(name)
        abstract = False

        if meta:
            table_name = getattr(meta, "table", table_name)
            abstract = getattr(meta, "abstract", False)

        cls._meta = ModelOptions(model=cls, table_name=table_name, abstract=abstract)

        sorted_fields = sorted(declared_fields.items(), key=lambda item: item[1].creation_counter)
        for attr_name, field_obj in sorted_fields:
            field_obj.contribute_to_class(cls, attr_name)
            cls._meta.add_field(field_obj)

        if not cls._meta.primary_key and not cls._meta.abstract:
            if "id" in cls._meta.fields:
                raise ModelConfigurationError(
                    f"Model '{cls.__name__}' defines a field named 'id' but no primary key. "
                    "Either set primary_key=True on that field or define a different name."
                )
            auto_field = AutoField()
            auto_field.contribute_to_class(cls, "id")
            cls._meta.add_field(auto_field)
            cls._meta.fields = OrderedDict(
                sorted(
                    cls._meta.fields.items(),
                    key=lambda item: (0 if item[0] == "id" else 1, item[1].creation_counter),
                )
            )

        return cls


class Model(metaclass=ModelMeta):
    """
    Plain value container. Tracking state is owned by a persistence context,
    never by the instance itself.
    """

    def __init__(self, **kwargs: Any) -> None:
        self._field_values: Dict[str, Any] = {}

        for field_obj in self._meta.get_fields():
            if field_obj.name in kwargs:
                setattr(self, field_obj.name, kwargs[field_obj.name])
            elif field_obj.has_default:
                setattr(self, field_obj.name, field_obj.get_default())

        unknown = set(kwargs) - set(self._meta.fields)
        if unknown:
            raise TypeError(
                f"{self.__class__.__name__}() got unexpected field(s): {', '.join(sorted(unknown))}"
            )

    def __repr__(self) -> str:
        field_parts = ", ".join(
            f"{field_obj.name}={repr(self._field_values.get(field_obj.name))}"
            for field_obj in self._meta.get_fields()
            if field_obj.name in self._field_values
        )
        return f"<{self.__class__.__name__} {field_parts}>"

    def __setattr__(self, name: str, value: Any) -> None:
        pk_field = self._meta.primary_key if hasattr(self.__class__, "_meta") else None
        if pk_field is not None and name == pk_field.name:
            current = self.__dict__.get("_field_values", {}).get(name)
            if current is not None and value != current:
                raise ModelConfigurationError(
                    f"Identity of {self.__class__.__name__} is already assigned ({current!r})"
                )
        super().__setattr__(name, value)

    @property
    def pk(self) -> Any:
        if not self._meta.primary_key:
            raise ModelConfigurationError(
                f"Model '{self.__class__.__name__}' does not define a primary key."
            )
        return getattr(self, self._meta.primary_key.name)

    def to_dict(self) -> Dict[str, Any]:
        return {field_obj.name: getattr(self, field_obj.name) for field_obj in self._meta.get_fields()}

    def field_values(self) -> Dict[str, Any]:
        """
        Current values of every non-key field, the payload written to a store.
        """
        return {field_obj.name: getattr(self, field_obj.name) for field_obj in self._meta.value_fields()}

    def copy_values_from(self, other: "Model") -> None:
        if other.__class__ is not self.__class__:
            raise TypeError(
                f"Cannot copy {other.__class__.__name__} values onto {self.__class__.__name__}"
            )
        for name, value in other.field_values().items():
            setattr(self, name, value)
