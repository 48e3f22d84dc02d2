"""Recursive freezing of validated configuration values.

Pydantic models and dataclass instances are re-homed onto a frozen subclass
of their own class, so ``isinstance(value, Schema)`` keeps working while
assignment raises (``pydantic.ValidationError`` for models,
``dataclasses.FrozenInstanceError`` for dataclasses).  Containers are swapped
for their read-only counterparts (``MappingProxyType``, ``tuple``,
``frozenset``).  Scalars are already immutable and pass through untouched.

A frozen model keeps a private deep copy of the validated model it was built
from and serializes through it, so ``model_dump``/``model_dump_json`` produce
the same output as the original even though the live fields hold read-only
containers.  ``model_copy`` applies its update to that copy and freezes the
result.
"""

from __future__ import annotations

import dataclasses
import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    PrivateAttr,
    SerializationInfo,
    SerializerFunctionWrapHandler,
    model_serializer,
)

_SOURCE_ATTR = "_frozen_source"

_FROZEN_CLASSES: dict[type, type] = {}
_GENERATED_CLASSES: set[type] = set()
_FROZEN_CLASSES_LOCK = threading.Lock()


def deep_freeze(value: Any) -> Any:
    """Return a structurally immutable copy of *value*.

    Args:
        value: A validated configuration value (model, dataclass, mapping,
            sequence, scalar).

    Returns:
        The frozen equivalent.  Scalars and other objects are returned as-is.
    """
    if isinstance(value, BaseModel):
        return _freeze_model(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _freeze_dataclass(value)
    if isinstance(value, Mapping):
        return MappingProxyType({k: deep_freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(deep_freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(deep_freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Return a serializable rendering of a value produced by :func:`deep_freeze`.

    Read-only mappings become dicts and tuples become lists.  Frozen dataclasses
    become dicts of their fields.  Models are returned as-is since a frozen
    model serializes through its source copy.
    """
    if isinstance(value, BaseModel):
        return value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {field.name: thaw(getattr(value, field.name)) for field in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


def _freeze_model(model: BaseModel) -> BaseModel:
    model_cls = type(model)
    frozen_cls = _frozen_class_for(model_cls, _build_frozen_model_class)

    private = dict(model.__pydantic_private__ or {})
    source = private.get(_SOURCE_ATTR) if model_cls in _GENERATED_CLASSES else None
    private[_SOURCE_ATTR] = source if source is not None else model.model_copy(deep=True)

    values = {name: deep_freeze(getattr(model, name)) for name in model_cls.model_fields}
    extra = {k: deep_freeze(v) for k, v in (model.model_extra or {}).items()}

    # Populated directly rather than through model_construct, which matches
    # aliases before field names.
    frozen = frozen_cls.__new__(frozen_cls)
    object.__setattr__(frozen, "__dict__", values)
    object.__setattr__(frozen, "__pydantic_fields_set__", set(model.model_fields_set))
    object.__setattr__(frozen, "__pydantic_extra__", extra if model.model_extra is not None else None)
    object.__setattr__(frozen, "__pydantic_private__", private)
    return frozen


def _serialize_from_source(
    self: BaseModel,
    handler: SerializerFunctionWrapHandler,
    info: SerializationInfo,
) -> Any:
    source: BaseModel | None = self.__pydantic_private__[_SOURCE_ATTR]
    if source is None:
        return handler(self)
    return source.model_dump(
        mode=info.mode,
        include=info.include,
        exclude=info.exclude,
        context=info.context,
        by_alias=info.by_alias,
        exclude_unset=info.exclude_unset,
        exclude_defaults=info.exclude_defaults,
        exclude_none=info.exclude_none,
        round_trip=info.round_trip,
    )


def _copy_from_source(
    self: BaseModel,
    *,
    update: Mapping[str, Any] | None = None,
    deep: bool = False,
) -> BaseModel:
    source: BaseModel | None = self.__pydantic_private__[_SOURCE_ATTR]
    if source is None:
        return BaseModel.model_copy(self, update=update, deep=deep)
    return deep_freeze(source.model_copy(update=update, deep=deep))


def _build_frozen_model_class(model_cls: type[BaseModel]) -> type[BaseModel]:
    return type(
        model_cls.__name__,
        (model_cls,),
        {
            "model_config": ConfigDict(frozen=True),
            _SOURCE_ATTR: PrivateAttr(default=None),
            "_serialize_frozen": model_serializer(mode="wrap")(_serialize_from_source),
            "model_copy": _copy_from_source,
            "__module__": model_cls.__module__,
            "__qualname__": model_cls.__qualname__,
        },
    )


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


def _freeze_dataclass(instance: Any) -> Any:
    frozen_cls = _frozen_class_for(type(instance), _build_frozen_dataclass)
    frozen = object.__new__(frozen_cls)
    for field in dataclasses.fields(instance):
        object.__setattr__(frozen, field.name, deep_freeze(getattr(instance, field.name)))
    return frozen


def _reject_mutation(self: Any, name: str, *args: Any) -> None:
    raise dataclasses.FrozenInstanceError(f"cannot assign to field {name!r}")


def _build_frozen_dataclass(cls: type) -> type:
    return type(
        cls.__name__,
        (cls,),
        {
            "__setattr__": _reject_mutation,
            "__delattr__": _reject_mutation,
            "__module__": cls.__module__,
            "__qualname__": cls.__qualname__,
        },
    )


# ---------------------------------------------------------------------------
# Class cache
# ---------------------------------------------------------------------------


def _frozen_class_for(cls: type, build: Any) -> type:
    with _FROZEN_CLASSES_LOCK:
        if cls in _GENERATED_CLASSES:
            return cls
        frozen_cls = _FROZEN_CLASSES.get(cls)
        if frozen_cls is None:
            frozen_cls = build(cls)
            _FROZEN_CLASSES[cls] = frozen_cls
            _GENERATED_CLASSES.add(frozen_cls)
        return frozen_cls
