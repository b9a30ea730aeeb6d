"""
fieldwalk — schema registration

File: src/fieldwalk/traversal/registry.py
Last updated: 2026-10-18

Purpose
- Let a caller declare, once per class, the ordered (name, type, accessor) field list.
- Derive declarations from dataclass annotations when the caller prefers that.

Functional requirements
- The schema is stored on the class itself; there is no process-wide table.
- A class can be registered only once; a second registration raises ``SchemaError``.
- Annotations resolve lazily so a dataclass may refer to itself.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import types
import typing
from enum import Enum
from typing import Annotated, Any, Final, Union

from fieldwalk.domain.schema import (
    BOOL,
    BYTES,
    INT64,
    STRING,
    AggregateSchema,
    EnumSpec,
    FieldSpec,
    SequenceSpec,
    TypeSpec,
    VariantSpec,
)
from fieldwalk.errors import SchemaError

if typing.TYPE_CHECKING:
    from collections.abc import Callable

    from fieldwalk.domain.schema import FieldSource

SCHEMA_ATTRIBUTE: Final[str] = "__fieldwalk_schema__"
# dataclasses.field(metadata={FIELD_METADATA_KEY: UINT16}) overrides the annotation.
FIELD_METADATA_KEY: Final[str] = "fieldwalk"

_SEQUENCE_ORIGINS: Final[tuple[object, ...]] = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
)


def field(
    name: str,
    type_: object,
    *,
    get: Callable[[Any], Any] | None = None,
    set: Callable[[Any, Any], None] | None = None,  # noqa: A002
) -> FieldSpec:
    """Build one field entry; ``type_`` may be a ``TypeSpec`` or a supported annotation."""

    return FieldSpec(name=name, type=resolve_type(type_), getter=get, setter=set)


def register(
    cls: type,
    fields: FieldSource,
    *,
    name: str | None = None,
    factory: Callable[[], Any] | None = None,
) -> AggregateSchema:
    """Attach an aggregate schema to ``cls`` and return it."""

    if not isinstance(cls, type):
        raise SchemaError(f"register() expects a class, got {cls!r}")
    if SCHEMA_ATTRIBUTE in vars(cls):
        raise SchemaError(f"{cls.__qualname__} already has a registered schema")
    schema = AggregateSchema(cls, fields, name=name, factory=factory)
    setattr(cls, SCHEMA_ATTRIBUTE, schema)
    return schema


def traversable(
    cls: type | None = None,
    *,
    name: str | None = None,
    factory: Callable[[], Any] | None = None,
) -> Any:
    """Class decorator registering a dataclass from its field annotations.

    Usable bare (``@traversable``) or with options (``@traversable(name="Pt")``).
    """

    def wrap(target: type) -> type:
        if not dataclasses.is_dataclass(target):
            raise SchemaError(f"@traversable requires a dataclass, got {target.__qualname__}")
        register(target, lambda: _dataclass_fields(target), name=name, factory=factory)
        return target

    if cls is None:
        return wrap
    return wrap(cls)


def schema_of(obj: object) -> AggregateSchema:
    """Return the registered schema for a class or an instance of it."""

    cls = obj if isinstance(obj, type) else type(obj)
    schema = getattr(cls, SCHEMA_ATTRIBUTE, None)
    if not isinstance(schema, AggregateSchema):
        raise SchemaError(f"{cls.__qualname__} has no registered schema")
    return schema


def is_registered(obj: object) -> bool:
    cls = obj if isinstance(obj, type) else type(obj)
    return isinstance(getattr(cls, SCHEMA_ATTRIBUTE, None), AggregateSchema)


def resolve_type(hint: object) -> TypeSpec:
    """Map a descriptor, registered class or annotation to a ``TypeSpec``."""

    if isinstance(hint, TypeSpec):
        return hint

    origin = typing.get_origin(hint)
    args = typing.get_args(hint)

    if origin is Annotated:
        for item in args[1:]:
            if isinstance(item, TypeSpec):
                return item
        return resolve_type(args[0])

    if origin is Union or origin is types.UnionType:
        if type(None) in args:
            raise SchemaError(f"optional values have no wire representation: {hint!r}")
        return VariantSpec(tuple(resolve_type(arg) for arg in args))

    if origin in _SEQUENCE_ORIGINS:
        if len(args) != 1:
            raise SchemaError(f"sequence annotation needs one element type: {hint!r}")
        return SequenceSpec(resolve_type(args[0]))

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return SequenceSpec(resolve_type(args[0]))
        raise SchemaError(f"only homogeneous tuple[T, ...] is supported: {hint!r}")

    if isinstance(hint, type):
        schema = getattr(hint, SCHEMA_ATTRIBUTE, None)
        if isinstance(schema, AggregateSchema):
            return schema
        if issubclass(hint, bool):
            return BOOL
        if issubclass(hint, Enum):
            return EnumSpec(hint)
        if issubclass(hint, int):
            return INT64
        if issubclass(hint, str):
            return STRING
        if issubclass(hint, (bytes, bytearray)):
            return BYTES

    raise SchemaError(f"cannot derive a traversal type from {hint!r}")


def sequence_of(element: object) -> SequenceSpec:
    return SequenceSpec(resolve_type(element))


def variant_of(*alternatives: object) -> VariantSpec:
    return VariantSpec(tuple(resolve_type(item) for item in alternatives))


def enum_of(enum_type: type[Enum], *, width: int = 32, signed: bool = False) -> EnumSpec:
    return EnumSpec(enum_type, width=width, signed=signed)


def _dataclass_fields(cls: type) -> list[FieldSpec]:
    try:
        hints = typing.get_type_hints(cls, include_extras=True)
    except NameError as exc:
        raise SchemaError(f"cannot resolve annotations of {cls.__qualname__}: {exc}") from exc

    entries: list[FieldSpec] = []
    for item in dataclasses.fields(cls):
        declared = item.metadata.get(FIELD_METADATA_KEY, hints.get(item.name, item.type))
        try:
            spec = resolve_type(declared)
        except SchemaError as exc:
            raise SchemaError(f"{cls.__qualname__}.{item.name}: {exc}") from exc
        entries.append(FieldSpec(name=item.name, type=spec))
    return entries


__all__ = [
    "FIELD_METADATA_KEY",
    "SCHEMA_ATTRIBUTE",
    "enum_of",
    "field",
    "is_registered",
    "register",
    "resolve_type",
    "schema_of",
    "sequence_of",
    "traversable",
    "variant_of",
]
