"""
fieldwalk — unit tests for schema registration

File: tests/unit/traversal/test_registry.py
Last updated: 2026-10-18

Purpose
- Validate one-time schema declaration and annotation-driven derivation.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Annotated

import pytest

from fieldwalk.domain.schema import (
    BOOL,
    BYTES,
    INT64,
    STRING,
    UINT16,
    AggregateSchema,
    EnumSpec,
    SequenceSpec,
    TextSpec,
    VariantSpec,
)
from fieldwalk.errors import SchemaError
from fieldwalk.traversal.registry import (
    FIELD_METADATA_KEY,
    SCHEMA_ATTRIBUTE,
    enum_of,
    field,
    is_registered,
    register,
    resolve_type,
    schema_of,
    traversable,
)


class Shade(IntEnum):
    LIGHT = 1
    DARK = 2


class Signal(Enum):
    LOW = -1
    HIGH = 1


@traversable
@dataclass
class Leaf:
    label: str = ""


@traversable(name="Tree")
@dataclass
class TreeNode:
    leaf: Leaf = dataclasses.field(default_factory=Leaf)
    children: list[TreeNode] = dataclasses.field(default_factory=list)
    tags: tuple[str, ...] = ()
    payload: int | str = 0
    port: int = dataclasses.field(default=0, metadata={FIELD_METADATA_KEY: UINT16})
    weight: Annotated[int, UINT16] = 0
    shade: Shade = Shade.LIGHT
    raw: bytes = b""
    enabled: bool = False


@dataclass
class Optional_:
    value: int | None = None


class Plain:
    def __init__(self) -> None:
        self.a = 0


@pytest.mark.unit
def test_traversable_derives_fields_from_annotations() -> None:
    schema = schema_of(TreeNode)
    assert schema.name == "Tree"
    types = {entry.name: entry.type for entry in schema.fields}
    assert types["leaf"] is schema_of(Leaf)
    assert types["children"] == SequenceSpec(schema)
    assert types["tags"] == SequenceSpec(STRING)
    assert isinstance(types["payload"], VariantSpec)
    assert types["payload"].alternatives == (INT64, STRING)
    assert types["port"] == UINT16
    assert types["weight"] == UINT16
    assert types["shade"] == EnumSpec(Shade)
    assert types["raw"] == BYTES
    assert types["enabled"] == BOOL
    assert [entry.name for entry in schema.fields] == [
        "leaf",
        "children",
        "tags",
        "payload",
        "port",
        "weight",
        "shade",
        "raw",
        "enabled",
    ]


@pytest.mark.unit
def test_fields_are_computed_once() -> None:
    schema = schema_of(TreeNode)
    assert schema.fields is schema.fields
    assert isinstance(schema.fields, tuple)


@pytest.mark.unit
def test_schema_of_accepts_instances() -> None:
    assert schema_of(Leaf("x")) is schema_of(Leaf)
    assert is_registered(Leaf)
    assert not is_registered(Plain)
    with pytest.raises(SchemaError, match="no registered schema"):
        schema_of(Plain)


@pytest.mark.unit
def test_register_twice_raises() -> None:
    class Twice:
        pass

    register(Twice, [])
    with pytest.raises(SchemaError, match="already"):
        register(Twice, [])


@pytest.mark.unit
def test_subclass_may_register_its_own_schema() -> None:
    class Base:
        pass

    class Derived(Base):
        pass

    register(Base, [])
    schema = register(Derived, [])
    assert getattr(Derived, SCHEMA_ATTRIBUTE) is schema
    assert schema_of(Base) is not schema


@pytest.mark.unit
def test_explicit_registration_with_accessors() -> None:
    class Boxed:
        def __init__(self) -> None:
            self.store = {"n": 0}

    schema = register(
        Boxed,
        [
            field(
                "n",
                UINT16,
                get=lambda obj: obj.store["n"],
                set=lambda obj, value: obj.store.__setitem__("n", value),
            )
        ],
    )
    boxed = schema.default()
    schema.field("n").set(boxed, 9)
    assert boxed.store == {"n": 9}
    assert schema.field("n").get(boxed) == 9
    with pytest.raises(KeyError):
        schema.field("missing")


@pytest.mark.unit
def test_duplicate_field_names_are_rejected() -> None:
    class Dup:
        pass

    schema = register(Dup, [field("a", INT64), field("a", STRING)])
    with pytest.raises(SchemaError, match="twice"):
        _ = schema.fields


@pytest.mark.unit
def test_traversable_requires_dataclass() -> None:
    with pytest.raises(SchemaError, match="dataclass"):
        traversable(Plain)


@pytest.mark.unit
def test_optional_annotations_are_rejected() -> None:
    traversable(Optional_)
    with pytest.raises(SchemaError, match="optional"):
        _ = schema_of(Optional_).fields


@pytest.mark.unit
def test_resolve_type_rejects_unknown_hints() -> None:
    with pytest.raises(SchemaError):
        resolve_type(float)
    with pytest.raises(SchemaError):
        resolve_type(tuple[int, str])


@pytest.mark.unit
def test_enum_descriptor_options() -> None:
    spec = enum_of(Signal, width=8, signed=True)
    assert spec.to_wire(Signal.LOW) == -1
    assert spec.from_wire(-1) is Signal.LOW
    assert spec.from_wire(5) == 5
    assert EnumSpec(Shade).default() is Shade.LIGHT


@pytest.mark.unit
def test_enum_with_non_integer_values_is_rejected() -> None:
    class Named(Enum):
        A = "a"

    with pytest.raises(SchemaError, match="integer value"):
        EnumSpec(Named)


@pytest.mark.unit
def test_aggregate_schema_min_wire_size() -> None:
    class Hollow:
        pass

    hollow = register(Hollow, [])
    assert isinstance(hollow, AggregateSchema)
    assert hollow.min_wire_size == 0
    assert schema_of(TreeNode).min_wire_size == 1


@pytest.mark.unit
def test_frozen_dataclass_is_marked_frozen() -> None:
    @traversable
    @dataclass(frozen=True)
    class Fixed:
        code: int = 0

    schema = schema_of(Fixed)
    assert schema.frozen
    assert schema.assign(Fixed(1), {schema.field("code"): 2}) == Fixed(2)
    assert not schema_of(Leaf).frozen


@pytest.mark.unit
def test_frozen_dataclass_needs_init_fields() -> None:
    @traversable
    @dataclass(frozen=True)
    class Derived:
        code: int = 0
        cached: int = dataclasses.field(default=0, init=False)

    with pytest.raises(SchemaError, match="__init__ parameter or a setter"):
        _ = schema_of(Derived).fields


@pytest.mark.unit
def test_unknown_text_encoding_is_rejected() -> None:
    with pytest.raises(SchemaError, match="unknown text encoding"):
        TextSpec("not-a-codec")
