"""
fieldwalk — unit tests for the JSON tree adapter

File: tests/unit/adapters/test_json_tree.py
Last updated: 2026-10-18

Purpose
- Validate JSON-compatible trees produced from and read back into traversable values.

What this test file should cover
- Object/array/number/string mapping, base64 byte text, variant objects.
- Reader diagnostics for type mismatches, missing fields and bad variant indexes.
- Unparseable JSON or YAML text reported instead of raised.
- Block YAML rendering in declaration order.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Annotated

import pytest

from fieldwalk.adapters.json_tree import (
    JsonTreeReader,
    from_json,
    from_tree,
    from_yaml,
    to_json,
    to_tree,
    to_yaml,
)
from fieldwalk.domain.diagnostics import DiagnosticKind
from fieldwalk.domain.schema import INT32, STRING, UINT8
from fieldwalk.traversal.registry import schema_of, sequence_of, traversable, variant_of


@traversable
@dataclass
class Point:
    x: Annotated[int, INT32] = 0
    y: Annotated[int, INT32] = 0


@traversable
@dataclass
class Shape:
    name: str = ""
    visible: bool = False
    blob: bytes = b""
    points: list[Point] = field(default_factory=list)
    tag: int | str = 0


def _shape() -> Shape:
    return Shape(name="tri", visible=True, blob=b"\x00\xff", points=[Point(1, -2)], tag="a")


@pytest.mark.unit
def test_tree_shape() -> None:
    assert to_tree(_shape()) == {
        "name": "tri",
        "visible": True,
        "blob": "AP8=",
        "points": [{"x": 1, "y": -2}],
        "tag": {"which": 1, "data": "a"},
    }


@pytest.mark.unit
def test_json_text_preserves_field_order() -> None:
    text = to_json(Point(3, 4))
    assert text == '{"x": 3, "y": 4}'
    assert to_json(Point(3, 4), separators=(",", ":")) == '{"x":3,"y":4}'


@pytest.mark.unit
def test_round_trip_through_json_text() -> None:
    result = from_json(to_json(_shape()), Shape)
    assert result.ok
    assert result.value == _shape()
    assert result.remaining == 0


@pytest.mark.unit
def test_type_mismatch_skips_value() -> None:
    tree = to_tree(_shape())
    tree["name"] = 7
    tree["points"] = [{"x": 1, "y": 2}, "oops", {"x": "3", "y": 4}]
    result = from_tree(tree, Shape)

    assert result.kinds() == (
        DiagnosticKind.TYPE_MISMATCH,
        DiagnosticKind.TYPE_MISMATCH,
        DiagnosticKind.TYPE_MISMATCH,
    )
    paths = [entry.path for entry in result.diagnostics]
    assert paths == ["Shape.name", "Shape.points[1]", "Shape.points[2].x"]
    assert "expected JSON number" in result.diagnostics[2].message
    assert result.value.name == ""
    assert result.value.points == [Point(1, 2), Point(0, 4)]


@pytest.mark.unit
def test_missing_field_keeps_default() -> None:
    result = from_tree({"x": 5}, Point)
    assert result.kinds() == (DiagnosticKind.MISSING_FIELD,)
    assert result.diagnostics[0].message == "JSON object missing field 'y'"
    assert result.value == Point(5, 0)


@pytest.mark.unit
def test_unsigned_numbers_wrap_to_width() -> None:
    assert from_tree(300, UINT8).value == 44
    assert from_tree([1, True], sequence_of(INT32)).value == [1]


@pytest.mark.unit
def test_bad_variants_are_reported() -> None:
    spec = variant_of(INT32, STRING)
    assert from_tree({"which": 9, "data": 1}, spec).kinds() == (DiagnosticKind.INVALID_VARIANT_INDEX,)
    assert from_tree({"which": 0}, spec).kinds() == (DiagnosticKind.MISSING_FIELD,)
    assert from_tree({"data": 0}, spec).kinds() == (DiagnosticKind.MISSING_FIELD,)
    assert from_tree({"which": "0", "data": 0}, spec).kinds() == (DiagnosticKind.TYPE_MISMATCH,)
    assert from_tree([0, 1], spec).kinds() == (DiagnosticKind.TYPE_MISMATCH,)
    assert from_tree({"which": 1, "data": "s"}, spec).value == "s"


@pytest.mark.unit
def test_bad_base64_is_a_mismatch() -> None:
    tree = to_tree(_shape())
    tree["blob"] = "not base64!"
    result = from_tree(tree, Shape)
    assert result.kinds() == (DiagnosticKind.TYPE_MISMATCH,)
    assert result.value.blob == b""


@pytest.mark.unit
def test_unparseable_json_is_reported() -> None:
    result = from_json("{", Point)
    assert result.kinds() == (DiagnosticKind.TYPE_MISMATCH,)
    assert result.value == Point()
    assert result.diagnostics[0].offset == 1


@pytest.mark.unit
def test_reader_fills_destination_in_place() -> None:
    target = Point(8, 8)
    reader = JsonTreeReader(json.loads('{"x": 1, "y": 2}'))
    assert reader.read(schema_of(Point), target) is target
    assert target == Point(1, 2)
    assert not reader.diagnostics


@pytest.mark.unit
def test_yaml_keeps_declaration_order() -> None:
    assert to_yaml(Point(3, -4)) == "x: 3\ny: -4\n"


@pytest.mark.unit
def test_yaml_round_trip() -> None:
    text = to_yaml(_shape())
    assert text.index("name:") < text.index("points:") < text.index("tag:")
    result = from_yaml(text, Shape)
    assert result.ok
    assert result.value == _shape()
    assert result.bytes_read == len(text)


@pytest.mark.unit
def test_unparseable_yaml_is_reported() -> None:
    result = from_yaml("x: [1, 2\n", Point)
    assert result.kinds() == (DiagnosticKind.TYPE_MISMATCH,)
    assert result.diagnostics[0].message.startswith("invalid YAML document")
    assert result.value == Point()


@traversable
@dataclass(frozen=True)
class Pin:
    label: str = ""
    at: Point = field(default_factory=Point)


@pytest.mark.unit
def test_frozen_aggregate_decodes_from_json() -> None:
    result = from_json('{"label": "home", "at": {"x": 4, "y": 5}}', Pin)
    assert result.ok
    assert result.value == Pin(label="home", at=Point(4, 5))


@pytest.mark.unit
def test_frozen_aggregate_missing_field_keeps_default() -> None:
    result = from_json('{"at": {"x": 1, "y": 2}}', Pin)
    assert result.kinds() == (DiagnosticKind.MISSING_FIELD,)
    assert result.value == Pin(at=Point(1, 2))


@pytest.mark.unit
def test_undecodable_json_bytes_are_reported() -> None:
    result = from_json(b"\xff\xfe\xfd", INT32)
    assert result.kinds() == (DiagnosticKind.TYPE_MISMATCH,)
    assert result.diagnostics[0].message.startswith("invalid JSON document")
    assert result.value == 0
    assert result.bytes_read == 3


@pytest.mark.unit
def test_runaway_json_nesting_is_reported() -> None:
    text = "[" * 100_000 + "]" * 100_000
    result = from_json(text, sequence_of(INT32))
    assert result.kinds() == (DiagnosticKind.TYPE_MISMATCH,)
    assert result.value == []


@traversable
@dataclass
class Branch:
    kids: list[Branch] = field(default_factory=list)


@pytest.mark.unit
def test_runaway_tree_nesting_is_reported() -> None:
    tree: dict[str, object] = {"kids": []}
    for _ in range(20_000):
        tree = {"kids": [tree]}
    result = from_tree(tree, Branch)
    assert result.kinds() == (DiagnosticKind.DEPTH_LIMIT_EXCEEDED,)
    assert result.value == Branch()
