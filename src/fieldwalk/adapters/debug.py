"""Plain-text debug rendering: ``Polygon{color:1, points:[Point{x:3, y:5}]}``."""

from __future__ import annotations

import io
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TextIO

from fieldwalk.traversal.dispatch import AggregateScope, Operation, dispatch
from fieldwalk.traversal.registry import resolve_type

if TYPE_CHECKING:
    from fieldwalk.domain.schema import (
        AggregateSchema,
        FieldSpec,
        PrimitiveSpec,
        SequenceSpec,
        TextSpec,
        VariantSpec,
    )

_PRINTABLE_BYTES = frozenset(range(0x20, 0x7F)) - {ord('"'), ord("\\")}


class _DebugScope(AggregateScope):
    __slots__ = ("_first",)

    operation: DebugPrinter

    def __init__(self, operation: DebugPrinter, schema: AggregateSchema, target: Any) -> None:
        super().__init__(operation, schema, target)
        self._first = True

    def visit_field(self, field: FieldSpec) -> Any:
        if not self._first:
            self.operation.out.write(", ")
        self._first = False
        self.operation.out.write(f"{field.name}:")
        return super().visit_field(field)


class DebugPrinter(Operation):
    """Write a one-line human-readable rendering of visited values to ``out``."""

    def __init__(self, out: TextIO | None = None) -> None:
        self.out: TextIO = out if out is not None else io.StringIO()

    def getvalue(self) -> str:
        if not isinstance(self.out, io.StringIO):
            raise ValueError("getvalue() requires the default in-memory output")
        return self.out.getvalue()

    def visit_primitive(self, spec: PrimitiveSpec, value: Any) -> Any:
        self.out.write(str(spec.to_wire(value)))
        return value

    def visit_text(self, spec: TextSpec, value: Any) -> Any:
        if spec.encoding is None:
            self.out.write(f'b"{escape_bytes(bytes(value))}"')
        else:
            self.out.write(f'"{escape_text(str(value))}"')
        return value

    def visit_sequence(self, spec: SequenceSpec, value: Any) -> Any:
        self.out.write("[")
        for index, item in enumerate(value):
            if index:
                self.out.write(", ")
            dispatch(self, spec.element, item)
        self.out.write("]")
        return value

    @contextmanager
    def open_aggregate(self, schema: AggregateSchema, value: Any) -> Iterator[AggregateScope]:
        self.out.write(f"{schema.name}{{")
        try:
            yield _DebugScope(self, schema, value)
        finally:
            self.out.write("}")

    def visit_variant(self, spec: VariantSpec, value: Any) -> Any:
        return dispatch(self, spec.alternatives[spec.which(value)], value)


def escape_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def escape_bytes(raw: bytes) -> str:
    parts: list[str] = []
    for byte in raw:
        if byte in _PRINTABLE_BYTES:
            parts.append(chr(byte))
        elif byte in (ord('"'), ord("\\")):
            parts.append("\\" + chr(byte))
        else:
            parts.append(f"\\x{byte:02x}")
    return "".join(parts)


def format_value(value: Any, spec: object = None) -> str:
    """Render ``value`` as debug text; ``spec`` defaults to the type of ``value``."""

    printer = DebugPrinter()
    dispatch(printer, resolve_type(type(value) if spec is None else spec), value)
    return printer.getvalue()


__all__ = ["DebugPrinter", "escape_bytes", "escape_text", "format_value"]
