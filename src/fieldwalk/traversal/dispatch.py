"""
fieldwalk — traversal dispatch

File: src/fieldwalk/traversal/dispatch.py
Last updated: 2026-10-18

Purpose
- Define the capability set an operation must implement: one behavior per node kind.
- Route a (type, value) pair to the operation's handler for that node kind.
- Open a scoped context around every aggregate's field walk.

Functional requirements
- Missing handlers raise ``NoHandlerError`` at the dispatch boundary; they are never skipped.
- Aggregate scopes are finalized on every exit path, including exceptions raised by a field.

Non-functional requirements
- No global registry; dispatch depends only on the descriptor's node kind.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager, contextmanager
from typing import TYPE_CHECKING, Any, Final

from fieldwalk.domain.schema import NodeKind, TypeSpec
from fieldwalk.errors import FieldwalkError, SchemaError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from fieldwalk.domain.schema import (
        AggregateSchema,
        FieldSpec,
        PrimitiveSpec,
        SequenceSpec,
        TextSpec,
    )

_HANDLER_NAMES: Final[dict[NodeKind, str]] = {
    NodeKind.PRIMITIVE: "visit_primitive",
    NodeKind.TEXT: "visit_text",
    NodeKind.SEQUENCE: "visit_sequence",
    NodeKind.AGGREGATE: "visit_aggregate",
    NodeKind.VARIANT: "visit_variant",
}


class NoHandlerError(FieldwalkError, TypeError):
    """Raised when an operation does not implement the node kind it was handed."""

    def __init__(self, operation: object, kind: NodeKind | str) -> None:
        self.operation_name = type(operation).__name__
        self.kind = kind
        super().__init__(f"{self.operation_name} has no handler for {kind} nodes")


class AggregateScope:
    """Context for one aggregate's field walk.

    The base scope hands each field's current value to the operation and keeps
    the aggregate untouched. Operations that build or fill a destination
    subclass it and override ``visit_field`` and ``result``.
    """

    __slots__ = ("operation", "schema", "target")

    def __init__(self, operation: Operation, schema: AggregateSchema, target: Any) -> None:
        self.operation = operation
        self.schema = schema
        self.target = target

    def visit_field(self, field: FieldSpec) -> Any:
        return dispatch(self.operation, field.type, field.get(self.target))

    @property
    def result(self) -> Any:
        return self.target


class Operation(ABC):
    """Capability set shared by every traversal operation.

    Subclasses implement primitives, text, sequences and the aggregate scope.
    ``visit_aggregate`` walks the schema's fields in declaration order inside
    that scope. Extra node kinds (``visit_variant``) are opt-in; dispatching one
    to an operation without the handler raises ``NoHandlerError``.
    """

    @abstractmethod
    def visit_primitive(self, spec: PrimitiveSpec, value: Any) -> Any:
        """Handle an integer, bool or enum leaf."""

    @abstractmethod
    def visit_text(self, spec: TextSpec, value: Any) -> Any:
        """Handle a length-delimited text leaf."""

    @abstractmethod
    def visit_sequence(self, spec: SequenceSpec, value: Any) -> Any:
        """Handle a homogeneous list; recurse into ``spec.element`` via ``dispatch``."""

    @abstractmethod
    def open_aggregate(
        self, schema: AggregateSchema, value: Any
    ) -> AbstractContextManager[AggregateScope]:
        """Return a context manager that opens and finalizes the aggregate's framing."""

    def visit_aggregate(self, schema: AggregateSchema, value: Any) -> Any:
        with self.open_aggregate(schema, value) as scope:
            for field in schema.fields:
                scope.visit_field(field)
        return scope.result


def dispatch(operation: Operation, spec: TypeSpec, value: Any) -> Any:
    """Route ``value`` to ``operation``'s handler for ``spec``'s node kind."""

    if not isinstance(spec, TypeSpec):
        raise SchemaError(f"expected a TypeSpec, got {spec!r}")
    handler_name = _HANDLER_NAMES.get(spec.kind)
    handler = getattr(operation, handler_name, None) if handler_name is not None else None
    if handler is None:
        raise NoHandlerError(operation, spec.kind)
    return handler(spec, value)


def supports(operation: Operation, kind: NodeKind) -> bool:
    """Return ``True`` when ``operation`` has a handler for ``kind``."""

    handler_name = _HANDLER_NAMES.get(kind)
    return handler_name is not None and callable(getattr(operation, handler_name, None))


class TraversalPath:
    """Human-readable location of the node being visited, e.g. ``Polygon.points[2].x``."""

    __slots__ = ("_segments",)

    def __init__(self, root: str = "") -> None:
        self._segments: list[str] = [root] if root else []

    def render(self) -> str:
        return "".join(self._segments)

    @contextmanager
    def field(self, name: str) -> Iterator[None]:
        self._segments.append(f".{name}" if self._segments else name)
        try:
            yield
        finally:
            self._segments.pop()

    @contextmanager
    def index(self, position: int) -> Iterator[None]:
        self._segments.append(f"[{position}]")
        try:
            yield
        finally:
            self._segments.pop()


__all__ = [
    "AggregateScope",
    "NoHandlerError",
    "Operation",
    "TraversalPath",
    "dispatch",
    "supports",
]
