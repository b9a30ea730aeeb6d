"""
fieldwalk — JSON tree adapter

File: src/fieldwalk/adapters/json_tree.py
Last updated: 2026-10-18

Purpose
- Convert traversable values to and from JSON-compatible trees (dicts, lists, ints, strings).
- Show that a second encoding plugs into the same capability set as the binary codec.
- Render the same trees as JSON text (stdlib ``json``) or block YAML (``yaml.safe_dump``).

Functional requirements
- Aggregates become objects keyed by field name in declaration order.
- Byte text is carried as a base64 string; variants as ``{"which": <index>, "data": <value>}``.
- The reader never raises for a malformed tree: it records ``TypeMismatch`` or ``MissingField``,
  skips the offending value and keeps going.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Final

import yaml

from fieldwalk.codec.api import DecodeResult
from fieldwalk.config.schema import CodecSettings
from fieldwalk.domain.diagnostics import Diagnostic, DiagnosticKind, DiagnosticLog
from fieldwalk.domain.schema import BoolSpec
from fieldwalk.observability.logging import correlation_scope
from fieldwalk.traversal.dispatch import AggregateScope, Operation, TraversalPath, dispatch
from fieldwalk.traversal.registry import resolve_type

if TYPE_CHECKING:
    from fieldwalk.domain.schema import (
        AggregateSchema,
        FieldSpec,
        PrimitiveSpec,
        SequenceSpec,
        TextSpec,
        TypeSpec,
        VariantSpec,
    )

_LOGGER = logging.getLogger(__name__)

VARIANT_INDEX_KEY: Final[str] = "which"
VARIANT_DATA_KEY: Final[str] = "data"

_SKIPPED: Final[object] = object()


class _WriterScope(AggregateScope):
    __slots__ = ("_tree",)

    def __init__(self, operation: JsonTreeWriter, schema: AggregateSchema, target: Any) -> None:
        super().__init__(operation, schema, target)
        self._tree: dict[str, Any] = {}

    def visit_field(self, field: FieldSpec) -> Any:
        node = super().visit_field(field)
        self._tree[field.name] = node
        return node

    @property
    def result(self) -> dict[str, Any]:
        return self._tree


class JsonTreeWriter(Operation):
    """Build a JSON-compatible tree; every visit returns the node for its value."""

    def build(self, spec: TypeSpec, value: Any) -> Any:
        return dispatch(self, spec, value)

    def visit_primitive(self, spec: PrimitiveSpec, value: Any) -> Any:
        if isinstance(spec, BoolSpec):
            return bool(value)
        return spec.to_wire(value)

    def visit_text(self, spec: TextSpec, value: Any) -> Any:
        if spec.encoding is None:
            return base64.b64encode(bytes(value)).decode("ascii")
        return str(value)

    def visit_sequence(self, spec: SequenceSpec, value: Any) -> Any:
        return [dispatch(self, spec.element, item) for item in value]

    @contextmanager
    def open_aggregate(self, schema: AggregateSchema, value: Any) -> Iterator[AggregateScope]:
        yield _WriterScope(self, schema, value)

    def visit_variant(self, spec: VariantSpec, value: Any) -> Any:
        which = spec.which(value)
        return {
            VARIANT_INDEX_KEY: which,
            VARIANT_DATA_KEY: dispatch(self, spec.alternatives[which], value),
        }


class _ReaderScope(AggregateScope):
    __slots__ = ("_decoded", "_node")

    operation: JsonTreeReader

    def __init__(
        self,
        operation: JsonTreeReader,
        schema: AggregateSchema,
        target: Any,
        node: dict[str, Any],
    ) -> None:
        super().__init__(operation, schema, target)
        self._node = node
        self._decoded: dict[FieldSpec, Any] = {}

    def visit_field(self, field: FieldSpec) -> Any:
        reader = self.operation
        current = field.get(self.target)
        with reader.path.field(field.name):
            if field.name not in self._node:
                reader.report(DiagnosticKind.MISSING_FIELD, f"JSON object missing field {field.name!r}")
                return current
            decoded = reader.descend(field.type, self._node[field.name], current)
        if decoded is not current:
            self._decoded[field] = decoded
        return decoded

    @property
    def result(self) -> Any:
        return self.schema.assign(self.target, self._decoded)


class JsonTreeReader(Operation):
    """Fill destinations from a parsed JSON tree, recording every mismatch."""

    def __init__(
        self,
        tree: Any,
        *,
        settings: CodecSettings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._node: Any = tree
        self._settings = settings or CodecSettings()
        self._logger = logger or _LOGGER
        self.diagnostics = DiagnosticLog()
        self.path = TraversalPath()

    def read(self, spec: TypeSpec, into: Any = None) -> Any:
        self.path = TraversalPath(spec.name)
        destination = spec.default() if into is None else into
        root = self._node
        try:
            return dispatch(self, spec, destination)
        except RecursionError:
            self._node = root
            self.path = TraversalPath(spec.name)
            self.report(
                DiagnosticKind.DEPTH_LIMIT_EXCEEDED, "tree nesting exhausted the interpreter stack"
            )
            return destination

    def descend(self, spec: TypeSpec, node: Any, value: Any) -> Any:
        """Visit ``spec`` against the child ``node`` and restore the current node afterwards."""

        parent = self._node
        self._node = node
        try:
            return dispatch(self, spec, value)
        finally:
            self._node = parent

    def visit_primitive(self, spec: PrimitiveSpec, value: Any) -> Any:
        node = self._node
        if isinstance(spec, BoolSpec):
            if not isinstance(node, bool):
                return self._mismatch("boolean", node, value)
            return node
        if isinstance(node, bool) or not isinstance(node, int):
            return self._mismatch("number", node, value)
        return spec.from_wire(node)

    def visit_text(self, spec: TextSpec, value: Any) -> Any:
        node = self._node
        if not isinstance(node, str):
            return self._mismatch("string", node, value)
        if spec.encoding is not None:
            return node
        try:
            return base64.b64decode(node, validate=True)
        except binascii.Error:
            return self._mismatch("base64 string", node, value)

    def visit_sequence(self, spec: SequenceSpec, value: Any) -> Any:
        node = self._node
        if not isinstance(node, list):
            return self._mismatch("array", node, value)
        items: list[Any] = []
        for index, child in enumerate(node):
            with self.path.index(index):
                item = self.descend(spec.element, child, _SKIPPED)
            if item is not _SKIPPED:
                items.append(item)
        return items

    def visit_aggregate(self, schema: AggregateSchema, value: Any) -> Any:
        if not isinstance(self._node, dict):
            return self._mismatch("object", self._node, value)
        return super().visit_aggregate(schema, value)

    @contextmanager
    def open_aggregate(self, schema: AggregateSchema, value: Any) -> Iterator[AggregateScope]:
        target = value if schema.accepts(value) else schema.default()
        yield _ReaderScope(self, schema, target, self._node)

    def visit_variant(self, spec: VariantSpec, value: Any) -> Any:
        node = self._node
        if not isinstance(node, dict):
            return self._mismatch("variant object", node, value)
        if VARIANT_INDEX_KEY not in node:
            self.report(DiagnosticKind.MISSING_FIELD, f"JSON object missing field {VARIANT_INDEX_KEY!r}")
            return value
        which = node[VARIANT_INDEX_KEY]
        if isinstance(which, bool) or not isinstance(which, int):
            return self._mismatch("variant index number", which, value)
        if not 0 <= which < len(spec.alternatives):
            self.report(
                DiagnosticKind.INVALID_VARIANT_INDEX,
                f"variant index {which} but there are only {len(spec.alternatives)} alternatives",
                expected=len(spec.alternatives),
                actual=which,
            )
            return value
        if VARIANT_DATA_KEY not in node:
            self.report(DiagnosticKind.MISSING_FIELD, f"JSON object missing field {VARIANT_DATA_KEY!r}")
            return value
        alternative = spec.alternatives[which]
        target = value if alternative.accepts(value) else alternative.default()
        return self.descend(alternative, node[VARIANT_DATA_KEY], target)

    def report(
        self,
        kind: DiagnosticKind,
        message: str,
        *,
        expected: int | None = None,
        actual: int | None = None,
    ) -> None:
        diagnostic = Diagnostic(
            kind=kind,
            message=message,
            path=self.path.render(),
            expected=expected,
            actual=actual,
        )
        self.diagnostics.append(diagnostic)
        self._logger.log(
            self._settings.diagnostic_log_level,
            "decode defect: %s",
            diagnostic.render(),
            extra=diagnostic.as_log_fields(),
        )

    def _mismatch(self, expected: str, node: Any, value: Any) -> Any:
        self.report(
            DiagnosticKind.TYPE_MISMATCH,
            f"expected JSON {expected}, got {_json_type_name(node)}; skipping",
        )
        return value


def to_tree(value: Any, spec: object = None) -> Any:
    resolved = resolve_type(type(value) if spec is None else spec)
    return JsonTreeWriter().build(resolved, value)


def to_json(value: Any, spec: object = None, **dumps_kwargs: Any) -> str:
    """Serialize ``value`` to JSON text; keyword arguments go to ``json.dumps``."""

    return json.dumps(to_tree(value, spec), **dumps_kwargs)


def from_tree(
    tree: Any,
    spec: object,
    *,
    into: Any = None,
    settings: CodecSettings | None = None,
) -> DecodeResult:
    resolved = resolve_type(spec)
    reader = JsonTreeReader(tree, settings=settings)
    with correlation_scope(operation="json_decode", type_name=resolved.name):
        value = reader.read(resolved, into)
    return DecodeResult(value=value, diagnostics=reader.diagnostics.entries(), bytes_read=0, remaining=None)


def from_json(
    text: str | bytes,
    spec: object,
    *,
    into: Any = None,
    settings: CodecSettings | None = None,
) -> DecodeResult:
    """Parse JSON ``text`` and decode it as ``spec``.

    Unparseable text yields a single ``TypeMismatch`` diagnostic and the default value.
    ``bytes_read`` is the length of ``text``.
    """

    resolved = resolve_type(spec)
    try:
        tree = json.loads(text)
    except json.JSONDecodeError as exc:
        return _unparseable(
            resolved, f"invalid JSON document: {exc.msg}", exc.pos, len(text), into, settings
        )
    except UnicodeDecodeError as exc:
        return _unparseable(
            resolved, f"invalid JSON document: {exc.reason}", exc.start, len(text), into, settings
        )
    except RecursionError:
        return _unparseable(resolved, "JSON document nests too deeply", None, len(text), into, settings)
    return _with_length(from_tree(tree, resolved, into=into, settings=settings), len(text))


def to_yaml(value: Any, spec: object = None) -> str:
    """Serialize ``value`` to block-style YAML with fields in declaration order."""

    rendered = yaml.safe_dump(
        to_tree(value, spec),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=False,
        width=120,
    )
    return rendered if rendered.endswith("\n") else rendered + "\n"


def from_yaml(
    text: str | bytes,
    spec: object,
    *,
    into: Any = None,
    settings: CodecSettings | None = None,
) -> DecodeResult:
    """Parse YAML ``text`` with ``yaml.safe_load`` and decode the tree as ``spec``."""

    resolved = resolve_type(spec)
    try:
        tree = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        offset = mark.index if mark is not None else None
        return _unparseable(resolved, f"invalid YAML document: {exc}", offset, len(text), into, settings)
    except RecursionError:
        return _unparseable(resolved, "YAML document nests too deeply", None, len(text), into, settings)
    return _with_length(from_tree(tree, resolved, into=into, settings=settings), len(text))


def _unparseable(
    resolved: TypeSpec,
    message: str,
    offset: int | None,
    length: int,
    into: Any,
    settings: CodecSettings | None,
) -> DecodeResult:
    diagnostic = Diagnostic(
        kind=DiagnosticKind.TYPE_MISMATCH,
        message=message,
        path=resolved.name,
        offset=offset,
    )
    _LOGGER.log(
        (settings or CodecSettings()).diagnostic_log_level,
        "decode defect: %s",
        diagnostic.render(),
        extra=diagnostic.as_log_fields(),
    )
    value = resolved.default() if into is None else into
    return DecodeResult(value=value, diagnostics=(diagnostic,), bytes_read=length, remaining=None)


def _with_length(result: DecodeResult, length: int) -> DecodeResult:
    return DecodeResult(
        value=result.value,
        diagnostics=result.diagnostics,
        bytes_read=length,
        remaining=0,
    )


def _json_type_name(node: Any) -> str:
    if node is None:
        return "null"
    if isinstance(node, bool):
        return "boolean"
    if isinstance(node, (int, float)):
        return "number"
    if isinstance(node, str):
        return "string"
    if isinstance(node, list):
        return "array"
    if isinstance(node, dict):
        return "object"
    return type(node).__name__


__all__ = [
    "VARIANT_DATA_KEY",
    "VARIANT_INDEX_KEY",
    "JsonTreeReader",
    "JsonTreeWriter",
    "from_json",
    "from_tree",
    "from_yaml",
    "to_json",
    "to_tree",
    "to_yaml",
]
