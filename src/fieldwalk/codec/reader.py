"""
fieldwalk — binary reader

File: src/fieldwalk/codec/reader.py
Last updated: 2026-10-18

Purpose
- Decode the positional wire format back into caller-owned values.
- Tolerate malformed or truncated input: log a diagnostic, keep a safe value, continue.

Functional requirements
- Never raise for structurally malformed input; every defect lands in ``diagnostics``.
- Integers: at most ``MAX_VARINT_BYTES`` are consumed; on failure the destination is unchanged.
- Text: the declared length is read in bounded chunks and is never used as an allocation size.
- Sequences: decode until the count is reached or input runs out; keep the good prefix.
- Aggregates: every field is attempted, even after an earlier field failed.
- Trailing bytes are not an error unless the caller asks via ``check_trailing``.

Non-functional requirements
- Time and memory are bounded by the input length, not by declared lengths or counts.
- Recursion depth is bounded by ``CodecSettings.max_depth``; a stack overflow below that
  limit is still reported as ``DepthLimitExceeded``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from fieldwalk.codec.io import as_source
from fieldwalk.codec.varint import (
    OverlongVarintError,
    VarintError,
    read_signed,
    read_unsigned,
)
from fieldwalk.config.schema import CodecSettings
from fieldwalk.domain.diagnostics import Diagnostic, DiagnosticKind, DiagnosticLog
from fieldwalk.traversal.dispatch import AggregateScope, Operation, TraversalPath, dispatch

if TYPE_CHECKING:
    from fieldwalk.codec.io import ByteSource
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


class _ReaderScope(AggregateScope):
    __slots__ = ("_decoded",)

    operation: BinaryReader

    def __init__(self, operation: BinaryReader, schema: AggregateSchema, target: Any) -> None:
        super().__init__(operation, schema, target)
        self._decoded: dict[FieldSpec, Any] = {}

    def visit_field(self, field: FieldSpec) -> Any:
        reader = self.operation
        with reader.path.field(field.name):
            current = field.get(self.target)
            decoded = dispatch(reader, field.type, current)
        if decoded is not current:
            self._decoded[field] = decoded
        return decoded

    @property
    def result(self) -> Any:
        return self.schema.assign(self.target, self._decoded)


class BinaryReader(Operation):
    """Read values from ``source`` (bytes-like or a readable binary stream).

    State is local to one instance: a cursor and an append-only ``diagnostics``
    log. Inspect the log after ``read`` returns; an empty log is the only
    success signal.
    """

    def __init__(
        self,
        source: object,
        *,
        settings: CodecSettings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._source: ByteSource = as_source(source)
        self._settings = settings or CodecSettings()
        self._logger = logger or _LOGGER
        self._depth = 0
        self._trailing_reported = False
        self.diagnostics = DiagnosticLog()
        self.path = TraversalPath()

    @property
    def offset(self) -> int:
        return self._source.offset

    def remaining(self) -> int | None:
        """Bytes left after the cursor; ``None`` for non-seekable streams."""

        return self._source.remaining()

    def read(self, spec: TypeSpec, into: Any = None) -> Any:
        """Decode one top-level value of type ``spec``.

        ``into`` is the destination; when omitted the type's default is used.
        """

        self.path = TraversalPath(spec.name)
        destination = spec.default() if into is None else into
        try:
            value = dispatch(self, spec, destination)
        except RecursionError:
            self._depth = 0
            self.path = TraversalPath(spec.name)
            self._report(
                DiagnosticKind.DEPTH_LIMIT_EXCEEDED,
                "nesting exhausted the interpreter stack before max_depth was reached",
                expected=self._settings.max_depth,
            )
            value = destination
        if self._settings.trailing_bytes == "report":
            self.check_trailing()
        return value

    def check_trailing(self) -> int:
        """Record ``ExtraTrailingBytes`` if unread input remains; return the count.

        Returns ``-1`` when the count cannot be determined but more input exists.
        """

        remaining = self.remaining()
        if remaining is None:
            remaining = 0 if self._source.at_end() else -1
        if remaining and not self._trailing_reported:
            self._trailing_reported = True
            described = "unknown number of" if remaining < 0 else str(remaining)
            self._report(
                DiagnosticKind.EXTRA_TRAILING_BYTES,
                f"{described} extra bytes in message",
                actual=remaining if remaining > 0 else None,
            )
        return remaining

    def visit_primitive(self, spec: PrimitiveSpec, value: Any) -> Any:
        try:
            raw = read_signed(self._source) if spec.signed else read_unsigned(self._source)
        except OverlongVarintError as exc:
            self._report(DiagnosticKind.OVERLONG_INTEGER, str(exc))
            return value
        except VarintError as exc:
            self._report(
                DiagnosticKind.TRUNCATED_INTEGER,
                f"not enough data to read {spec.name}: {exc}",
            )
            return value
        return spec.from_wire(raw)

    def visit_text(self, spec: TextSpec, value: Any) -> Any:
        try:
            size = read_unsigned(self._source)
        except VarintError as exc:
            self._report(DiagnosticKind.TRUNCATED_TEXT, f"not enough data to read text size: {exc}")
            return value

        chunk_size = self._settings.text_chunk_bytes
        received = bytearray()
        missing = size
        while missing > 0:
            chunk = self._source.read(min(missing, chunk_size))
            if not chunk:
                break
            received += chunk
            missing -= len(chunk)
        if missing:
            self._report(
                DiagnosticKind.TRUNCATED_TEXT,
                f"expected {size} bytes of text but only found {len(received)}",
                expected=size,
                actual=len(received),
            )
            return value
        try:
            return spec.from_bytes(bytes(received))
        except UnicodeDecodeError as exc:
            self._report(
                DiagnosticKind.INVALID_TEXT, f"text is not valid {spec.encoding}: {exc.reason}"
            )
            return value

    def visit_sequence(self, spec: SequenceSpec, value: Any) -> Any:
        try:
            count = read_unsigned(self._source)
        except VarintError as exc:
            self._report(
                DiagnosticKind.TRUNCATED_SEQUENCE_COUNT,
                f"not enough data to read sequence size: {exc}",
            )
            return value
        if self._too_deep():
            return value

        element = spec.element
        zero_width = element.min_wire_size == 0
        limit = min(count, self._settings.max_zero_width_elements) if zero_width else count
        items: list[Any] = []
        with self._nested():
            for index in range(limit):
                if not zero_width and self._source.at_end():
                    break
                start_offset = self._source.offset
                start_defects = len(self.diagnostics)
                with self.path.index(index):
                    item = dispatch(self, element, element.default())
                if len(self.diagnostics) != start_defects:
                    break
                if not zero_width and self._source.offset == start_offset:
                    break
                items.append(item)

        if len(items) != count:
            self._report(
                DiagnosticKind.TRUNCATED_SEQUENCE_ELEMENTS,
                f"expected {count} elements in sequence but only found {len(items)}",
                expected=count,
                actual=len(items),
            )
        return items

    def visit_aggregate(self, schema: AggregateSchema, value: Any) -> Any:
        if self._too_deep():
            return value
        with self._nested():
            return super().visit_aggregate(schema, value)

    @contextmanager
    def open_aggregate(self, schema: AggregateSchema, value: Any) -> Iterator[AggregateScope]:
        target = value if schema.accepts(value) else schema.default()
        yield _ReaderScope(self, schema, target)

    def visit_variant(self, spec: VariantSpec, value: Any) -> Any:
        try:
            which = read_unsigned(self._source)
        except VarintError as exc:
            self._report(
                DiagnosticKind.TRUNCATED_INTEGER,
                f"not enough data to read variant index: {exc}",
            )
            return value
        if which >= len(spec.alternatives):
            self._report(
                DiagnosticKind.INVALID_VARIANT_INDEX,
                f"variant index {which} but there are only {len(spec.alternatives)} alternatives",
                expected=len(spec.alternatives),
                actual=which,
            )
            return value
        if self._too_deep():
            return value
        alternative = spec.alternatives[which]
        target = value if alternative.accepts(value) else alternative.default()
        with self._nested():
            return dispatch(self, alternative, target)

    def _too_deep(self) -> bool:
        if self._depth < self._settings.max_depth:
            return False
        self._report(
            DiagnosticKind.DEPTH_LIMIT_EXCEEDED,
            f"nesting deeper than {self._settings.max_depth} levels",
            expected=self._settings.max_depth,
        )
        return True

    @contextmanager
    def _nested(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    def _report(
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
            offset=self._source.offset,
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


__all__ = ["BinaryReader"]
