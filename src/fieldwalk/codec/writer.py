"""Binary writer operation: varint primitives, length-prefixed text and sequences, positional aggregates."""

from __future__ import annotations

import io
from collections.abc import Iterator, Sized
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Protocol

from fieldwalk.codec.varint import encode_signed, encode_unsigned
from fieldwalk.traversal.dispatch import AggregateScope, Operation, dispatch

if TYPE_CHECKING:
    from fieldwalk.domain.schema import (
        AggregateSchema,
        PrimitiveSpec,
        SequenceSpec,
        TextSpec,
        VariantSpec,
    )


class ByteSink(Protocol):
    def write(self, data: bytes, /) -> object: ...


class BinaryWriter(Operation):
    """Append the wire encoding of visited values to ``sink``.

    The encoding carries no tags or framing: a reader needs the same schema.
    """

    def __init__(self, sink: ByteSink | None = None) -> None:
        self._buffer = io.BytesIO() if sink is None else None
        self._sink: ByteSink = self._buffer if self._buffer is not None else sink  # type: ignore[assignment]
        self.bytes_written = 0

    def getvalue(self) -> bytes:
        """Return everything written so far; only available with the default in-memory sink."""

        if self._buffer is None:
            raise ValueError("getvalue() requires the default in-memory sink")
        return self._buffer.getvalue()

    def visit_primitive(self, spec: PrimitiveSpec, value: Any) -> Any:
        wire = spec.to_wire(value)
        self._emit(encode_signed(wire) if spec.signed else encode_unsigned(wire))
        return value

    def visit_text(self, spec: TextSpec, value: Any) -> Any:
        raw = spec.to_bytes(value)
        self._emit(encode_unsigned(len(raw)))
        self._emit(raw)
        return value

    def visit_sequence(self, spec: SequenceSpec, value: Any) -> Any:
        items = value if isinstance(value, Sized) else list(value)
        self._emit(encode_unsigned(len(items)))
        for item in items:
            dispatch(self, spec.element, item)
        return value

    @contextmanager
    def open_aggregate(self, schema: AggregateSchema, value: Any) -> Iterator[AggregateScope]:
        # Fields are positional; nothing to open or close on the wire.
        yield AggregateScope(self, schema, value)

    def visit_variant(self, spec: VariantSpec, value: Any) -> Any:
        which = spec.which(value)
        self._emit(encode_unsigned(which))
        dispatch(self, spec.alternatives[which], value)
        return value

    def _emit(self, data: bytes) -> None:
        if data:
            self._sink.write(data)
            self.bytes_written += len(data)


__all__ = ["BinaryWriter", "ByteSink"]
