"""
fieldwalk — codec entry points

File: src/fieldwalk/codec/api.py
Last updated: 2026-10-18

Purpose
- One-call encode/decode helpers over ``BinaryWriter`` and ``BinaryReader``.
- Package the decoded value with its diagnostics so callers cannot ignore them by accident.

Functional requirements
- ``dumps``/``dump`` accept any declared type: a ``TypeSpec``, a registered class or an annotation.
- ``loads``/``load`` never raise for malformed input; ``DecodeResult.raise_for_diagnostics``
  converts a non-empty log into ``DecodeError`` for callers that want exceptions.
- Decoding runs inside a ``correlation_scope`` so structured log lines carry the type name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fieldwalk.codec.reader import BinaryReader
from fieldwalk.codec.writer import BinaryWriter, ByteSink
from fieldwalk.config.schema import CodecSettings
from fieldwalk.domain.diagnostics import Diagnostic, DiagnosticKind
from fieldwalk.errors import FieldwalkError, SchemaError
from fieldwalk.observability.logging import correlation_scope
from fieldwalk.traversal.dispatch import dispatch
from fieldwalk.traversal.registry import resolve_type

_LOGGER = logging.getLogger(__name__)


class DecodeError(FieldwalkError, ValueError):
    """Raised on request when a decode produced diagnostics."""

    def __init__(self, diagnostics: tuple[Diagnostic, ...]) -> None:
        self.diagnostics = diagnostics
        lines = "\n".join(f"- {item.render()}" for item in diagnostics)
        super().__init__(f"decode produced {len(diagnostics)} diagnostic(s):\n{lines}")


@dataclass(frozen=True, slots=True)
class DecodeResult:
    """Decoded value plus everything the reader noticed while producing it."""

    value: Any
    diagnostics: tuple[Diagnostic, ...]
    bytes_read: int
    remaining: int | None

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def kinds(self) -> tuple[DiagnosticKind, ...]:
        return tuple(item.kind for item in self.diagnostics)

    def render_diagnostics(self) -> str:
        return "".join(f"{item.render()}\n" for item in self.diagnostics)

    def raise_for_diagnostics(self) -> Any:
        """Return ``value`` when clean, otherwise raise ``DecodeError``."""

        if self.diagnostics:
            raise DecodeError(self.diagnostics)
        return self.value


def dumps(value: Any, spec: object = None) -> bytes:
    """Encode ``value`` and return the bytes.

    ``spec`` defaults to the registered schema (or scalar mapping) of ``type(value)``.
    """

    writer = BinaryWriter()
    dispatch(writer, _spec_for(value, spec), value)
    return writer.getvalue()


def dump(value: Any, sink: ByteSink, spec: object = None) -> int:
    """Encode ``value`` into ``sink`` and return the number of bytes written."""

    writer = BinaryWriter(sink)
    dispatch(writer, _spec_for(value, spec), value)
    return writer.bytes_written


def loads(
    data: bytes | bytearray | memoryview,
    spec: object,
    *,
    into: Any = None,
    settings: CodecSettings | None = None,
) -> DecodeResult:
    """Decode one value of type ``spec`` from a bytes-like object."""

    return _decode(data, spec, into=into, settings=settings)


def load(
    stream: object,
    spec: object,
    *,
    into: Any = None,
    settings: CodecSettings | None = None,
) -> DecodeResult:
    """Decode one value of type ``spec`` from a readable binary stream."""

    return _decode(stream, spec, into=into, settings=settings)


def _decode(source: object, spec: object, *, into: Any, settings: CodecSettings | None) -> DecodeResult:
    resolved = resolve_type(spec)
    reader = BinaryReader(source, settings=settings)
    with correlation_scope(operation="binary_decode", type_name=resolved.name):
        value = reader.read(resolved, into)
        result = DecodeResult(
            value=value,
            diagnostics=reader.diagnostics.entries(),
            bytes_read=reader.offset,
            remaining=reader.remaining(),
        )
        if result.diagnostics:
            _LOGGER.info(
                "decoded %s with %d diagnostic(s)",
                resolved.name,
                len(result.diagnostics),
                extra={"bytes_read": result.bytes_read, "kinds": [kind.value for kind in result.kinds()]},
            )
        else:
            _LOGGER.debug("decoded %s", resolved.name, extra={"bytes_read": result.bytes_read})
    return result


def _spec_for(value: Any, spec: object) -> Any:
    if spec is not None:
        return resolve_type(spec)
    if isinstance(value, (list, tuple)):
        raise SchemaError("sequence element type cannot be inferred; pass spec explicitly")
    return resolve_type(type(value))


__all__ = ["DecodeError", "DecodeResult", "dump", "dumps", "load", "loads"]
