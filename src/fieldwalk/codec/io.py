"""
fieldwalk — byte sources

File: src/fieldwalk/codec/io.py
Last updated: 2026-10-18

Purpose
- Give the reader one cursor interface over in-memory buffers and binary streams.

Functional requirements
- ``read(n)`` never requests more than ``n`` bytes from the underlying stream at once;
  callers bound ``n`` so a length taken from untrusted input is never an allocation size.
- ``at_end()`` works on non-seekable streams through a one-byte lookahead.
- ``remaining()`` is exact for buffers and seekable streams, ``None`` otherwise.
"""

from __future__ import annotations

import io
import os
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typing import BinaryIO


@runtime_checkable
class ByteSource(Protocol):
    @property
    def offset(self) -> int: ...

    def read(self, size: int) -> bytes: ...

    def read_byte(self) -> int | None: ...

    def at_end(self) -> bool: ...

    def remaining(self) -> int | None: ...


class BufferSource:
    """Cursor over a bytes-like object."""

    __slots__ = ("_offset", "_view")

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._view = memoryview(data).cast("B")
        self._offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    def read(self, size: int) -> bytes:
        if size <= 0:
            return b""
        start = self._offset
        end = min(start + size, len(self._view))
        self._offset = end
        return bytes(self._view[start:end])

    def read_byte(self) -> int | None:
        if self._offset >= len(self._view):
            return None
        value = self._view[self._offset]
        self._offset += 1
        return value

    def at_end(self) -> bool:
        return self._offset >= len(self._view)

    def remaining(self) -> int:
        return len(self._view) - self._offset


class StreamSource:
    """Cursor over a readable binary stream."""

    __slots__ = ("_offset", "_pending", "_stream")

    def __init__(self, stream: BinaryIO | io.RawIOBase | io.BufferedIOBase) -> None:
        self._stream = stream
        self._offset = 0
        self._pending = b""

    @property
    def offset(self) -> int:
        return self._offset

    def read(self, size: int) -> bytes:
        if size <= 0:
            return b""
        parts: list[bytes] = []
        wanted = size
        if self._pending:
            parts.append(self._pending)
            wanted -= len(self._pending)
            self._pending = b""
        while wanted > 0:
            chunk = self._stream.read(wanted)
            if not chunk:
                break
            parts.append(chunk)
            wanted -= len(chunk)
        data = b"".join(parts)
        self._offset += len(data)
        return data

    def read_byte(self) -> int | None:
        data = self.read(1)
        return data[0] if data else None

    def at_end(self) -> bool:
        if self._pending:
            return False
        self._pending = self._stream.read(1) or b""
        return not self._pending

    def remaining(self) -> int | None:
        seekable = getattr(self._stream, "seekable", None)
        if seekable is None or not seekable():
            return None
        position = self._stream.tell()
        end = self._stream.seek(0, os.SEEK_END)
        self._stream.seek(position, os.SEEK_SET)
        return end - position + len(self._pending)


def as_source(obj: object) -> ByteSource:
    """Wrap bytes-like objects or readable binary streams as a ``ByteSource``."""

    if isinstance(obj, (BufferSource, StreamSource)):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BufferSource(obj)
    if isinstance(obj, io.TextIOBase):
        raise TypeError("text streams are not byte sources; open the file in binary mode")
    if callable(getattr(obj, "read", None)):
        return StreamSource(obj)  # type: ignore[arg-type]
    raise TypeError(f"cannot read bytes from {type(obj).__name__}")


__all__ = ["BufferSource", "ByteSource", "StreamSource", "as_source"]
