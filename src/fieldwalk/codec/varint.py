"""
fieldwalk — variable-length integers

File: src/fieldwalk/codec/varint.py
Last updated: 2026-10-18

Purpose
- Encode unsigned integers as 7-bit groups, least significant first, high bit = "more".
- Map signed integers onto unsigned ones with the zigzag bijection.
- Decode from a ``ByteSource`` without ever consuming more than ``MAX_VARINT_BYTES``.

Functional requirements
- ``zigzag_decode(zigzag_encode(v)) == v`` for every integer ``v``.
- Decoding stops with ``TruncatedVarintError`` at end of input and with
  ``OverlongVarintError`` when the tenth byte still carries a continuation bit.
- Payload bits beyond 64 are discarded (``value mod 2**64``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fieldwalk.codec.io import BufferSource
from fieldwalk.constants import (
    MAX_VARINT_BYTES,
    UINT64_MASK,
    VARINT_CONTINUATION_BIT,
    VARINT_PAYLOAD_BITS,
    VARINT_PAYLOAD_MASK,
)

if TYPE_CHECKING:
    from fieldwalk.codec.io import ByteSource


class VarintError(ValueError):
    """Base for varint decode failures; carries the number of bytes consumed."""

    def __init__(self, message: str, *, consumed: int) -> None:
        super().__init__(message)
        self.consumed = consumed


class TruncatedVarintError(VarintError):
    pass


class OverlongVarintError(VarintError):
    pass


def zigzag_encode(value: int) -> int:
    """Map a signed integer to unsigned: 0, -1, 1, -2, 2 ... -> 0, 1, 2, 3, 4 ..."""

    if value < 0:
        return (-value - 1) * 2 + 1
    return value * 2


def zigzag_decode(value: int) -> int:
    if value & 1:
        return -(value >> 1) - 1
    return value >> 1


def encode_unsigned(value: int) -> bytes:
    if value < 0:
        raise ValueError(f"unsigned varint cannot encode negative value {value}")
    out = bytearray()
    while True:
        group = value & VARINT_PAYLOAD_MASK
        value >>= VARINT_PAYLOAD_BITS
        if value:
            out.append(group | VARINT_CONTINUATION_BIT)
        else:
            out.append(group)
            return bytes(out)


def encode_signed(value: int) -> bytes:
    return encode_unsigned(zigzag_encode(value))


def read_unsigned(source: ByteSource) -> int:
    """Read one unsigned varint from ``source``."""

    result = 0
    for index in range(MAX_VARINT_BYTES):
        byte = source.read_byte()
        if byte is None:
            raise TruncatedVarintError(
                f"input ended after {index} byte(s) of an integer", consumed=index
            )
        result |= (byte & VARINT_PAYLOAD_MASK) << (VARINT_PAYLOAD_BITS * index)
        if not byte & VARINT_CONTINUATION_BIT:
            return result & UINT64_MASK
    raise OverlongVarintError(
        f"integer continues past {MAX_VARINT_BYTES} bytes", consumed=MAX_VARINT_BYTES
    )


def read_signed(source: ByteSource) -> int:
    return zigzag_decode(read_unsigned(source))


def decode_unsigned(data: bytes | bytearray | memoryview, offset: int = 0) -> tuple[int, int]:
    """Decode an unsigned varint from ``data[offset:]``; return ``(value, next_offset)``."""

    source = BufferSource(memoryview(data)[offset:])
    value = read_unsigned(source)
    return value, offset + source.offset


def decode_signed(data: bytes | bytearray | memoryview, offset: int = 0) -> tuple[int, int]:
    value, next_offset = decode_unsigned(data, offset)
    return zigzag_decode(value), next_offset


__all__ = [
    "OverlongVarintError",
    "TruncatedVarintError",
    "VarintError",
    "decode_signed",
    "decode_unsigned",
    "encode_signed",
    "encode_unsigned",
    "read_signed",
    "read_unsigned",
    "zigzag_decode",
    "zigzag_encode",
]
