"""
fieldwalk — unit tests for variable-length integers

File: tests/unit/codec/test_varint.py
Last updated: 2026-10-18

Purpose
- Pin the varint byte layout and the zigzag mapping against known vectors.

What this test file should cover
- Single- and multi-byte encodings, signed mapping of small negatives.
- Bounded decoding: truncation and the ten-byte ceiling.
- Round trips over the full 64-bit range.
"""

from __future__ import annotations

import io

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from fieldwalk.codec.io import BufferSource, StreamSource
from fieldwalk.codec.varint import (
    OverlongVarintError,
    TruncatedVarintError,
    decode_signed,
    decode_unsigned,
    encode_signed,
    encode_unsigned,
    read_unsigned,
    zigzag_decode,
    zigzag_encode,
)
from fieldwalk.constants import MAX_VARINT_BYTES, UINT64_MASK

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0, b"\x00"),
        (1, b"\x01"),
        (0x7F, b"\x7f"),
        (0x80, b"\x80\x01"),
        (300, b"\xac\x02"),
        (UINT64_MASK, b"\xff" * 9 + b"\x01"),
    ],
)
def test_encode_unsigned_vectors(value: int, expected: bytes) -> None:
    assert encode_unsigned(value) == expected


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "expected"),
    [(0, b"\x00"), (-1, b"\x01"), (1, b"\x02"), (-2, b"\x03"), (-64, b"\x7f"), (64, b"\x80\x01")],
)
def test_encode_signed_vectors(value: int, expected: bytes) -> None:
    assert encode_signed(value) == expected


@pytest.mark.unit
def test_zigzag_orders_small_magnitudes_first() -> None:
    assert [zigzag_encode(v) for v in (0, -1, 1, -2, 2)] == [0, 1, 2, 3, 4]


@pytest.mark.unit
def test_encode_unsigned_rejects_negative() -> None:
    with pytest.raises(ValueError, match="negative"):
        encode_unsigned(-5)


@pytest.mark.unit
def test_decode_reports_next_offset() -> None:
    data = b"\x05\xac\x02\x03"
    first, offset = decode_unsigned(data)
    second, offset = decode_unsigned(data, offset)
    third, offset = decode_signed(data, offset)
    assert (first, second, third, offset) == (5, 300, -2, 4)


@pytest.mark.unit
def test_truncated_varint_counts_consumed_bytes() -> None:
    source = BufferSource(b"\x80\x80")
    with pytest.raises(TruncatedVarintError) as excinfo:
        read_unsigned(source)
    assert excinfo.value.consumed == 2
    assert source.at_end()


@pytest.mark.unit
def test_empty_input_is_truncated() -> None:
    with pytest.raises(TruncatedVarintError):
        decode_unsigned(b"")


@pytest.mark.unit
def test_overlong_varint_stops_at_ten_bytes() -> None:
    source = BufferSource(b"\xff" * 32)
    with pytest.raises(OverlongVarintError):
        read_unsigned(source)
    assert source.offset == MAX_VARINT_BYTES


@pytest.mark.unit
def test_tenth_byte_payload_is_masked_to_64_bits() -> None:
    value, offset = decode_unsigned(b"\xff" * 9 + b"\x7f")
    assert value == UINT64_MASK
    assert offset == MAX_VARINT_BYTES


@pytest.mark.unit
def test_stream_source_reads_the_same_values() -> None:
    source = StreamSource(io.BytesIO(encode_unsigned(300) + encode_signed(-7)))
    assert read_unsigned(source) == 300
    assert zigzag_decode(read_unsigned(source)) == -7
    assert source.at_end()


@pytest.mark.unit
@settings(max_examples=200, deadline=None)
@given(value=st.integers(min_value=INT64_MIN, max_value=INT64_MAX))
def test_zigzag_is_a_bijection(value: int) -> None:
    encoded = zigzag_encode(value)
    assert encoded >= 0
    assert zigzag_decode(encoded) == value


@pytest.mark.unit
@settings(max_examples=200, deadline=None)
@given(value=st.integers(min_value=0, max_value=UINT64_MASK))
def test_unsigned_round_trip_within_ten_bytes(value: int) -> None:
    encoded = encode_unsigned(value)
    assert 1 <= len(encoded) <= MAX_VARINT_BYTES
    assert encoded[-1] & 0x80 == 0
    assert decode_unsigned(encoded) == (value, len(encoded))


@pytest.mark.unit
@settings(max_examples=200, deadline=None)
@given(value=st.integers(min_value=INT64_MIN, max_value=INT64_MAX))
def test_signed_round_trip(value: int) -> None:
    encoded = encode_signed(value)
    assert decode_signed(encoded) == (value, len(encoded))
