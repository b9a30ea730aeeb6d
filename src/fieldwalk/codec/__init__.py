"""Binary wire codec: varints, byte sources, writer and reader operations."""

from fieldwalk.codec.api import DecodeError, DecodeResult, dump, dumps, load, loads
from fieldwalk.codec.io import BufferSource, ByteSource, StreamSource, as_source
from fieldwalk.codec.reader import BinaryReader
from fieldwalk.codec.varint import (
    OverlongVarintError,
    TruncatedVarintError,
    VarintError,
    decode_signed,
    decode_unsigned,
    encode_signed,
    encode_unsigned,
    read_signed,
    read_unsigned,
    zigzag_decode,
    zigzag_encode,
)
from fieldwalk.codec.writer import BinaryWriter, ByteSink

__all__ = [
    "BinaryReader",
    "BinaryWriter",
    "BufferSource",
    "ByteSink",
    "ByteSource",
    "DecodeError",
    "DecodeResult",
    "OverlongVarintError",
    "StreamSource",
    "TruncatedVarintError",
    "VarintError",
    "as_source",
    "decode_signed",
    "decode_unsigned",
    "dump",
    "dumps",
    "encode_signed",
    "encode_unsigned",
    "load",
    "loads",
    "read_signed",
    "read_unsigned",
    "zigzag_decode",
    "zigzag_encode",
]
