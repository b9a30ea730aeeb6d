"""Stable constants shared by the wire codec, readers and configuration."""

from __future__ import annotations

from typing import Final

# Varint layout: 7 payload bits per byte, least-significant group first.
VARINT_PAYLOAD_BITS: Final[int] = 7
VARINT_PAYLOAD_MASK: Final[int] = 0x7F
VARINT_CONTINUATION_BIT: Final[int] = 0x80
# ceil(64 / 7); a 64-bit value never needs more.
MAX_VARINT_BYTES: Final[int] = 10
UINT64_MASK: Final[int] = (1 << 64) - 1

SUPPORTED_INT_WIDTHS: Final[tuple[int, ...]] = (8, 16, 32, 64)

# Reader defaults (overridable through [codec] config).
DEFAULT_TEXT_CHUNK_BYTES: Final[int] = 4096
DEFAULT_MAX_DEPTH: Final[int] = 128
# Each nesting level costs about three interpreter frames.
MAX_DEPTH_CEILING: Final[int] = 200
DEFAULT_MAX_ZERO_WIDTH_ELEMENTS: Final[int] = 65_536
TRAILING_BYTES_POLICIES: Final[tuple[str, ...]] = ("ignore", "report")
DEFAULT_TRAILING_BYTES_POLICY: Final[str] = "ignore"

# Configuration discovery.
DEFAULT_CONFIG_FILE: Final[str] = "fieldwalk.toml"
PYPROJECT_FILE: Final[str] = "pyproject.toml"
ENV_PREFIX: Final[str] = "FIELDWALK_"

DEFAULT_LOGGER_NAME: Final[str] = "fieldwalk"

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_LOGGER_NAME",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_MAX_ZERO_WIDTH_ELEMENTS",
    "DEFAULT_TEXT_CHUNK_BYTES",
    "DEFAULT_TRAILING_BYTES_POLICY",
    "ENV_PREFIX",
    "MAX_DEPTH_CEILING",
    "MAX_VARINT_BYTES",
    "PYPROJECT_FILE",
    "SUPPORTED_INT_WIDTHS",
    "TRAILING_BYTES_POLICIES",
    "UINT64_MASK",
    "VARINT_CONTINUATION_BIT",
    "VARINT_PAYLOAD_BITS",
    "VARINT_PAYLOAD_MASK",
]
