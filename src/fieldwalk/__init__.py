"""
fieldwalk — package root

File: src/fieldwalk/__init__.py
Last updated: 2026-10-18

Purpose
- Package root. Declare a type's fields once and run any number of traversal
  operations over it: a compact binary codec, a debug printer, a JSON tree adapter.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
- Public surface: schema declaration, the codec entry points and diagnostics.
"""

from fieldwalk.codec.api import DecodeError, DecodeResult, dump, dumps, load, loads
from fieldwalk.codec.reader import BinaryReader
from fieldwalk.codec.writer import BinaryWriter
from fieldwalk.config.schema import CodecSettings
from fieldwalk.domain.diagnostics import Diagnostic, DiagnosticKind, DiagnosticLog
from fieldwalk.domain.schema import (
    BOOL,
    BYTES,
    INT8,
    INT16,
    INT32,
    INT64,
    STRING,
    UINT8,
    UINT16,
    UINT32,
    UINT64,
    AggregateSchema,
    EnumSpec,
    IntSpec,
    SequenceSpec,
    TextSpec,
    TypeSpec,
    VariantSpec,
)
from fieldwalk.errors import FieldwalkError, SchemaError
from fieldwalk.traversal.dispatch import NoHandlerError, Operation, dispatch
from fieldwalk.traversal.registry import (
    enum_of,
    field,
    register,
    resolve_type,
    schema_of,
    sequence_of,
    traversable,
    variant_of,
)

__version__ = "0.1.0"

__all__ = [
    "BOOL",
    "BYTES",
    "INT8",
    "INT16",
    "INT32",
    "INT64",
    "STRING",
    "UINT8",
    "UINT16",
    "UINT32",
    "UINT64",
    "AggregateSchema",
    "BinaryReader",
    "BinaryWriter",
    "CodecSettings",
    "DecodeError",
    "DecodeResult",
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticLog",
    "EnumSpec",
    "FieldwalkError",
    "IntSpec",
    "NoHandlerError",
    "Operation",
    "SchemaError",
    "SequenceSpec",
    "TextSpec",
    "TypeSpec",
    "VariantSpec",
    "__version__",
    "dispatch",
    "dump",
    "dumps",
    "enum_of",
    "field",
    "load",
    "loads",
    "register",
    "resolve_type",
    "schema_of",
    "sequence_of",
    "traversable",
    "variant_of",
]
