"""Type descriptors and decode diagnostics shared by every operation."""

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
    BoolSpec,
    EnumSpec,
    FieldSpec,
    IntSpec,
    NodeKind,
    PrimitiveSpec,
    SequenceSpec,
    TextSpec,
    TypeSpec,
    VariantSpec,
    wrap_to_width,
)

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
    "BoolSpec",
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticLog",
    "EnumSpec",
    "FieldSpec",
    "IntSpec",
    "NodeKind",
    "PrimitiveSpec",
    "SequenceSpec",
    "TextSpec",
    "TypeSpec",
    "VariantSpec",
    "wrap_to_width",
]
