"""Dispatch protocol and one-time schema registration."""

from fieldwalk.traversal.dispatch import (
    AggregateScope,
    NoHandlerError,
    Operation,
    TraversalPath,
    dispatch,
    supports,
)
from fieldwalk.traversal.registry import (
    FIELD_METADATA_KEY,
    SCHEMA_ATTRIBUTE,
    enum_of,
    field,
    is_registered,
    register,
    resolve_type,
    schema_of,
    sequence_of,
    traversable,
    variant_of,
)

__all__ = [
    "FIELD_METADATA_KEY",
    "SCHEMA_ATTRIBUTE",
    "AggregateScope",
    "NoHandlerError",
    "Operation",
    "TraversalPath",
    "dispatch",
    "enum_of",
    "field",
    "is_registered",
    "register",
    "resolve_type",
    "schema_of",
    "sequence_of",
    "supports",
    "traversable",
    "variant_of",
]
