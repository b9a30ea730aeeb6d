"""Exception hierarchy shared by schema declaration, dispatch and decoding."""

from __future__ import annotations


class FieldwalkError(Exception):
    """Base class for all fieldwalk errors."""


class SchemaError(FieldwalkError, TypeError):
    """Raised for invalid type declarations or values that do not fit a declared type."""


__all__ = ["FieldwalkError", "SchemaError"]
