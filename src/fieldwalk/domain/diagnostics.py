"""Decode diagnostics: taxonomy, immutable records and the append-only log."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum


class DiagnosticKind(StrEnum):
    TRUNCATED_INTEGER = "TruncatedInteger"
    OVERLONG_INTEGER = "OverlongInteger"
    TRUNCATED_TEXT = "TruncatedText"
    TRUNCATED_SEQUENCE_COUNT = "TruncatedSequenceCount"
    TRUNCATED_SEQUENCE_ELEMENTS = "TruncatedSequenceElements"
    EXTRA_TRAILING_BYTES = "ExtraTrailingBytes"
    INVALID_VARIANT_INDEX = "InvalidVariantIndex"
    DEPTH_LIMIT_EXCEEDED = "DepthLimitExceeded"
    TYPE_MISMATCH = "TypeMismatch"
    INVALID_TEXT = "InvalidText"
    MISSING_FIELD = "MissingField"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One structural defect found while reading."""

    kind: DiagnosticKind
    message: str
    path: str = ""
    offset: int | None = None
    expected: int | None = None
    actual: int | None = None

    def render(self) -> str:
        location = self.path
        if self.offset is not None:
            location = f"{location} @{self.offset}".lstrip()
        if not location:
            return f"Error: {self.message}"
        return f"Error: {location}: {self.message}"

    def as_log_fields(self) -> dict[str, object]:
        fields: dict[str, object] = {"kind": self.kind.value, "path": self.path}
        if self.offset is not None:
            fields["offset"] = self.offset
        if self.expected is not None:
            fields["expected"] = self.expected
        if self.actual is not None:
            fields["actual"] = self.actual
        return fields


class DiagnosticLog:
    """Append-only collection of diagnostics; empty means success."""

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: list[Diagnostic] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(tuple(self._entries))

    def __repr__(self) -> str:
        return f"DiagnosticLog({len(self._entries)} entries)"

    def append(self, diagnostic: Diagnostic) -> None:
        if not isinstance(diagnostic, Diagnostic):
            raise TypeError(f"expected Diagnostic, got {type(diagnostic).__name__}")
        self._entries.append(diagnostic)

    def entries(self) -> tuple[Diagnostic, ...]:
        return tuple(self._entries)

    def kinds(self) -> tuple[DiagnosticKind, ...]:
        return tuple(entry.kind for entry in self._entries)

    def has(self, kind: DiagnosticKind) -> bool:
        return any(entry.kind is kind for entry in self._entries)

    def render(self) -> str:
        return "".join(f"{entry.render()}\n" for entry in self._entries)


__all__ = ["Diagnostic", "DiagnosticKind", "DiagnosticLog"]
