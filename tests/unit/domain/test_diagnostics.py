"""Unit tests for diagnostic records and the append-only log."""

from __future__ import annotations

import pytest

from fieldwalk.domain.diagnostics import Diagnostic, DiagnosticKind, DiagnosticLog


@pytest.mark.unit
def test_render_includes_path_and_offset() -> None:
    entry = Diagnostic(DiagnosticKind.TRUNCATED_TEXT, "short", path="Polygon.name", offset=5)
    assert entry.render() == "Error: Polygon.name @5: short"
    assert Diagnostic(DiagnosticKind.MISSING_FIELD, "gone", path="Pt.x").render() == "Error: Pt.x: gone"
    assert Diagnostic(DiagnosticKind.TYPE_MISMATCH, "bad").render() == "Error: bad"


@pytest.mark.unit
def test_log_fields_omit_unset_counts() -> None:
    entry = Diagnostic(
        DiagnosticKind.TRUNCATED_SEQUENCE_ELEMENTS,
        "short",
        path="p",
        offset=3,
        expected=4,
        actual=1,
    )
    assert entry.as_log_fields() == {
        "kind": "TruncatedSequenceElements",
        "path": "p",
        "offset": 3,
        "expected": 4,
        "actual": 1,
    }
    assert Diagnostic(DiagnosticKind.TYPE_MISMATCH, "x").as_log_fields() == {
        "kind": "TypeMismatch",
        "path": "",
    }


@pytest.mark.unit
def test_log_is_append_only_and_ordered() -> None:
    log = DiagnosticLog()
    assert not log
    first = Diagnostic(DiagnosticKind.TRUNCATED_INTEGER, "a")
    second = Diagnostic(DiagnosticKind.EXTRA_TRAILING_BYTES, "b")
    log.append(first)
    log.append(second)

    assert len(log) == 2
    assert log.entries() == (first, second)
    assert list(log) == [first, second]
    assert log.kinds() == (DiagnosticKind.TRUNCATED_INTEGER, DiagnosticKind.EXTRA_TRAILING_BYTES)
    assert log.has(DiagnosticKind.EXTRA_TRAILING_BYTES)
    assert not log.has(DiagnosticKind.OVERLONG_INTEGER)
    assert log.render() == "Error: a\nError: b\n"


@pytest.mark.unit
def test_log_rejects_non_diagnostics() -> None:
    with pytest.raises(TypeError):
        DiagnosticLog().append("Error: nope")  # type: ignore[arg-type]


@pytest.mark.unit
def test_diagnostics_are_immutable() -> None:
    entry = Diagnostic(DiagnosticKind.TRUNCATED_INTEGER, "a")
    with pytest.raises(AttributeError):
        entry.message = "b"  # type: ignore[misc]
