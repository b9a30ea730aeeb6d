"""
fieldwalk — configuration schema

File: src/fieldwalk/config/schema.py
Last updated: 2026-10-18

Purpose
- Define the built-in defaults, structured validation and the typed reader settings.

What should be included in this file
- ``[codec]`` limits consumed by the binary reader.
- ``[observability]`` settings consumed by structured logging setup.
- Deterministic validation with path-qualified issues.

Functional requirements
- Unknown keys and wrongly-typed values are reported, never silently dropped.
- ``assert_valid_config`` raises ``ConfigValidationError`` listing every issue.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, TypedDict

from fieldwalk.constants import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_ZERO_WIDTH_ELEMENTS,
    DEFAULT_TEXT_CHUNK_BYTES,
    DEFAULT_TRAILING_BYTES_POLICY,
    MAX_DEPTH_CEILING,
    TRAILING_BYTES_POLICIES,
)


class CodecConfig(TypedDict):
    text_chunk_bytes: int
    max_depth: int
    max_zero_width_elements: int
    trailing_bytes: str


class ObservabilityConfig(TypedDict):
    log_level: str
    diagnostic_log_level: str
    log_to_stdout: bool
    log_file: str


class FieldwalkConfig(TypedDict):
    codec: CodecConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[FieldwalkConfig] = {
    "codec": {
        "text_chunk_bytes": DEFAULT_TEXT_CHUNK_BYTES,
        "max_depth": DEFAULT_MAX_DEPTH,
        "max_zero_width_elements": DEFAULT_MAX_ZERO_WIDTH_ELEMENTS,
        "trailing_bytes": DEFAULT_TRAILING_BYTES_POLICY,
    },
    "observability": {
        "log_level": "INFO",
        "diagnostic_log_level": "DEBUG",
        "log_to_stdout": True,
        "log_file": "",
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


@dataclass(frozen=True, slots=True)
class CodecSettings:
    """Typed view of ``[codec]`` plus the level used to log decode diagnostics."""

    text_chunk_bytes: int = DEFAULT_TEXT_CHUNK_BYTES
    max_depth: int = DEFAULT_MAX_DEPTH
    max_zero_width_elements: int = DEFAULT_MAX_ZERO_WIDTH_ELEMENTS
    trailing_bytes: str = DEFAULT_TRAILING_BYTES_POLICY
    diagnostic_log_level: int = logging.DEBUG

    def __post_init__(self) -> None:
        issues = _IssueCollector()
        _as_int(self.text_chunk_bytes, "codec.text_chunk_bytes", issues, minimum=1)
        _as_int(
            self.max_depth, "codec.max_depth", issues, minimum=1, maximum=MAX_DEPTH_CEILING
        )
        _as_int(self.max_zero_width_elements, "codec.max_zero_width_elements", issues, minimum=0)
        _as_enum(
            self.trailing_bytes,
            "codec.trailing_bytes",
            issues,
            allowed_values=TRAILING_BYTES_POLICIES,
        )
        _as_int(self.diagnostic_log_level, "observability.diagnostic_log_level", issues, minimum=0)
        if issues.has_issues:
            raise ConfigValidationError(issues.items())

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> CodecSettings:
        validated = assert_valid_config(config)
        codec = validated["codec"]
        return cls(
            text_chunk_bytes=codec["text_chunk_bytes"],
            max_depth=codec["max_depth"],
            max_zero_width_elements=codec["max_zero_width_elements"],
            trailing_bytes=codec["trailing_bytes"],
            diagnostic_log_level=parse_log_level(
                validated["observability"]["diagnostic_log_level"]
            ),
        )


def default_config() -> FieldwalkConfig:
    """Return a deep copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = copy.deepcopy(dict(base))
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    _reject_unknown_keys(root, set(DEFAULT_CONFIG), "", issues)
    normalized: dict[str, Any] = {}

    codec = _as_object(root.get("codec", {}), "codec", issues)
    if codec is not None:
        _reject_unknown_keys(codec, set(DEFAULT_CONFIG["codec"]), "codec", issues)
        normalized["codec"] = {
            "text_chunk_bytes": _as_int(
                codec.get("text_chunk_bytes", DEFAULT_TEXT_CHUNK_BYTES),
                "codec.text_chunk_bytes",
                issues,
                minimum=1,
            ),
            "max_depth": _as_int(
                codec.get("max_depth", DEFAULT_MAX_DEPTH),
                "codec.max_depth",
                issues,
                minimum=1,
                maximum=MAX_DEPTH_CEILING,
            ),
            "max_zero_width_elements": _as_int(
                codec.get("max_zero_width_elements", DEFAULT_MAX_ZERO_WIDTH_ELEMENTS),
                "codec.max_zero_width_elements",
                issues,
                minimum=0,
            ),
            "trailing_bytes": _as_enum(
                codec.get("trailing_bytes", DEFAULT_TRAILING_BYTES_POLICY),
                "codec.trailing_bytes",
                issues,
                allowed_values=TRAILING_BYTES_POLICIES,
            ),
        }

    defaults = DEFAULT_CONFIG["observability"]
    observability = _as_object(root.get("observability", {}), "observability", issues)
    if observability is not None:
        _reject_unknown_keys(observability, set(defaults), "observability", issues)
        normalized["observability"] = {
            "log_level": _as_level(
                observability.get("log_level", defaults["log_level"]),
                "observability.log_level",
                issues,
            ),
            "diagnostic_log_level": _as_level(
                observability.get("diagnostic_log_level", defaults["diagnostic_log_level"]),
                "observability.diagnostic_log_level",
                issues,
            ),
            "log_to_stdout": _as_bool(
                observability.get("log_to_stdout", defaults["log_to_stdout"]),
                "observability.log_to_stdout",
                issues,
            ),
            "log_file": _as_path_text(
                observability.get("log_file", defaults["log_file"]),
                "observability.log_file",
                issues,
            ),
        }

    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def parse_log_level(value: int | str) -> int:
    """Return the numeric level for ``"DEBUG"``-style names or pass integers through."""

    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if not isinstance(value, str):
        raise ValueError(f"level must be int or str, got {type(value).__name__}")
    parsed = logging.getLevelName(value.strip().upper())
    if isinstance(parsed, int):
        return parsed
    raise ValueError(f"unsupported logging level {value!r}")


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    if maximum is not None and value > maximum:
        issues.add(path, f"must be <= {maximum}")
        return None
    return value


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_path_text(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    if "\x00" in value:
        issues.add(path, "must not contain NUL bytes")
        return None
    return value.strip()


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _as_level(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    try:
        parse_log_level(value)
    except ValueError as exc:
        issues.add(path, str(exc))
        return None
    return value.strip().upper()


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(f"{path}.{key}" if path else key, "unknown field")


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            child = target.get(key)
            if not isinstance(child, dict):
                child = {}
                target[key] = child
            _merge_into(child, value)
        else:
            target[key] = copy.deepcopy(value)


__all__ = [
    "DEFAULT_CONFIG",
    "CodecConfig",
    "CodecSettings",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "FieldwalkConfig",
    "ObservabilityConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "parse_log_level",
    "validate_config",
]
