"""
fieldwalk config package public API.

File: src/fieldwalk/config/__init__.py
Last updated: 2026-10-18

Purpose
- Export config loading/validation entrypoints and public error types.

Functional requirements
- Support loading from ``fieldwalk.toml`` or ``[tool.fieldwalk]`` + ``FIELDWALK_`` env overrides.
- Fail fast with clear structured validation/load errors.
"""

from fieldwalk.config.loader import (
    ConfigLoadError,
    dump_effective_config,
    load_codec_settings,
    load_config,
)
from fieldwalk.config.schema import (
    DEFAULT_CONFIG,
    CodecConfig,
    CodecSettings,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    FieldwalkConfig,
    ObservabilityConfig,
    assert_valid_config,
    default_config,
    merge_config,
    parse_log_level,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "CodecConfig",
    "CodecSettings",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "FieldwalkConfig",
    "ObservabilityConfig",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "load_codec_settings",
    "load_config",
    "merge_config",
    "parse_log_level",
    "validate_config",
]
