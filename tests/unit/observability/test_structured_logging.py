"""
fieldwalk — unit tests for observability logging

File: tests/unit/observability/test_structured_logging.py
Last updated: 2026-10-18

Purpose
- Validate structured JSON logging with correlation metadata and queue-backed reliability.

What this test file should cover
- JSON line validity and extra-field capture.
- Correlation field propagation, including decode diagnostics.
- Multi-threaded logging stability.
- Queue drain/shutdown behavior.

Non-functional requirements
- Deterministic and non-flaky.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import threading
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from fieldwalk.codec.reader import BinaryReader
from fieldwalk.config.schema import CodecSettings, ConfigValidationError
from fieldwalk.domain.schema import STRING
from fieldwalk.observability.logging import (
    LoggingConfig,
    correlation_scope,
    get_active_logging_handle,
    get_correlation_context,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _cleanup_logging() -> Iterator[None]:
    yield
    shutdown_logging()


def _logger_name() -> str:
    return f"fieldwalk_tests.logging.{uuid4().hex}"


def _read_json_lines(path: Path) -> list[dict[str, object]]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines]


@pytest.mark.unit
def test_json_lines_carry_correlation_and_extra_fields(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(
            logger_name=logger_name,
            log_to_stdout=False,
            log_path=tmp_path / "decode.jsonl",
        )
    )
    logger = logging.getLogger(logger_name)

    with correlation_scope(operation="binary_decode", type_name="Polygon"):
        logger.info("decoded", extra={"bytes_read": 19, "nested": {"kinds": ["TruncatedText"]}})
    logger.warning("outside")

    shutdown_logging(handle)

    assert handle.log_path is not None
    first, second = _read_json_lines(handle.log_path)
    assert first["message"] == "decoded"
    assert first["level"] == "INFO"
    assert first["logger"] == logger_name
    assert first["operation"] == "binary_decode"
    assert first["type_name"] == "Polygon"
    assert first["fields"] == {"bytes_read": 19, "nested": {"kinds": ["TruncatedText"]}}
    assert str(first["timestamp"]).endswith("Z")
    assert "operation" not in second


@pytest.mark.unit
def test_reader_diagnostics_reach_structured_sink(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(
            logger_name=logger_name,
            level="DEBUG",
            log_to_stdout=False,
            log_path=tmp_path / "diag.jsonl",
        )
    )
    reader = BinaryReader(
        b"\x05ab",
        settings=CodecSettings(diagnostic_log_level=logging.WARNING),
        logger=logging.getLogger(f"{logger_name}.reader"),
    )
    with correlation_scope(operation="binary_decode"):
        reader.read(STRING)
    shutdown_logging(handle)

    assert handle.log_path is not None
    (event,) = _read_json_lines(handle.log_path)
    assert event["level"] == "WARNING"
    assert event["operation"] == "binary_decode"
    assert event["fields"] == {"kind": "TruncatedText", "path": "str", "offset": 3, "expected": 5, "actual": 2}


@pytest.mark.unit
def test_setup_logging_wrapper_uses_observability_config(tmp_path: Path) -> None:
    logger_name = _logger_name()
    log_file = tmp_path / "nested" / "run.jsonl"
    logger = setup_logging(
        {"observability": {"log_level": "WARNING", "log_to_stdout": False, "log_file": str(log_file)}},
        logger_name=logger_name,
    )

    logger.info("dropped by level")
    logger.error("kept")
    shutdown_logging()

    events = _read_json_lines(log_file)
    assert [event["message"] for event in events] == ["kept"]


@pytest.mark.unit
def test_correlation_scope_nests_and_restores() -> None:
    with correlation_scope(operation="a", type_name="T"):
        with correlation_scope(type_name=None, extra="x"):
            assert get_correlation_context() == {"operation": "a", "extra": "x"}
        assert get_correlation_context() == {"operation": "a", "type_name": "T"}
    assert get_correlation_context() == {}

    with pytest.raises(ValueError, match="must not be empty"), correlation_scope(operation="  "):
        pass


@pytest.mark.unit
def test_invalid_logging_config_is_rejected() -> None:
    with pytest.raises(ValueError, match="queue_size"):
        setup_structured_logging(LoggingConfig(logger_name=_logger_name(), queue_size=0, log_to_stdout=False))
    with pytest.raises(ValueError, match="unsupported"):
        setup_structured_logging(LoggingConfig(logger_name=_logger_name(), level="LOUD", log_to_stdout=False))


@pytest.mark.unit
def test_multithreaded_logging_produces_valid_json_lines(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(
            logger_name=logger_name,
            log_to_stdout=False,
            log_path=tmp_path / "threads.jsonl",
            queue_size=4096,
        )
    )
    logger = logging.getLogger(logger_name)

    total_threads = 8
    per_thread = 40

    def worker(thread_idx: int) -> None:
        with correlation_scope(operation=f"worker-{thread_idx}"):
            for i in range(per_thread):
                logger.info("thread=%s index=%s", thread_idx, i)

    threads = [threading.Thread(target=worker, args=(idx,)) for idx in range(total_threads)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    shutdown_logging(handle)

    assert handle.log_path is not None
    events = _read_json_lines(handle.log_path)
    assert len(events) == total_threads * per_thread
    for event in events:
        thread_idx = str(event["message"]).split()[0].split("=")[1]
        assert event["operation"] == f"worker-{thread_idx}"


@pytest.mark.unit
def test_queue_handler_non_blocking_and_shutdown_flushes(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(
            logger_name=logger_name,
            log_to_stdout=False,
            log_path=tmp_path / "flush.jsonl",
            queue_size=10_000,
        )
    )
    logger = logging.getLogger(logger_name)

    queue_handlers = [h for h in logger.handlers if isinstance(h, logging.handlers.QueueHandler)]
    assert queue_handlers, "expected queue-backed non-blocking logging"
    assert get_active_logging_handle() is handle

    expected = 300
    for i in range(expected):
        logger.info("message %s", i)

    shutdown_logging(handle)

    assert handle.log_path is not None
    lines = handle.log_path.read_text(encoding="utf-8").splitlines()
    assert handle.dropped_records == 0
    assert len(lines) == expected
    assert handle.is_shutdown
    assert get_active_logging_handle() is None


@pytest.mark.unit
def test_setup_logging_validates_before_installing_handlers() -> None:
    logger_name = _logger_name()
    with pytest.raises(ConfigValidationError) as excinfo:
        setup_logging({"observability": {"log_level": "LOUD"}}, logger_name=logger_name)
    assert [issue.path for issue in excinfo.value.issues] == ["observability.log_level"]
    assert logging.getLogger(logger_name).handlers == []
    assert get_active_logging_handle() is None


@pytest.mark.unit
def test_full_queue_drops_instead_of_blocking(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(
            logger_name=logger_name,
            log_to_stdout=False,
            log_path=tmp_path / "tiny.jsonl",
            queue_size=1,
        )
    )
    handle._listener.stop()
    logger = logging.getLogger(logger_name)
    for i in range(5):
        logger.info("burst %s", i)
    assert handle.dropped_records == 4
    handle._listener.start()
    shutdown_logging(handle)

    assert handle.log_path is not None
    assert [event["message"] for event in _read_json_lines(handle.log_path)] == ["burst 0"]


@pytest.mark.unit
def test_non_json_extras_are_rendered_as_text(tmp_path: Path) -> None:
    logger_name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(logger_name=logger_name, log_to_stdout=False, log_path=tmp_path / "extras.jsonl")
    )
    logging.getLogger(logger_name).info(
        "extras", extra={"source": tmp_path / "in.bin", "raw": b"ab", "kinds": ("TruncatedText",)}
    )
    shutdown_logging(handle)

    assert handle.log_path is not None
    (event,) = _read_json_lines(handle.log_path)
    assert event["fields"] == {"source": str(tmp_path / "in.bin"), "raw": "ab", "kinds": ["TruncatedText"]}
