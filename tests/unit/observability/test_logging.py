"""
ai-dev-workflow - unit tests for structured logging

File: tests/unit/observability/test_logging.py

Purpose
- Validate JSON-lines output from stdlib and structlog loggers.

What this test file should cover
- One JSON object per line with timestamp/level/logger/message.
- structlog keyword fields land under ``fields``.
- Level filtering and handler shutdown.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from uuid import uuid4

import pytest

from ai_dev_workflow.observability import (
    LoggingConfig,
    get_active_logging_handle,
    get_logger,
    setup_logging,
    shutdown_logging,
)


@pytest.fixture(autouse=True)
def _cleanup_logging() -> Iterator[None]:
    yield
    shutdown_logging()


def _logger_name() -> str:
    return f"ai_dev_workflow_tests.logging.{uuid4().hex}"


def _read_json_lines(path: Path) -> list[dict[str, object]]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_stdlib_records_are_json_lines(tmp_path: Path) -> None:
    name = _logger_name()
    handle = setup_logging(LoggingConfig(log_dir=tmp_path, logger_name=name, level="INFO"))

    logging.getLogger(name).info("hello %s", "world", extra={"count": 2})
    logging.getLogger(name).debug("filtered out")
    handle.flush()

    records = _read_json_lines(tmp_path / "ai-dev.jsonl")
    assert len(records) == 1
    record = records[0]
    assert record["level"] == "INFO"
    assert record["logger"] == name
    assert record["message"] == "hello world"
    assert record["fields"] == {"count": 2}
    assert str(record["timestamp"]).endswith("Z")


def test_structlog_events_carry_fields(tmp_path: Path) -> None:
    name = _logger_name()
    handle = setup_logging(LoggingConfig(log_dir=tmp_path, logger_name=name, level="DEBUG"))

    get_logger(f"{name}.child").info("config_synced", strategy="merge", backup=True)
    handle.flush()

    records = _read_json_lines(tmp_path / "ai-dev.jsonl")
    assert records[-1]["message"] == "config_synced"
    assert records[-1]["logger"] == f"{name}.child"
    assert records[-1]["fields"] == {"strategy": "merge", "backup": True}


def test_shutdown_detaches_handlers(tmp_path: Path) -> None:
    name = _logger_name()
    handle = setup_logging(LoggingConfig(log_dir=tmp_path, logger_name=name))
    assert get_active_logging_handle() is handle

    shutdown_logging()

    assert handle.is_shutdown
    assert get_active_logging_handle() is None
    assert logging.getLogger(name).handlers == []


def test_without_sinks_nothing_is_written(tmp_path: Path) -> None:
    handle = setup_logging(LoggingConfig(log_dir=None, logger_name=_logger_name()))

    assert handle.log_path is None
    assert list(tmp_path.iterdir()) == []


def test_invalid_level_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="unsupported logging level"):
        setup_logging(LoggingConfig(log_dir=tmp_path, level="LOUD"))
