"""Tests for the structlog setup."""

import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from history_sync.config import LoggingConfig
from history_sync.observability import configure_logging


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)


def test_json_format_renders_structured_events(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(LoggingConfig(level="INFO", format="json"))

    structlog.get_logger("history_sync.test").info("history_load_started", generation=3)

    line = capsys.readouterr().err.strip().splitlines()[-1]
    event = json.loads(line)
    assert event["event"] == "history_load_started"
    assert event["generation"] == 3
    assert event["level"] == "info"
    assert "timestamp" in event


def test_level_filters_lower_events(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(LoggingConfig(level="WARNING", format="console"))

    logger = structlog.get_logger("history_sync.test_level")
    logger.info("not_shown")
    logger.warning("shown")

    err = capsys.readouterr().err
    assert "not_shown" not in err
    assert "shown" in err
