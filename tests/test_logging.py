"""Tests for structlog configuration of access records."""

from __future__ import annotations

import json
import logging
from unittest.mock import patch

import pytest
import structlog
from structlog.testing import capture_logs

from access_observer.config import settings
from access_observer.sinks import StructlogSink
from access_observer.utils.logging import configure_access_logging, get_access_logger, get_logger


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


def test_json_access_line(capsys):
    configure_access_logging(log_level="INFO", log_format="json")

    sink = StructlogSink(get_access_logger(service="billing"))
    sink({"level": "warn", "message": "200 4 GET /health", "status": 200})

    entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert entry["message"] == "200 4 GET /health"
    assert "event" not in entry
    assert entry["level"] == "warning"
    assert entry["severity"] == "warn"
    assert entry["logger"] == settings.logger_name
    assert entry["service"] == "billing"
    assert entry["status"] == 200
    assert "timestamp" in entry


def test_level_filtering(capsys):
    configure_access_logging(log_level="WARNING", log_format="json")

    log = get_logger("tests.filter")
    log.info("hidden")
    log.warning("shown")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "shown" in out


def test_root_logger_is_left_alone():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level

    configure_access_logging(log_level="DEBUG", log_format="console")

    assert root.handlers == handlers
    assert root.level == level


def test_access_logger_name_follows_settings():
    with (
        patch.object(settings, "logger_name", "billing.access"),
        capture_logs() as logs,
    ):
        get_access_logger().info("200 1 GET /")

    assert logs[0]["logger"] == "billing.access"


def test_module_logger_stays_lazy(capsys):
    log = get_logger("tests.lazy")
    configure_access_logging(log_level="INFO", log_format="json")

    log.info("after configure")

    entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert entry["message"] == "after configure"
    assert entry["logger"] == "tests.lazy"
