"""Unit tests for logging configuration and the JSON formatter."""

import json
import logging
import sys
from pathlib import Path

import pytest

from transcode_planner.config.models import LoggingConfig
from transcode_planner.logging import (
    JSONFormatter,
    PlanContextFilter,
    configure_logging,
    plan_context,
    stream_context,
)


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level after the test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_stderr_only_by_default(self, restore_root_logger) -> None:
        configure_logging(LoggingConfig(level="debug"))

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0], logging.StreamHandler)

    def test_file_handler(self, restore_root_logger, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "tplan.log"

        configure_logging(LoggingConfig(level="info", file=log_file))
        logging.getLogger("transcode_planner.test").info("hello")

        assert log_file.exists()
        assert "hello" in log_file.read_text()
        assert len(restore_root_logger.handlers) == 1

    def test_file_and_stderr(self, restore_root_logger, tmp_path: Path) -> None:
        configure_logging(
            LoggingConfig(file=tmp_path / "tplan.log", include_stderr=True)
        )

        assert len(restore_root_logger.handlers) == 2

    def test_text_format_includes_context_tag(
        self, restore_root_logger, tmp_path: Path
    ) -> None:
        log_file = tmp_path / "tplan.log"
        configure_logging(LoggingConfig(file=log_file))

        with plan_context("/media/a.mkv"), stream_context(4):
            logging.getLogger("transcode_planner.test").warning("tagged")

        expected = "WARNING transcode_planner.test: [a.mkv #4] tagged"
        assert expected in log_file.read_text()

    def test_reconfiguring_replaces_handlers(
        self, restore_root_logger, tmp_path: Path
    ) -> None:
        configure_logging(LoggingConfig(file=tmp_path / "first.log"))
        configure_logging(LoggingConfig(file=tmp_path / "second.log"))
        logging.getLogger("transcode_planner.test").info("second only")

        assert len(restore_root_logger.handlers) == 1
        assert "second only" not in (tmp_path / "first.log").read_text()
        assert "second only" in (tmp_path / "second.log").read_text()

    def test_json_format(self, restore_root_logger, tmp_path: Path) -> None:
        log_file = tmp_path / "tplan.log"
        configure_logging(LoggingConfig(file=log_file, format="json"))

        with plan_context("/media/a.mkv"), stream_context(2):
            logging.getLogger("transcode_planner.test").info("planned %d", 3)

        entry = json.loads(log_file.read_text().splitlines()[0])
        assert entry["message"] == "planned 3"
        assert entry["level"] == "INFO"
        assert entry["file"] == "/media/a.mkv"
        assert entry["stream"] == 2
        assert "extra" not in entry


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_extra_attributes_are_grouped(self) -> None:
        record = logging.LogRecord(
            "transcode_planner.x", logging.INFO, __file__, 1, "msg", None, None
        )
        record.stream_count = 4

        entry = json.loads(JSONFormatter().format(record))

        assert entry["logger"] == "transcode_planner.x"
        assert entry["extra"] == {"stream_count": 4}

    def test_unfiltered_record_has_no_context(self) -> None:
        record = logging.LogRecord(
            "root", logging.ERROR, __file__, 1, "msg", None, None
        )

        entry = json.loads(JSONFormatter().format(record))

        assert set(entry) == {"time", "level", "logger", "message"}

    def test_filtered_record_outside_plan(self) -> None:
        record = logging.LogRecord("root", logging.INFO, __file__, 1, "msg", None, None)
        PlanContextFilter().filter(record)

        entry = json.loads(JSONFormatter().format(record))

        assert "file" not in entry
        assert "extra" not in entry

    def test_exception_is_included(self) -> None:
        try:
            raise ValueError("bad")
        except ValueError:
            exc_info = sys.exc_info()
        record = logging.LogRecord(
            "root", logging.ERROR, __file__, 1, "failed", None, exc_info
        )

        entry = json.loads(JSONFormatter().format(record))

        assert "ValueError: bad" in entry["exception"]
