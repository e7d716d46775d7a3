"""
Unit tests for the logging subsystem.

Tests setup and shutdown of the queue-backed root handlers, context
enrichment, the JSON and colored formatters and queue overflow accounting.
"""

import json
import logging
import queue

import pytest

from refactor_rpg.core.config.config import Config
from refactor_rpg.core.logging.logger import (
    ColoredFormatter,
    ContextFilter,
    JSONFormatter,
    LOGGER_CONFIG,
    LogContext,
    RefactorRPGQueueHandler,
    get_logger,
    get_logging_health,
    setup_logging,
    shutdown_logging,
)


@pytest.fixture
def root_logger():
    """Hand the root logger to a test and put pytest's handlers back after."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield root
    shutdown_logging()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def make_record(level: int = logging.INFO, msg: str = "restored") -> logging.LogRecord:
    return logging.LogRecord(
        name="refactor_rpg.modules.session.context",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.mark.unit
class TestSetupAndShutdown:
    """Test the lifecycle of the root handlers."""

    def test_console_json_with_context(self, root_logger, monkeypatch, capsys):
        monkeypatch.setattr(Config, "LOG_JSON", True)

        setup_logging(to_file=False)
        with LogContext(profile_id="dev-1", operation="detect"):
            get_logger("refactor_rpg.tests").info("Action recorded", extra={"xp": 15})

        health = get_logging_health()
        assert health.initialized is True
        assert health.records_enqueued >= 2
        assert health.queue_max_size == LOGGER_CONFIG.QUEUE_MAX_SIZE

        shutdown_logging()
        assert get_logging_health().initialized is False

        lines = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line]
        recorded = [entry for entry in lines if entry["message"] == "Action recorded"]
        assert len(recorded) == 1
        entry = recorded[0]
        assert entry["profile_id"] == "dev-1"
        assert entry["operation"] == "detect"
        assert entry["extra"] == {"xp": 15}
        assert len(entry["correlation_id"]) == 8

    def test_setup_is_idempotent(self, root_logger, monkeypatch):
        monkeypatch.setattr(Config, "LOG_JSON", True)

        setup_logging(to_file=False)
        handlers = list(root_logger.handlers)
        setup_logging(to_file=False)

        assert root_logger.handlers == handlers
        assert len(handlers) == 1

    def test_file_output(self, root_logger, monkeypatch, tmp_path):
        monkeypatch.setattr(Config, "LOG_JSON", True)
        monkeypatch.setattr(Config, "LOGS_DIR", tmp_path / "logs")

        setup_logging(to_file=True)
        get_logger("refactor_rpg.tests").warning("Snapshot skipped")
        shutdown_logging()

        log_file = tmp_path / "logs" / LOGGER_CONFIG.DAILY_BASENAME
        assert log_file.exists()
        messages = [json.loads(line)["message"] for line in log_file.read_text("utf-8").splitlines()]
        assert "Snapshot skipped" in messages

    def test_shutdown_without_setup_is_a_no_op(self, root_logger):
        handlers = list(root_logger.handlers)

        shutdown_logging()

        assert root_logger.handlers == handlers


@pytest.mark.unit
class TestFormatters:
    """Test record enrichment and rendering."""

    def test_json_formatter_merges_context_and_extra(self):
        record = make_record()
        record.section = "active_quests"

        with LogContext(profile_id="dev-2", source="keyboard"):
            ContextFilter().filter(record)

        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "restored"
        assert payload["level"] == "INFO"
        assert payload["profile_id"] == "dev-2"
        assert payload["source"] == "keyboard"
        assert payload["component"] == "context"
        assert "operation" not in payload
        assert payload["extra"] == {"section": "active_quests"}

    def test_context_filter_defaults_outside_context(self):
        record = make_record()

        ContextFilter().filter(record)

        assert record.profile_id == "N/A"
        assert record.correlation_id == "N/A"
        assert record.component == "context"

    def test_colored_formatter_restores_levelname(self):
        record = make_record(level=logging.WARNING)

        rendered = ColoredFormatter(fmt="%(levelname)s %(message)s").format(record)

        assert rendered.startswith(ColoredFormatter.COLORS["WARNING"])
        assert record.levelname == "WARNING"


@pytest.mark.unit
class TestQueueHandler:
    """Test overflow accounting."""

    def test_full_queue_drops_and_counts(self, capsys):
        before = get_logging_health()
        handler = RefactorRPGQueueHandler(queue.Queue(1))

        handler.enqueue(make_record(msg="first"))
        handler.enqueue(make_record(msg="second"))

        after = get_logging_health()
        assert after.records_enqueued - before.records_enqueued == 2
        assert after.records_dropped - before.records_dropped == 1
        assert handler.queue.get_nowait().msg == "first"
        assert "queue full" in capsys.readouterr().err
