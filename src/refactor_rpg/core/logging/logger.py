"""
RefactorRPG Logging Subsystem

Purpose
-------
Provide a thread-safe logging subsystem that is the single source of truth for
RefactorRPG observability, offering:

- Structured JSON logs for aggregation and analysis.
- LogContext-based propagation of operation context via ContextVars.
- Correlation IDs for tracing one detection through classifier, gate,
  progression and quests.
- Non-blocking logging via a QueueHandler + QueueListener architecture, so
  host detection threads never wait on handler I/O.
- Bounded, health-aware log queue with graceful degradation on overload.
- Hybrid output:
  - Console handler (JSON in production, colored human text in dev).
  - Optional rotating file handler with ~24h retention for local backup.

Responsibilities
----------------
- Initialize and configure the global logging stack.
- Enrich all log records with contextual fields:
  - profile_id, source, operation
  - correlation_id, component
- Provide simple helper APIs:
  - get_logger()
  - LogContext (context manager)
  - set_log_context() / clear_log_context()
  - get_logging_health() for health inspection.

Design Decisions
----------------
- Setup is explicit (`setup_logging()`), never at import: the host editor owns
  the process and may already have configured the root logger.
- JSONFormatter is the canonical representation.
- Extra fields passed via `logger.info("msg", extra={...})` are merged into JSON.

Dependencies
------------
- refactor_rpg.core.config.config.Config (read lazily)
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import (
    QueueHandler,
    QueueListener,
    TimedRotatingFileHandler,
)
from pathlib import Path
from typing import Any, Dict, Optional


def _static_config():
    # Deferred: the config package itself logs through this module.
    from refactor_rpg.core.config.config import Config

    return Config


# ============================================================================
# Operation Context (ContextVars)
# ============================================================================

_log_context: ContextVar[Dict[str, Any]] = ContextVar(
    "refactor_rpg_log_context",
    default={},
)


# ============================================================================
# Config / Environment
# ============================================================================


@dataclass(frozen=True, slots=True)
class LoggerConfig:
    """Configuration for the logging subsystem."""

    CONSOLE_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(name)-40s | %(message)s"
    DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

    DAILY_BASENAME: str = "refactor_rpg.json.log"
    DAILY_BACKUP_COUNT: int = 1

    QUEUE_MAX_SIZE: int = 10_000

    @property
    def environment(self) -> str:
        return str(getattr(_static_config(), "ENVIRONMENT", "development")).lower()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def logs_dir(self) -> Path:
        return Path(_static_config().LOGS_DIR).resolve()

    @property
    def log_level(self) -> int:
        level_name = getattr(_static_config(), "LOG_LEVEL", "INFO")
        if not isinstance(level_name, str):
            level_name = "INFO"
        return getattr(logging, level_name.upper(), logging.INFO)

    @property
    def use_json(self) -> bool:
        json_flag = getattr(_static_config(), "LOG_JSON", None)
        if json_flag is None:
            return self.is_production
        return bool(json_flag)

    @property
    def use_colors(self) -> bool:
        if self.is_production or self.use_json:
            return False
        colors_flag = getattr(_static_config(), "LOG_COLORS", True)
        return bool(colors_flag) and sys.stdout.isatty()


LOGGER_CONFIG = LoggerConfig()


# ============================================================================
# Logging Metrics / Health
# ============================================================================


@dataclass(slots=True)
class LoggingMetrics:
    records_enqueued: int = 0
    records_dropped: int = 0
    listener_errors: int = 0


@dataclass(frozen=True, slots=True)
class LoggingHealth:
    initialized: bool
    queue_size: int
    queue_max_size: int
    records_enqueued: int
    records_dropped: int
    listener_errors: int


_logging_metrics: LoggingMetrics = LoggingMetrics()
_log_queue: Optional["queue.Queue[logging.LogRecord]"] = None


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context: Dict[str, Any] = _log_context.get({})

        record.profile_id = context.get("profile_id", "N/A")
        record.source = context.get("source", "N/A")
        record.correlation_id = context.get("correlation_id") or "N/A"
        record.component = context.get("component") or record.name.rsplit(".", 1)[-1]
        record.operation = context.get("operation", "N/A")

        return True


class ColoredFormatter(logging.Formatter):
    COLORS: Dict[str, str] = {
        "DEBUG": "\033[90m",
        "INFO": "\033[94m",
        "WARNING": "\033[93m",
        "ERROR": "\033[91m",
        "CRITICAL": "\033[91m\033[1m",
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        original = record.levelname
        prefix = self.COLORS.get(original, "")
        reset = self.COLORS["RESET"] if prefix else ""

        if prefix:
            record.levelname = f"{prefix}{original}{reset}"

        try:
            return super().format(record)
        finally:
            record.levelname = original


class JSONFormatter(logging.Formatter):
    STANDARD_ATTRS = {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
    }

    CONTEXT_ATTRS = {
        "profile_id",
        "source",
        "correlation_id",
        "component",
        "operation",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        created_dt = datetime.fromtimestamp(record.created, tz=timezone.utc)

        log_data: Dict[str, Any] = {
            "timestamp": created_dt.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for attr in self.CONTEXT_ATTRS:
            value = getattr(record, attr, None)
            if value not in (None, "N/A"):
                log_data[attr] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra: Dict[str, Any] = {
            key: val
            for key, val in record.__dict__.items()
            if key not in self.STANDARD_ATTRS
            and key not in self.CONTEXT_ATTRS
            and not key.startswith("_")
        }
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, ensure_ascii=False, default=str)


# ============================================================================
# Custom Queue Handler & Listener
# ============================================================================


class RefactorRPGQueueHandler(QueueHandler):
    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        _logging_metrics.records_enqueued += 1

        try:
            self.queue.put_nowait(record)
        except queue.Full:
            _logging_metrics.records_dropped += 1
            sys.stderr.write("RefactorRPG logging queue full; dropping log record.\n")


class RefactorRPGQueueListener(QueueListener):
    def handleError(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        _logging_metrics.listener_errors += 1
        sys.stderr.write("RefactorRPG logging handler error while processing record.\n")


# ============================================================================
# Global Setup
# ============================================================================

_queue_listener: Optional[QueueListener] = None
_INITIALIZED_FLAG = "_refactor_rpg_logging_initialized"


def _build_console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(LOGGER_CONFIG.log_level)

    if LOGGER_CONFIG.use_json:
        handler.setFormatter(JSONFormatter())
    elif LOGGER_CONFIG.use_colors:
        handler.setFormatter(
            ColoredFormatter(
                fmt=LOGGER_CONFIG.CONSOLE_FORMAT,
                datefmt=LOGGER_CONFIG.DATE_FORMAT,
            )
        )
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt=LOGGER_CONFIG.CONSOLE_FORMAT,
                datefmt=LOGGER_CONFIG.DATE_FORMAT,
            )
        )

    return handler


def _build_daily_file_handler() -> logging.Handler:
    LOGGER_CONFIG.logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = LOGGER_CONFIG.logs_dir / LOGGER_CONFIG.DAILY_BASENAME

    handler = TimedRotatingFileHandler(
        filename=str(log_file),
        when="midnight",
        interval=1,
        backupCount=LOGGER_CONFIG.DAILY_BACKUP_COUNT,
        encoding="utf-8",
        utc=True,
    )
    handler.setLevel(LOGGER_CONFIG.log_level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(to_file: bool = True) -> None:
    """Install the queue-backed handlers on the root logger (idempotent)."""
    global _queue_listener, _logging_metrics, _log_queue

    root = logging.getLogger()

    if getattr(root, _INITIALIZED_FLAG, False):
        return

    _logging_metrics = LoggingMetrics()

    root.setLevel(LOGGER_CONFIG.log_level)
    root.handlers.clear()

    handlers = [_build_console_handler()]
    if to_file:
        handlers.append(_build_daily_file_handler())

    _log_queue = queue.Queue(LOGGER_CONFIG.QUEUE_MAX_SIZE)

    _queue_listener = RefactorRPGQueueListener(
        _log_queue,
        *handlers,
        respect_handler_level=True,
    )
    _queue_listener.start()

    # Filter on the handler so records from every child logger are enriched.
    queue_handler = RefactorRPGQueueHandler(_log_queue)
    queue_handler.setLevel(LOGGER_CONFIG.log_level)
    queue_handler.addFilter(ContextFilter())

    root.addHandler(queue_handler)

    setattr(root, _INITIALIZED_FLAG, True)

    log = logging.getLogger(__name__)
    log.info(
        "Logging initialized",
        extra={
            "environment": LOGGER_CONFIG.environment,
            "log_level": logging.getLevelName(LOGGER_CONFIG.log_level),
            "json": LOGGER_CONFIG.use_json,
            "colors": LOGGER_CONFIG.use_colors,
            "file_output": to_file,
            "queue_max_size": LOGGER_CONFIG.QUEUE_MAX_SIZE,
        },
    )


def shutdown_logging() -> None:
    global _queue_listener, _log_queue

    root = logging.getLogger()

    if not getattr(root, _INITIALIZED_FLAG, False):
        return

    logging.getLogger(__name__).info("Shutting down logging subsystem.")

    if _queue_listener:
        _queue_listener.stop()
        # The listener owns the console and file handlers.
        for handler in _queue_listener.handlers:
            handler.flush()
            handler.close()
        _queue_listener = None

    for handler in list(root.handlers):
        handler.flush()
        handler.close()
        root.removeHandler(handler)

    setattr(root, _INITIALIZED_FLAG, False)
    _log_queue = None


def get_logging_health() -> LoggingHealth:
    initialized = bool(getattr(logging.getLogger(), _INITIALIZED_FLAG, False))

    queue_size = 0
    max_size = 0
    if _log_queue is not None:
        queue_size = _log_queue.qsize()
        max_size = _log_queue.maxsize

    return LoggingHealth(
        initialized=initialized,
        queue_size=queue_size,
        queue_max_size=max_size,
        records_enqueued=_logging_metrics.records_enqueued,
        records_dropped=_logging_metrics.records_dropped,
        listener_errors=_logging_metrics.listener_errors,
    )


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Bind profile/source/operation fields to every record emitted inside
    the `with` block on the current thread.
    """

    def __init__(
        self,
        profile_id: Optional[str] = None,
        source: Optional[str] = None,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        inherited = _log_context.get({})

        self.context: Dict[str, Any] = {
            **inherited,
            "correlation_id": correlation_id
            or inherited.get("correlation_id")
            or self._generate_correlation_id(),
            **extra,
        }
        for key, value in (
            ("profile_id", profile_id),
            ("source", source),
            ("component", component),
            ("operation", operation),
        ):
            if value is not None:
                self.context[key] = value

        self._token: Optional[Token[Dict[str, Any]]] = None

    @staticmethod
    def _generate_correlation_id() -> str:
        return str(uuid.uuid4())[:8]

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None


def get_log_context() -> Dict[str, Any]:
    return dict(_log_context.get({}))


def set_log_context(
    profile_id: Optional[str] = None,
    source: Optional[str] = None,
    component: Optional[str] = None,
    operation: Optional[str] = None,
    correlation_id: Optional[str] = None,
    **extra: Any,
) -> None:
    current = _log_context.get({}).copy()

    if profile_id is not None:
        current["profile_id"] = profile_id
    if source is not None:
        current["source"] = source
    if component is not None:
        current["component"] = component
    if operation is not None:
        current["operation"] = operation
    if correlation_id:
        current["correlation_id"] = correlation_id

    current.update(extra)
    _log_context.set(current)


def clear_log_context() -> None:
    _log_context.set({})
