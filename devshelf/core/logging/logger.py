"""
DevShelf Logging Subsystem

Purpose
-------
One place that configures how DevShelf logs. Progress operations run as
asyncio tasks, so formatting and I/O happen on a background thread fed by a
bounded queue, and per-operation context (which user, which resource, which
activity) travels in a ContextVar instead of being threaded through every
call.

Output
------
- Console: JSON lines in production (or when LOG_JSON is set), colored
  text on a development terminal, plain text otherwise.
- File (LOG_TO_FILE): JSON lines in ``<LOGS_DIR>/devshelf.json.log``,
  rotated at UTC midnight with one day of history.

Context
-------
``LogContext(user_id=..., resource_id=..., activity=...)`` scopes context to
a block (``with`` or ``async with``); ``set_log_context`` merges fields into
the current task's context. ContextFilter copies the fields onto each record
on the producing side, so the values belong to the task that logged. A field
passed explicitly via ``extra=`` wins over the ambient context.

Dependencies
------------
- devshelf.core.config.config.Config
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Type

from devshelf.core.config.config import Config

CONTEXT_FIELDS = (
    "user_id",
    "resource_id",
    "activity",
    "correlation_id",
    "component",
    "operation",
)
MISSING = "N/A"

_log_context: ContextVar[Mapping[str, Any]] = ContextVar("devshelf_log_context", default={})

# Attributes every LogRecord has; anything else on a record came from extra=
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


# ============================================================================
# Settings
# ============================================================================


@dataclass(frozen=True)
class LoggerConfig:
    """Logging settings resolved from Config at setup time."""

    level: int = logging.INFO
    json_console: bool = False
    colors: bool = False
    to_file: bool = False
    logs_dir: Path = Path("logs")
    queue_size: int = 10_000

    TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-32s | %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
    FILE_NAME = "devshelf.json.log"

    @classmethod
    def from_config(cls, config: Type[Config] = Config) -> "LoggerConfig":
        production = str(config.ENVIRONMENT).lower() == "production"
        json_console = production if config.LOG_JSON is None else bool(config.LOG_JSON)
        return cls(
            level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
            json_console=json_console,
            colors=bool(config.LOG_COLORS) and not json_console and sys.stdout.isatty(),
            to_file=bool(config.LOG_TO_FILE),
            logs_dir=Path(config.LOGS_DIR),
        )


@dataclass(frozen=True)
class LoggingHealth:
    initialized: bool
    queue_size: int
    queue_max_size: int
    records_enqueued: int
    records_dropped: int


@dataclass
class _LoggingState:
    settings: Optional[LoggerConfig] = None
    log_queue: Optional["queue.Queue[logging.LogRecord]"] = None
    listener: Optional[QueueListener] = None
    handler: Optional[QueueHandler] = None
    enqueued: int = 0
    dropped: int = 0
    sinks: List[logging.Handler] = field(default_factory=list)


_state = _LoggingState()


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    """Copy the current log context onto the record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _log_context.get()
        for name in CONTEXT_FIELDS:
            if getattr(record, name, None) is None:
                setattr(record, name, context.get(name) or MISSING)
        if record.component == MISSING:
            record.component = record.name.split(".", 1)[0]
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record: core fields, known context, then extras."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, MISSING)
            if value != MISSING:
                data[name] = value

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and key not in CONTEXT_FIELDS and not key.startswith("_")
        }
        if extra:
            data["extra"] = extra
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Text formatter that tints the level name for terminals."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[90m",
        logging.INFO: "\033[94m",
        logging.WARNING: "\033[93m",
        logging.ERROR: "\033[91m",
        logging.CRITICAL: "\033[1;91m",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        tinted = logging.makeLogRecord(record.__dict__)
        tinted.levelname = f"{color}{record.levelname}\033[0m"
        return super().format(tinted)


# ============================================================================
# Setup / Shutdown
# ============================================================================


class _BoundedQueueHandler(QueueHandler):
    """Drops records instead of blocking an event loop when the queue is full."""

    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            _state.dropped += 1
            return
        _state.enqueued += 1


def _console_handler(settings: LoggerConfig) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if settings.json_console:
        handler.setFormatter(JSONFormatter())
    elif settings.colors:
        handler.setFormatter(ColoredFormatter(settings.TEXT_FORMAT, settings.DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(settings.TEXT_FORMAT, settings.DATE_FORMAT))
    return handler


def _file_handler(settings: LoggerConfig) -> logging.Handler:
    settings.logs_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        settings.logs_dir / settings.FILE_NAME,
        when="midnight",
        backupCount=1,
        encoding="utf-8",
        utc=True,
    )
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(settings: Optional[LoggerConfig] = None) -> None:
    """Install the queue-backed handlers on the root logger (idempotent)."""
    if _state.listener is not None:
        return

    settings = settings or LoggerConfig.from_config()
    sinks = [_console_handler(settings)]
    if settings.to_file:
        sinks.append(_file_handler(settings))
    for sink in sinks:
        sink.setLevel(settings.level)

    log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(settings.queue_size)
    handler = _BoundedQueueHandler(log_queue)
    handler.addFilter(ContextFilter())

    root = logging.getLogger()
    root.setLevel(settings.level)
    root.addHandler(handler)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    listener = QueueListener(log_queue, *sinks, respect_handler_level=True)
    listener.start()

    _state.settings = settings
    _state.log_queue = log_queue
    _state.handler = handler
    _state.listener = listener
    _state.sinks = sinks

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": Config.ENVIRONMENT,
            "log_level": logging.getLevelName(settings.level),
            "json_console": settings.json_console,
            "to_file": settings.to_file,
        },
    )


def shutdown_logging() -> None:
    """Flush queued records and detach the handlers."""
    if _state.listener is None:
        return

    _state.listener.stop()
    logging.getLogger().removeHandler(_state.handler)
    for sink in _state.sinks:
        sink.close()

    _state.listener = None
    _state.handler = None
    _state.log_queue = None
    _state.sinks = []


def get_logging_health() -> LoggingHealth:
    log_queue = _state.log_queue
    return LoggingHealth(
        initialized=_state.listener is not None,
        queue_size=log_queue.qsize() if log_queue is not None else 0,
        queue_max_size=log_queue.maxsize if log_queue is not None else 0,
        records_enqueued=_state.enqueued,
        records_dropped=_state.dropped,
    )


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


def _context_fields(
    user_id: Any, resource_id: Any, extra: Mapping[str, Any]
) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    if user_id is not None:
        fields["user_id"] = str(user_id)
    if resource_id is not None:
        fields["resource_id"] = str(resource_id)
    fields.update((key, value) for key, value in extra.items() if value is not None)
    return fields


class LogContext:
    """
    Scope log context to a block of one task.

    Nested contexts add to the outer one; leaving the block restores it. A
    short correlation id is generated when none is given so every record of
    one activity report can be grouped.

    Usage
    -----
        async with LogContext(user_id=user_id, activity="viewed", operation="track_activity"):
            ...
    """

    def __init__(
        self,
        user_id: Any = None,
        resource_id: Any = None,
        *,
        correlation_id: Optional[str] = None,
        **fields: Any,
    ) -> None:
        self.context: Dict[str, Any] = {
            "correlation_id": correlation_id or uuid.uuid4().hex[:8],
            **_context_fields(user_id, resource_id, fields),
        }
        self._token: Optional[Token[Mapping[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


def set_log_context(user_id: Any = None, resource_id: Any = None, **fields: Any) -> None:
    """Merge fields into the current task's log context."""
    _log_context.set({**_log_context.get(), **_context_fields(user_id, resource_id, fields)})


def get_log_context() -> Dict[str, Any]:
    return dict(_log_context.get())


def clear_log_context() -> None:
    _log_context.set({})


setup_logging()
