"""
Launcher Sentinel Logging

Purpose
-------
One logging setup for the bot process. Two kinds of work share the event
loop: the status poller and the message handlers. Every record is tagged with
the context it came from so the two streams can be told apart.

- ``LogContext`` binds user/guild/channel/command/component to a ContextVar;
  ``ContextFilter`` copies it onto each record.
- Records go through a bounded queue and are written by a listener thread, so
  a slow console or disk never stalls the gateway heartbeat.
- Console output is JSON when ``LOG_JSON`` is on (default: production only),
  otherwise plain or colored text. A daily rotating JSON file is always kept.

Usage
-----
>>> logger = get_logger(__name__)
>>> with LogContext(component="status_poller"):
...     logger.info("Launcher is up", extra={"status_code": 200})
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from src.core.config.config import Config

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(component)-14s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "sentinel_daily.json.log"
QUEUE_MAX_SIZE = 10_000

# Loggers that are chatty at INFO during gateway reconnects and HTTP polling.
QUIET_LOGGERS = ("discord", "aiohttp", "asyncio")

CONTEXT_FIELDS = ("user_id", "guild_id", "channel_id", "command", "correlation_id", "component")

_log_context: ContextVar[Dict[str, Any]] = ContextVar("sentinel_log_context", default={})
_listener: Optional[QueueListener] = None


def _level() -> int:
    return getattr(logging, str(Config.LOG_LEVEL).upper(), logging.INFO)


def _json_output() -> bool:
    if Config.LOG_JSON is None:
        return Config.is_production()
    return bool(Config.LOG_JSON)


# ============================================================================
# Record enrichment
# ============================================================================


class ContextFilter(logging.Filter):
    """Copy the active ``LogContext`` onto the record; fill gaps with ``N/A``."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _log_context.get()
        for name in CONTEXT_FIELDS:
            setattr(record, name, context.get(name) or "N/A")

        if record.component == "N/A":
            # src.core.status.poller -> poller
            record.component = record.name.rsplit(".", 1)[-1]
        return True


class ColoredFormatter(logging.Formatter):
    LEVEL_COLORS = {
        logging.DEBUG: "\033[90m",
        logging.INFO: "\033[94m",
        logging.WARNING: "\033[93m",
        logging.ERROR: "\033[91m",
        logging.CRITICAL: "\033[1;91m",
    }
    RESET = "\033[0m"

    def formatMessage(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        line = super().formatMessage(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        return f"{color}{line}{self.RESET}" if color else line


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Context fields sit at the top level (omitted when unset). Anything passed
    through ``extra=`` is nested under ``"extra"``.
    """

    RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, "N/A")
            if value != "N/A":
                payload[name] = value

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in self.RESERVED and key not in CONTEXT_FIELDS and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class DroppingQueueHandler(QueueHandler):
    """Never block the event loop: a full queue drops the record."""

    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            sys.stderr.write("sentinel: log queue full, record dropped\n")


# ============================================================================
# Setup / teardown
# ============================================================================


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if _json_output():
        handler.setFormatter(JSONFormatter())
    elif sys.stdout.isatty():
        handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, DATE_FORMAT))
    return handler


def _file_handler() -> logging.Handler:
    logs_dir = Path(Config.LOGS_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)

    handler = TimedRotatingFileHandler(
        logs_dir / LOG_FILE_NAME,
        when="midnight",
        backupCount=1,
        encoding="utf-8",
        utc=True,
    )
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging() -> None:
    """Install the queue handler on the root logger. Safe to call twice."""
    global _listener

    if _listener is not None:
        return

    root = logging.getLogger()
    root.handlers.clear()
    root.filters.clear()
    root.setLevel(_level())

    log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(QUEUE_MAX_SIZE)
    _listener = QueueListener(log_queue, _console_handler(), _file_handler())
    _listener.start()

    queue_handler = DroppingQueueHandler(log_queue)
    queue_handler.addFilter(ContextFilter())
    root.addHandler(queue_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": Config.ENVIRONMENT,
            "level": logging.getLevelName(_level()),
            "json": _json_output(),
        },
    )


def shutdown_logging() -> None:
    """Flush queued records and detach the queue handler."""
    global _listener

    if _listener is None:
        return

    _listener.stop()
    _listener = None

    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, DroppingQueueHandler):
            root.removeHandler(handler)
            handler.close()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Tag every record emitted inside the block with Discord or component context.

    Usable with ``with`` and ``async with``. The previous context is restored
    on exit, so nested blocks and concurrent tasks do not leak into each other.
    """

    def __init__(
        self,
        user_id: Optional[int] = None,
        guild_id: Optional[int] = None,
        channel_id: Optional[int] = None,
        command: Optional[str] = None,
        component: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.context: Dict[str, Any] = {
            "user_id": None if user_id is None else str(user_id),
            "guild_id": None if guild_id is None else str(guild_id),
            "channel_id": None if channel_id is None else str(channel_id),
            "command": command,
            "component": component,
            "correlation_id": correlation_id or uuid.uuid4().hex[:8],
        }
        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set(self.context)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, *exc_info: Any) -> None:
        self.__exit__(*exc_info)


setup_logging()
