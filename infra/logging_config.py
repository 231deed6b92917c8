"""Centralized logging configuration.

The toolkit supports both human-friendly text logs and structured JSON logs.
``setup_logging`` is defensive: it only installs a root handler when the host
application has not configured one already (unless explicitly overridden).

Per-request fields (HTTP method, path, route context) live in a ContextVar that
the Flask extension binds at the start of every request; JSON logs merge them
into each record.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from collections.abc import Mapping
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from infra.config import get_settings
from version import TOOLKIT_NAME, TOOLKIT_VERSION

request_ctx: ContextVar[dict[str, Any] | None] = ContextVar("toolkit_request_ctx", default=None)

_STANDARD_RECORD_ATTRS = frozenset(
    {
        "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
        "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs",
        "relativeCreated", "thread", "threadName", "processName", "process", "taskName",
    }
)


def set_request_context(**kwargs: Any) -> None:
    """Set context values that will be included in all subsequent log entries."""
    current = dict(request_ctx.get() or {})
    current.update(kwargs)
    request_ctx.set(current)


def clear_request_context() -> None:
    """Clear the request context (typically at the start of a new request)."""
    request_ctx.set({})


def get_request_context() -> dict[str, Any]:
    """Get a copy of the current request context."""
    ctx = request_ctx.get()
    return dict(ctx) if ctx else {}


def _utc_iso8601() -> str:
    # Example: 2026-01-24T18:03:12.123Z
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonFormatter(logging.Formatter):
    """Single-line JSON formatter.

    Message text is escaped through ``json.dumps``; values that are not JSON
    serializable are rendered with ``str``.
    """

    def __init__(self, *, extra_fields: Mapping[str, Any] | None = None) -> None:
        super().__init__()
        self._extra_fields = {"toolkit": TOOLKIT_NAME, "toolkit_version": TOOLKIT_VERSION}
        self._extra_fields.update(extra_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "timestamp": _utc_iso8601(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "func": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_ATTRS and key not in base:
                base[key] = value

        for key, value in get_request_context().items():
            base.setdefault(key, value)

        for key, value in self._extra_fields.items():
            base.setdefault(key, value)

        if record.exc_info:
            base["exception"] = self.formatException(record.exc_info)

        return json.dumps(base, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-friendly logs with UTC timestamps."""

    converter = time.gmtime

    def __init__(self) -> None:
        super().__init__("%(asctime)sZ | %(levelname)s | %(name)s | %(message)s")


class StructuredLogger:
    """Event-style logger with automatic request-context injection.

    Usage:
        logger = StructuredLogger(__name__)
        logger.error("http_exception", status=404, exception="NotFoundError")

    Keyword fields travel as ``extra`` so ``JsonFormatter`` renders them as
    top-level keys; text logs append them as ``key=value`` pairs.
    """

    def __init__(self, name: str) -> None:
        self._logger = logging.getLogger(name)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _log(self, level: int, event: str, exc_info: Any = None, **fields: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        extra = {"event": event, **fields}
        suffix = " ".join(f"{key}={value}" for key, value in fields.items())
        message = f"{event} {suffix}" if suffix else event
        self._logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, event: str, **fields: Any) -> None:
        self._log(logging.DEBUG, event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self._log(logging.INFO, event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._log(logging.WARNING, event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self._log(logging.ERROR, event, **fields)

    def exception(self, event: str, exc: BaseException, **fields: Any) -> None:
        """Log at ERROR with the traceback of ``exc`` attached."""
        self._log(logging.ERROR, event, exc_info=exc, **fields)


def setup_logging(
    *,
    level: str | None = None,
    json_logs: bool | None = None,
    override_root_handlers: bool | None = None,
    extra_fields: Mapping[str, Any] | None = None,
) -> logging.Handler | None:
    """
    Central logging setup.

    Env vars (through ``infra.config``):
      - TOOLKIT_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default INFO)
      - TOOLKIT_LOG_JSON:  1/0 (default 0)
      - TOOLKIT_LOG_OVERRIDE: 1/0 (default 0)
         If 1, replaces any pre-configured root handlers.
         If 0, only configures logging if root has no handlers.

    Returns the installed handler, or None when an existing configuration was
    left untouched.
    """
    config = get_settings().logging

    resolved_level = (level or config.level).upper()
    use_json = json_logs if json_logs is not None else config.json_logs
    override = override_root_handlers if override_root_handlers is not None else config.override_root_handlers

    root = logging.getLogger()
    root.setLevel(getattr(logging, resolved_level, logging.INFO))

    if root.handlers and not override:
        return None

    handler = logging.StreamHandler(sys.stdout)
    if use_json:
        handler.setFormatter(JsonFormatter(extra_fields=extra_fields))
    else:
        handler.setFormatter(TextFormatter())

    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    return handler


__all__ = [
    "JsonFormatter",
    "StructuredLogger",
    "TextFormatter",
    "clear_request_context",
    "get_request_context",
    "set_request_context",
    "setup_logging",
]
