"""Logging setup for complaintdesk.

Everything goes through the standard ``logging`` module configured with
``dictConfig``. Three output styles are selectable through
``settings.log_format``: plain text, text with rate limit context appended,
and one JSON object per line for log shippers.
"""

import json
import logging
import logging.config
import sys
import traceback
from datetime import datetime
from typing import Any, Dict, Optional

from complaintdesk.app.core.config import settings

# Fields callers attach with ``extra=`` that are promoted to top-level keys
CONTEXT_FIELDS = (
    "request_id",
    "user_id",
    "operation",     # read, write, bulk, ...
    "limiter_key",
    "retry_after",   # seconds
)

# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON object.

    Context fields that are set become top-level keys; any other extra
    attribute is nested under ``"extra"``.
    """

    def __init__(self, datefmt: Optional[str] = None):
        super().__init__(datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()

        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).astimezone().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.message,
            "source": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and key not in CONTEXT_FIELDS
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info and record.exc_info[0] is not None:
            payload["exception"] = traceback.format_exception(*record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


class ContextFilter(logging.Filter):
    """Default every context field to None so %-style formats never fail."""

    def filter(self, record: logging.LogRecord) -> bool:
        for field in CONTEXT_FIELDS:
            if not hasattr(record, field):
                setattr(record, field, None)
        return True


_FORMATTERS = {
    "standard": {
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    },
    "structured": {
        "format": (
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            " - operation=%(operation)s limiter_key=%(limiter_key)s"
            " retry_after=%(retry_after)s"
        ),
    },
    "json": {
        "()": "complaintdesk.app.core.logging.JSONFormatter",
    },
}


def _stream_handler(stream: Any, level: str, formatter: str) -> Dict[str, Any]:
    return {
        "class": "logging.StreamHandler",
        "level": level,
        "formatter": formatter,
        "stream": stream,
        "filters": ["context"],
    }


def get_logging_config() -> Dict[str, Any]:
    """Build the dictConfig mapping for the current settings.

    Unknown ``log_format`` values fall back to plain text.
    """
    level = settings.log_level.upper()
    formatter = {"json": "json", "structured": "structured"}.get(
        settings.log_format.lower(), "standard"
    )

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {name: dict(options) for name, options in _FORMATTERS.items()},
        "filters": {
            "context": {"()": "complaintdesk.app.core.logging.ContextFilter"},
        },
        "handlers": {
            "console": _stream_handler(sys.stdout, level, formatter),
            "error_console": _stream_handler(sys.stderr, "ERROR", formatter),
        },
        "loggers": {
            "complaintdesk": {
                "level": level,
                "handlers": ["console", "error_console"],
                "propagate": False,
            },
        },
        "root": {"level": level, "handlers": ["console"]},
    }


def setup_logging() -> None:
    """Apply the logging configuration. Call once at application start."""
    logging.config.dictConfig(get_logging_config())

    # httpx logs every request at INFO
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str = "complaintdesk") -> logging.Logger:
    return logging.getLogger(name)


def get_log_context(
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
    operation: Optional[str] = None,
    limiter_key: Optional[str] = None,
    **extra
) -> Dict[str, Any]:
    """Collect non-None context values for a logging ``extra=`` argument.

    Example:
        >>> logger.warning(
        ...     "Rate limit exceeded",
        ...     extra=get_log_context(operation="write", limiter_key="write:create_template")
        ... )
    """
    context = {
        "request_id": request_id,
        "user_id": user_id,
        "operation": operation,
        "limiter_key": limiter_key,
        **extra,
    }
    return {key: value for key, value in context.items() if value is not None}
