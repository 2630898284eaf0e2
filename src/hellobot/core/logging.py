"""Process logging setup and request correlation."""

from __future__ import annotations

import logging
import logging.config
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

ALLOWED_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
_REQUEST_ID: ContextVar[str | None] = ContextVar("hellobot_request_id", default=None)


def get_request_id() -> str | None:
    """Return the active request correlation identifier, if present."""
    return _REQUEST_ID.get()


@contextmanager
def bind_request_id(request_id: str) -> Iterator[str]:
    """Bind a correlation id for the duration of one request.

    Tasks created inside the block copy the current context, so background
    work scheduled by a request keeps logging under the same id.
    """
    token = _REQUEST_ID.set(request_id)
    try:
        yield request_id
    finally:
        _REQUEST_ID.reset(token)


class RequestIdFilter(logging.Filter):
    """Inject request correlation identifier into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = get_request_id()
        record.request_id = request_id if request_id else "-"
        return True


def configure_logging(level: str) -> None:
    """Configure process-wide logging for the relay service and its tools."""
    normalized_level = level.strip().upper()
    if normalized_level not in ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(ALLOWED_LOG_LEVELS))
        raise ValueError(f"Invalid LOG_LEVEL '{level}'. Expected one of: {allowed}")

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": (
                        "%(asctime)s %(levelname)s %(name)s "
                        "[request_id=%(request_id)s]: %(message)s"
                    ),
                }
            },
            "filters": {
                "request_id": {"()": RequestIdFilter},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                    "filters": ["request_id"],
                }
            },
            "root": {
                "level": normalized_level,
                "handlers": ["console"],
            },
            # httpx logs every request URL at INFO, and those carry the bot token.
            "loggers": {
                "httpx": {"level": "WARNING"},
                "httpcore": {"level": "WARNING"},
            },
        }
    )
