"""JSON logging for the API process.

Records carry their structured ``extra`` fields through to the output, and
every line names the request it belongs to. Client code logs through the
``taskboard.client`` and ``taskboard.notifications`` loggers and inherits
whatever layout the host process configured.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from .config import Settings
from .context import current_context, get_request_id

# Attributes every LogRecord has; anything else on a record came from ``extra``.
_STANDARD_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "request_id",
    "actor_id",
}

_TASKBOARD_LOGGERS = ("taskboard", "taskboard.client", "taskboard.notifications")
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class JsonLogFormatter(logging.Formatter):
    """Render a record as one JSON object per line."""

    def __init__(self, *, defaults: dict[str, Any] | None = None, datefmt: str | None = None) -> None:
        super().__init__(datefmt=datefmt)
        self._defaults = dict(defaults or {})

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            **self._defaults,
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None) or get_request_id(),
        }
        actor_id = getattr(record, "actor_id", None)
        if actor_id is not None:
            payload["actor_id"] = actor_id
        for key, value in vars(record).items():
            if key not in _STANDARD_RECORD_ATTRS:
                payload.setdefault(key, _jsonable(value))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class RequestContextFilter(logging.Filter):
    """Stamp records with the request id and actor bound to the current context."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = current_context()
        record.request_id = context.request_id
        record.actor_id = context.actor_id
        return True


def build_logging_config(settings: Settings) -> dict[str, Any]:
    """Return the ``dictConfig`` layout for ``settings``."""

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    routed = {"handlers": ["json"], "level": level, "propagate": False}

    loggers: dict[str, Any] = {name: dict(routed) for name in _SERVER_LOGGERS}
    loggers.update({name: {"level": level} for name in _TASKBOARD_LOGGERS})
    loggers["sqlalchemy.engine"] = {"level": logging.INFO if settings.db_echo else logging.WARNING}
    loggers[""] = {"handlers": ["json"], "level": level}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": JsonLogFormatter,
                "defaults": {"service": settings.project_name, "environment": settings.environment},
            }
        },
        "filters": {"request_context": {"()": RequestContextFilter}},
        "handlers": {
            "json": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "json",
                "filters": ["request_context"],
            }
        },
        "loggers": loggers,
    }


def configure_logging(settings: Settings) -> None:
    """Install the JSON layout and route warnings through logging."""

    logging.captureWarnings(True)
    logging.config.dictConfig(build_logging_config(settings))


__all__ = ["JsonLogFormatter", "RequestContextFilter", "build_logging_config", "configure_logging"]
