from __future__ import annotations

import io
import json
import logging

from taskboard.app.core.config import Settings
from taskboard.app.core.context import (
    RequestContext,
    bind_actor,
    bind_request_id,
    current_context,
    reset_context,
)
from taskboard.app.core.logging import (
    JsonLogFormatter,
    RequestContextFilter,
    build_logging_config,
    configure_logging,
)


def test_configure_logging_outputs_json_with_request_id() -> None:
    settings = Settings(environment="test", log_level="INFO")
    configure_logging(settings)

    root_logger = logging.getLogger()
    handler = next(
        (h for h in root_logger.handlers if isinstance(h, logging.StreamHandler)),
        None,
    )
    assert handler is not None, "Expected JSON stream handler to be configured"

    buffer = io.StringIO()
    previous_stream = handler.setStream(buffer)

    token = bind_request_id("req-json-1")
    try:
        logger = logging.getLogger("taskboard.tests.logging")
        logger.info("structured log event", extra={"component": "unit-test"})
    finally:
        handler.flush()
        reset_context(token)
        handler.setStream(previous_stream)

    log_lines = buffer.getvalue().strip().splitlines()
    assert log_lines, "Expected structured log line to be captured"
    payload = json.loads(log_lines[-1])

    assert payload["message"] == "structured log event"
    assert payload["request_id"] == "req-json-1"
    assert payload["environment"] == "test"
    assert payload["level"] == "INFO"
    assert payload["component"] == "unit-test"
    assert payload["service"] == settings.project_name


def test_formatter_stringifies_unserialisable_extras() -> None:
    formatter = JsonLogFormatter(defaults={"service": "taskboard"})
    record = logging.LogRecord("taskboard.client", logging.WARNING, __file__, 1, "Query failed", None, None)
    record.key = ("tasks", 1)
    record.error = ValueError("boom")

    payload = json.loads(formatter.format(record))

    assert payload["service"] == "taskboard"
    assert payload["logger"] == "taskboard.client"
    assert payload["request_id"] == "-"
    assert payload["key"] == ["tasks", 1]
    assert payload["error"] == "boom"


def test_filter_stamps_bound_actor() -> None:
    formatter = JsonLogFormatter()
    context_filter = RequestContextFilter()
    record = logging.LogRecord("taskboard", logging.INFO, __file__, 1, "Task updated", None, None)

    token = bind_request_id("req-actor")
    try:
        bind_actor(17)
        assert current_context() == RequestContext(request_id="req-actor", actor_id=17)
        assert context_filter.filter(record) is True
    finally:
        reset_context(token)

    payload = json.loads(formatter.format(record))
    assert payload["request_id"] == "req-actor"
    assert payload["actor_id"] == 17
    assert current_context() == RequestContext()


def test_logging_config_routes_server_loggers() -> None:
    config = build_logging_config(Settings(environment="test", log_level="warning", db_echo=True))

    assert config["loggers"]["uvicorn.access"] == {"handlers": ["json"], "level": logging.WARNING, "propagate": False}
    assert config["loggers"]["taskboard.client"] == {"level": logging.WARNING}
    assert config["loggers"]["sqlalchemy.engine"] == {"level": logging.INFO}
    assert config["loggers"][""]["handlers"] == ["json"]
    assert config["formatters"]["json"]["defaults"] == {"service": "Taskboard", "environment": "test"}
