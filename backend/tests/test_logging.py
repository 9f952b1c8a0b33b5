"""Tests for structured logging configuration."""

import json
import logging
from uuid import uuid4

from issue_reporter.core.logging import (
    RequestContextFilter,
    describe_principal,
    principal_ctx,
    request_id_ctx,
    setup_logging,
    user_agent_ctx,
)


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_request_context_filter_injects_fields():
    record = _record()
    user_id = uuid4()

    token_id = request_id_ctx.set("req-123")
    token_agent = user_agent_ctx.set("pytest-agent")
    token_principal = principal_ctx.set(describe_principal("citizen", user_id))
    try:
        context_filter = RequestContextFilter()
        assert context_filter.filter(record) is True
        assert record.request_id == "req-123"
        assert record.user_agent == "pytest-agent"
        assert record.principal == f"citizen:{user_id}"
    finally:
        request_id_ctx.reset(token_id)
        user_agent_ctx.reset(token_agent)
        principal_ctx.reset(token_principal)


def test_principal_defaults_to_anonymous():
    record = _record()
    RequestContextFilter().filter(record)

    assert record.principal == "anonymous"
    assert describe_principal("anonymous") == "anonymous"


def test_setup_logging_attaches_json_handler():
    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level

    try:
        setup_logging()
        assert root_logger.handlers, "expected a handler after setup"
        handler = root_logger.handlers[0]
        filters = handler.filters
        assert any(isinstance(filter_, RequestContextFilter) for filter_ in filters)
        # Ensure formatter renders request fields even when unset.
        record = _record("message")
        for filter_ in filters:
            filter_.filter(record)
        payload = json.loads(handler.format(record))
        assert payload["message"] == "message"
        assert payload["request_id"] == "-"
        assert payload["principal"] == "anonymous"
        assert "user_agent" in payload
    finally:
        root_logger.handlers = original_handlers
        root_logger.setLevel(original_level)
