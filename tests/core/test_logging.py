"""Tests for logging setup and the correlation ID processor."""

import logging

import pytest
import structlog
from asgi_correlation_id.context import correlation_id

from storefront.core.logging import QUIET_LOGGERS, add_correlation_id, configure_logging

pytestmark = pytest.mark.unit


def test_add_correlation_id_from_context():
    token = correlation_id.set("req-123")
    try:
        event = add_correlation_id(None, "info", {"event": "x"})
    finally:
        correlation_id.reset(token)

    assert event["correlation_id"] == "req-123"


def test_add_correlation_id_outside_request():
    assert "correlation_id" not in add_correlation_id(None, "info", {"event": "x"})


def test_configure_logging_routes_everything_through_one_handler():
    configure_logging(debug=False)

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
    assert root.level == logging.INFO
    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING
