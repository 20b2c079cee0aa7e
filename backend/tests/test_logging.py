"""
Tests for structured logging helpers.
"""

import json
import logging

from shared.config.logging import (
    DevelopmentFormatter,
    StructuredFormatter,
    get_logger,
    mask_email,
    mask_phone,
)


def _record(**context) -> logging.LogRecord:
    record = logging.LogRecord("rest_api.orders", logging.INFO, __file__, 10, "Order assigned", (), None)
    record.extra_data = context or None
    record.request_id = "abcdef123456"
    return record


def test_mask_email():
    assert mask_email("barista@example.com") == "ba***@example.com"
    assert mask_email("a@example.com") == "a***@example.com"
    assert mask_email("not-an-email") == "***@invalid"
    assert mask_email(None) == "<no-email>"


def test_mask_phone():
    assert mask_phone("+1 (555) 010-4477") == "***4477"
    assert mask_phone("123") == "***"
    assert mask_phone("") == "<no-phone>"


def test_json_formatter_includes_context_and_request_id():
    line = StructuredFormatter().format(_record(order_id=12, user_id=3))

    entry = json.loads(line)
    assert entry["message"] == "Order assigned"
    assert entry["service"] == "popup-queue"
    assert entry["request_id"] == "abcdef123456"
    assert entry["data"] == {"order_id": 12, "user_id": 3}


def test_development_formatter():
    line = DevelopmentFormatter().format(_record(order_id=12))
    assert "rest_api.orders: Order assigned" in line
    assert "[abcdef12]" in line
    assert "order_id=12" in line


def test_keyword_context_reaches_handlers(caplog):
    logger = get_logger("rest_api.test")

    with caplog.at_level(logging.INFO, logger="rest_api.test"):
        logger.info("Menu reordered", listed=3)

    assert caplog.records[-1].extra_data == {"listed": 3}
