from __future__ import annotations

import json
import logging

from app.core.logging import LogContext, build_log_event
from app.core.logging_config import JsonFormatter


def test_build_log_event_normalizes_context_fields():
    payload = build_log_event(
        "negotiation.turn.escalated",
        LogContext(conversation_id="c-1", company_id="company-1"),
        reason="user_requested_human",
    )

    assert payload["event"] == "negotiation.turn.escalated"
    assert payload["conversation_id"] == "c-1"
    assert payload["debtor_id"] is None
    assert payload["reason"] == "user_requested_human"
    assert "timestamp" in payload


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "store.operation_failed", (), None)
    record.event = "store.operation_failed"
    record.operation = "append_message"

    line = json.loads(JsonFormatter().format(record))

    assert line["level"] == "INFO"
    assert line["message"] == "store.operation_failed"
    assert line["operation"] == "append_message"
    assert "exception" not in line
