"""Structured logging helpers for conversation-scoped events."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class LogContext:
    """Normalized context fields expected in structured logs."""

    conversation_id: str | None = None
    company_id: str | None = None
    debtor_id: str | None = None
    corporate_client_id: str | None = None
    trace_id: str | None = None


def build_log_event(event: str, context: LogContext, **fields: Any) -> dict[str, Any]:
    """Build a normalized structured log payload."""
    payload: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event": event,
        "conversation_id": context.conversation_id,
        "company_id": context.company_id,
        "debtor_id": context.debtor_id,
        "corporate_client_id": context.corporate_client_id,
        "trace_id": context.trace_id,
    }
    payload.update(fields)
    return payload
