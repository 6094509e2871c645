"""Immutable snapshots handed out by the store.

ORM rows never leave a session; callers receive these records instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from app.core.enums import AnalyticsOutcome, ConversationStatus, ProposalStatus, SenderType


@dataclass(frozen=True)
class ProposalSnapshot:
    id: str
    company_id: str
    company_name: str
    total_amount: float
    installments: int
    installment_amount: float
    status: ProposalStatus
    debtor_id: str | None = None
    debt_id: str | None = None
    corporate_client_id: str | None = None
    due_date: date | None = None

    def to_context(self) -> dict[str, Any]:
        """JSON-safe form embedded in a conversation's negotiation context."""
        return {
            "id": self.id,
            "company_id": self.company_id,
            "company_name": self.company_name,
            "total_amount": self.total_amount,
            "installments": self.installments,
            "installment_amount": self.installment_amount,
            "status": self.status.value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
        }


@dataclass(frozen=True)
class ConversationSnapshot:
    id: str
    proposal_id: str
    debtor_id: str
    company_id: str
    corporate_client_id: str | None
    status: ConversationStatus
    ai_enabled: bool
    message_count: int
    negotiation_context: dict[str, Any] = field(default_factory=dict)
    summary: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    closed_at: datetime | None = None


@dataclass(frozen=True)
class MessageSnapshot:
    id: str
    conversation_id: str
    sequence: int
    sender_type: SenderType
    content: str
    metadata: dict[str, Any]
    created_at: datetime


@dataclass(frozen=True)
class AnalyticsEventRecord:
    id: str
    company_id: str | None
    proposal_id: str | None
    conversation_id: str | None
    event_type: str
    outcome: AnalyticsOutcome | None
    conversation_duration_minutes: float | None
    ai_messages: int
    metadata: dict[str, Any]
    created_at: datetime
