"""Conversation and message schemas for API contracts."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import ConversationStatus, SenderType


class MessageCreateRequest(BaseModel):
    content: str = Field(min_length=1, max_length=8000)


class HumanMessageRequest(BaseModel):
    content: str = Field(min_length=1, max_length=8000)
    agent_id: str | None = Field(default=None, max_length=64)


class OutcomeRequest(BaseModel):
    outcome: Literal["agreed", "rejected", "abandoned"]
    note: str | None = Field(default=None, max_length=2000)


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    conversation_id: str
    sequence: int
    sender_type: SenderType
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class ConversationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    proposal_id: str
    debtor_id: str
    company_id: str
    corporate_client_id: str | None = None
    status: ConversationStatus
    ai_enabled: bool
    message_count: int
    summary: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    closed_at: datetime | None = None


class EscalationResponse(BaseModel):
    should_escalate: bool
    reason: str | None = None
    priority: str | None = None


class TurnResponse(BaseModel):
    conversation: ConversationResponse
    inbound: MessageResponse
    reply: MessageResponse | None = None
    escalated: bool = False
    escalation: EscalationResponse | None = None
