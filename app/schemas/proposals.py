"""Proposal action request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.core.enums import ProposalAction


class ProposalActionRequest(BaseModel):
    action: ProposalAction
    debtor_id: str = Field(min_length=1, max_length=64)
    debtor_name: str = Field(min_length=1, max_length=255)
    company_id: str | None = Field(default=None, max_length=64)
    corporate_client_id: str | None = Field(default=None, max_length=64)
    rejection_reason: str | None = Field(default=None, max_length=2000)


class ProposalActionResponse(BaseModel):
    success: bool = True
    action: str
    message: str
    proposal_id: str
    conversation_id: str | None = None
    agreement_id: str | None = None
