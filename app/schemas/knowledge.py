"""Corporate policy and payment write schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import PaymentStatus


class AIConfigUpdateRequest(BaseModel):
    max_negotiation_discount: int | None = Field(default=None, ge=0, le=100)
    max_negotiation_term: int | None = Field(default=None, ge=1, le=120)
    escalation_thresholds: dict[str, int] | None = None
    auto_respond: bool | None = None
    working_hours: dict[str, str] | None = None


class AIConfigResponse(BaseModel):
    max_negotiation_discount: int | None = None
    max_negotiation_term: int | None = None
    escalation_thresholds: dict[str, Any] = Field(default_factory=dict)
    auto_respond: bool = True
    working_hours: dict[str, str] = Field(default_factory=dict)


class PolicyCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1, max_length=8000)
    policy_type: str = Field(default="general", min_length=1, max_length=64)


class CustomResponseCreateRequest(BaseModel):
    trigger: str = Field(min_length=1, max_length=255)
    response: str = Field(min_length=1, max_length=8000)


class ActiveToggleRequest(BaseModel):
    is_active: bool


class PolicyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    policy_type: str


class CustomResponseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    trigger: str
    response: str


class PaymentCreateRequest(BaseModel):
    amount: float = Field(gt=0)
    status: PaymentStatus


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    amount: float
    status: PaymentStatus
    created_at: datetime | None = None
