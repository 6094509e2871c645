"""Typed knowledge records.

Corporate knowledge is always present (falling back to documented defaults);
debtor knowledge is ``DebtorKnowledge | None`` so that "nothing known about this
debtor" is an explicit state for downstream code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from app.core.enums import (
    CommunicationStyle,
    ContactMethod,
    NegotiationTendency,
    PaymentPattern,
    PaymentStatus,
    RiskLevel,
)

DEFAULT_MAX_DISCOUNT_PERCENT = 15
DEFAULT_MAX_TERM_MONTHS = 12
DEFAULT_CONVERSATION_LENGTH = 15
DEFAULT_DISCOUNT_REQUESTED = 20
DEFAULT_TIME_REQUESTED = 18
DEFAULT_CORPORATE_NAME = "Cliente Corporativo"


def _int_or_default(value: Any, default: int) -> int:
    # 0 is a valid cap; only a missing value falls back.
    return default if value is None else int(value)


@dataclass(frozen=True)
class EscalationThresholds:
    conversation_length: int = DEFAULT_CONVERSATION_LENGTH
    discount_requested: int = DEFAULT_DISCOUNT_REQUESTED
    time_requested: int = DEFAULT_TIME_REQUESTED

    @classmethod
    def from_mapping(cls, raw: dict[str, Any] | None) -> "EscalationThresholds":
        """Merge a partial policy map (camelCase or snake_case keys) over the defaults."""
        raw = raw or {}

        def pick(snake: str, camel: str, default: int) -> int:
            value = raw.get(snake, raw.get(camel))
            return int(value) if value else default

        return cls(
            conversation_length=pick("conversation_length", "conversationLength", DEFAULT_CONVERSATION_LENGTH),
            discount_requested=pick("discount_requested", "discountRequested", DEFAULT_DISCOUNT_REQUESTED),
            time_requested=pick("time_requested", "timeRequested", DEFAULT_TIME_REQUESTED),
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "conversation_length": self.conversation_length,
            "discount_requested": self.discount_requested,
            "time_requested": self.time_requested,
        }


@dataclass(frozen=True)
class NegotiationLimits:
    max_discount_percent: int = DEFAULT_MAX_DISCOUNT_PERCENT
    max_term_months: int = DEFAULT_MAX_TERM_MONTHS
    escalation_thresholds: EscalationThresholds = field(default_factory=EscalationThresholds)

    @classmethod
    def from_ai_config(cls, ai_config: dict[str, Any] | None) -> "NegotiationLimits":
        ai_config = ai_config or {}
        return cls(
            max_discount_percent=_int_or_default(ai_config.get("max_negotiation_discount"), DEFAULT_MAX_DISCOUNT_PERCENT),
            max_term_months=_int_or_default(ai_config.get("max_negotiation_term"), DEFAULT_MAX_TERM_MONTHS),
            escalation_thresholds=EscalationThresholds.from_mapping(ai_config.get("escalation_thresholds")),
        )

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> "NegotiationLimits":
        raw = raw or {}
        return cls(
            max_discount_percent=_int_or_default(raw.get("max_discount_percent"), DEFAULT_MAX_DISCOUNT_PERCENT),
            max_term_months=_int_or_default(raw.get("max_term_months"), DEFAULT_MAX_TERM_MONTHS),
            escalation_thresholds=EscalationThresholds.from_mapping(raw.get("escalation_thresholds")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_discount_percent": self.max_discount_percent,
            "max_term_months": self.max_term_months,
            "escalation_thresholds": self.escalation_thresholds.to_dict(),
        }


@dataclass(frozen=True)
class CorporateProfile:
    id: str | None
    name: str
    rut: str
    industry: str
    category: str | None = None
    description: str | None = None
    website: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    address: str | None = None


@dataclass(frozen=True)
class PolicyRecord:
    id: str
    title: str
    content: str
    policy_type: str


@dataclass(frozen=True)
class CustomResponseRecord:
    id: str
    trigger: str
    response: str


@dataclass(frozen=True)
class AIConfiguration:
    auto_respond: bool = True
    working_hours: dict[str, str] = field(default_factory=lambda: {"start": "09:00", "end": "18:00"})


@dataclass(frozen=True)
class CorporateSource:
    """Raw corporate rows as read from the store, before merging."""

    profile: CorporateProfile
    ai_config: dict[str, Any] | None
    policies: tuple[PolicyRecord, ...]
    custom_responses: tuple[CustomResponseRecord, ...]


@dataclass(frozen=True)
class CorporateKnowledge:
    profile: CorporateProfile
    negotiation_limits: NegotiationLimits
    ai_configuration: AIConfiguration
    policies: tuple[PolicyRecord, ...] = ()
    custom_responses: tuple[CustomResponseRecord, ...] = ()
    is_default: bool = False
    last_updated: datetime | None = None


@dataclass(frozen=True)
class PersonalInfo:
    id: str
    name: str | None
    rut: str | None
    email: str | None
    phone: str | None
    customer_since: datetime | None


@dataclass(frozen=True)
class DebtInfo:
    total_debt: float
    original_amount: float
    due_date: date | None
    days_overdue: int
    debt_type: str | None
    status: str


@dataclass(frozen=True)
class CorporateContext:
    corporate_client_id: str | None
    corporate_client_name: str | None
    corporate_client_rut: str | None


@dataclass(frozen=True)
class NegotiationRecord:
    id: str
    status: str
    summary: str | None
    created_at: datetime | None
    messages: tuple[str, ...] = ()


@dataclass(frozen=True)
class PaymentRecord:
    id: str
    amount: float
    status: PaymentStatus
    created_at: datetime | None


@dataclass(frozen=True)
class DebtorSource:
    """Raw debtor rows as read from the store, before derivation."""

    personal_info: PersonalInfo
    debt_info: DebtInfo
    corporate_context: CorporateContext
    negotiation_history: tuple[NegotiationRecord, ...]
    payment_history: tuple[PaymentRecord, ...]


@dataclass(frozen=True)
class BehaviorProfile:
    negotiation_tendency: NegotiationTendency = NegotiationTendency.NEUTRAL
    payment_pattern: PaymentPattern = PaymentPattern.IRREGULAR
    preferred_terms: str = "standard"
    communication_frequency: str = "normal"


@dataclass(frozen=True)
class PersonalizationData:
    preferred_contact_method: ContactMethod = ContactMethod.EMAIL
    communication_style: CommunicationStyle = CommunicationStyle.PROFESSIONAL
    risk_level: RiskLevel = RiskLevel.MEDIUM


@dataclass(frozen=True)
class DebtorKnowledge:
    personal_info: PersonalInfo
    debt_info: DebtInfo
    corporate_context: CorporateContext
    negotiation_history: tuple[NegotiationRecord, ...]
    payment_history: tuple[PaymentRecord, ...]
    behavior_profile: BehaviorProfile
    personalization: PersonalizationData

    @property
    def name(self) -> str | None:
        return self.personal_info.name

    def summary(self) -> dict[str, Any]:
        """Compact form stored in message metadata."""
        return {
            "debtor_id": self.personal_info.id,
            "name": self.personal_info.name,
            "risk_level": self.personalization.risk_level.value,
            "communication_style": self.personalization.communication_style.value,
            "negotiation_tendency": self.behavior_profile.negotiation_tendency.value,
            "payment_pattern": self.behavior_profile.payment_pattern.value,
        }
