"""Derived debtor classifications: behavior, contact preference, style and risk."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from app.core.enums import (
    CommunicationStyle,
    ContactMethod,
    ConversationStatus,
    NegotiationTendency,
    PaymentPattern,
    PaymentStatus,
    RiskLevel,
)
from app.knowledge.records import BehaviorProfile, NegotiationRecord, PaymentRecord, PersonalInfo

FORMAL_MARKERS = ("usted", "por favor", "agradecería", "atentamente")
INFORMAL_MARKERS = ("tú", "dale", "ok", "gracias")

COOPERATIVE_RATIO = 0.7
RESISTANT_RATIO = 0.3
REGULAR_RATIO = 0.8
DELINQUENT_RATIO = 0.3


def analyze_behavior(
    negotiations: Sequence[NegotiationRecord],
    payments: Sequence[PaymentRecord],
) -> BehaviorProfile:
    tendency = NegotiationTendency.NEUTRAL
    if negotiations:
        agreed = sum(1 for n in negotiations if n.status == ConversationStatus.AGREED.value)
        ratio = agreed / len(negotiations)
        if ratio > COOPERATIVE_RATIO:
            tendency = NegotiationTendency.COOPERATIVE
        elif ratio < RESISTANT_RATIO:
            tendency = NegotiationTendency.RESISTANT

    pattern = PaymentPattern.IRREGULAR
    if payments:
        on_time = sum(1 for p in payments if p.status == PaymentStatus.ON_TIME)
        ratio = on_time / len(payments)
        if ratio > REGULAR_RATIO:
            pattern = PaymentPattern.REGULAR
        elif ratio < DELINQUENT_RATIO:
            pattern = PaymentPattern.DELINQUENT

    return BehaviorProfile(negotiation_tendency=tendency, payment_pattern=pattern)


def detect_preferred_contact(info: PersonalInfo | None) -> ContactMethod:
    if info is not None and info.phone and not info.email:
        return ContactMethod.PHONE
    return ContactMethod.EMAIL


def detect_communication_style(messages: Iterable[str]) -> CommunicationStyle:
    """Majority vote of formal vs informal markers; a tie reads as professional.

    Each marker counts at most once per message.
    """
    formal = 0
    informal = 0
    for content in messages:
        lowered = (content or "").lower()
        formal += sum(1 for marker in FORMAL_MARKERS if marker in lowered)
        informal += sum(1 for marker in INFORMAL_MARKERS if marker in lowered)

    if formal > informal:
        return CommunicationStyle.FORMAL
    if informal > formal:
        return CommunicationStyle.INFORMAL
    return CommunicationStyle.PROFESSIONAL


def risk_score(days_overdue: int, payments: Sequence[PaymentRecord]) -> int:
    score = 0
    if days_overdue > 90:
        score += 3
    elif days_overdue > 60:
        score += 2
    elif days_overdue > 30:
        score += 1

    if payments:
        late = sum(1 for p in payments if p.status == PaymentStatus.LATE)
        ratio = late / len(payments)
        if ratio > 0.7:
            score += 3
        elif ratio > 0.4:
            score += 2
        elif ratio > 0.2:
            score += 1
    return score


def assess_risk_level(days_overdue: int, payments: Sequence[PaymentRecord]) -> RiskLevel:
    score = risk_score(days_overdue, payments)
    if score >= 5:
        return RiskLevel.HIGH
    if score >= 3:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
