from __future__ import annotations

from app.core.enums import (
    CommunicationStyle,
    ContactMethod,
    NegotiationTendency,
    PaymentPattern,
    PaymentStatus,
    RiskLevel,
)
from app.knowledge.profiling import (
    analyze_behavior,
    assess_risk_level,
    detect_communication_style,
    detect_preferred_contact,
    risk_score,
)
from app.knowledge.records import NegotiationRecord, PaymentRecord, PersonalInfo


def _negotiations(*statuses: str) -> list[NegotiationRecord]:
    return [NegotiationRecord(id=f"n{i}", status=s, summary=None, created_at=None) for i, s in enumerate(statuses)]


def _payments(on_time: int = 0, late: int = 0, pending: int = 0) -> list[PaymentRecord]:
    statuses = [PaymentStatus.ON_TIME] * on_time + [PaymentStatus.LATE] * late + [PaymentStatus.PENDING] * pending
    return [PaymentRecord(id=f"p{i}", amount=1000, status=s, created_at=None) for i, s in enumerate(statuses)]


def _info(email: str | None, phone: str | None) -> PersonalInfo:
    return PersonalInfo(id="d1", name="Ana", rut=None, email=email, phone=phone, customer_since=None)


def test_behavior_defaults_without_history():
    profile = analyze_behavior([], [])
    assert profile.negotiation_tendency == NegotiationTendency.NEUTRAL
    assert profile.payment_pattern == PaymentPattern.IRREGULAR


def test_negotiation_tendency_ratios():
    cooperative = analyze_behavior(_negotiations("agreed", "agreed", "agreed", "escalated"), [])
    assert cooperative.negotiation_tendency == NegotiationTendency.COOPERATIVE
    resistant = analyze_behavior(_negotiations("agreed", "rejected", "rejected", "abandoned"), [])
    assert resistant.negotiation_tendency == NegotiationTendency.RESISTANT
    neutral = analyze_behavior(_negotiations("agreed", "rejected"), [])
    assert neutral.negotiation_tendency == NegotiationTendency.NEUTRAL


def test_payment_pattern_ratios():
    assert analyze_behavior([], _payments(on_time=5)).payment_pattern == PaymentPattern.REGULAR
    assert analyze_behavior([], _payments(on_time=1, late=4)).payment_pattern == PaymentPattern.DELINQUENT
    assert analyze_behavior([], _payments(on_time=2, late=2)).payment_pattern == PaymentPattern.IRREGULAR


def test_preferred_contact():
    assert detect_preferred_contact(_info(email=None, phone="+56 9 1234")) == ContactMethod.PHONE
    assert detect_preferred_contact(_info(email="a@b.cl", phone="+56 9 1234")) == ContactMethod.EMAIL
    assert detect_preferred_contact(None) == ContactMethod.EMAIL


def test_communication_style_votes():
    assert detect_communication_style(["Por favor, usted me podría ayudar"]) == CommunicationStyle.FORMAL
    assert detect_communication_style(["dale", "ok, gracias"]) == CommunicationStyle.INFORMAL
    assert detect_communication_style(["Hola"]) == CommunicationStyle.PROFESSIONAL
    assert detect_communication_style([]) == CommunicationStyle.PROFESSIONAL
    assert detect_communication_style(["usted", "dale"]) == CommunicationStyle.PROFESSIONAL


def test_risk_score_components():
    assert risk_score(95, _payments(on_time=2, late=8)) == 6
    assert risk_score(65, _payments(on_time=5, late=5)) == 4
    assert risk_score(45, []) == 1
    assert risk_score(0, _payments(on_time=7, late=3)) == 1


def test_risk_level_bands():
    assert assess_risk_level(95, _payments(on_time=2, late=8)) == RiskLevel.HIGH
    assert assess_risk_level(65, _payments(on_time=5, late=5)) == RiskLevel.MEDIUM
    assert assess_risk_level(45, []) == RiskLevel.LOW


def test_long_overdue_debtor_with_clean_payments_is_medium_risk():
    payments = _payments(on_time=10)
    assert risk_score(95, payments) == 3
    assert assess_risk_level(95, payments) == RiskLevel.MEDIUM
