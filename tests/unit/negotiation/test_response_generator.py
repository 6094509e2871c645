from __future__ import annotations

from datetime import date, datetime, timezone

from app.core.enums import (
    CommunicationStyle,
    EscalationReason,
    PaymentStatus,
    PersonalizationLevel,
    ResponseType,
    RiskLevel,
)
from app.knowledge.records import (
    AIConfiguration,
    CorporateContext,
    CorporateKnowledge,
    CorporateProfile,
    DebtInfo,
    DebtorSource,
    NegotiationLimits,
    PaymentRecord,
    PersonalInfo,
)
from app.knowledge.resolver import build_debtor_knowledge, default_corporate_knowledge
from app.negotiation.analyzer import analyze
from app.negotiation.responses import (
    TECHNICAL_ERROR_CONTENT,
    ResponseGenerator,
    handoff_message,
)

PROPOSAL = {"total_amount": 1_200_000, "installments": 6, "installment_amount": 200_000}


def _debtor(days_overdue: int = 10, payments: tuple[PaymentRecord, ...] = ()):
    return build_debtor_knowledge(
        DebtorSource(
            personal_info=PersonalInfo(
                id="debtor-1",
                name="Juan Pérez",
                rut="11.111.111-1",
                email="juan@example.com",
                phone=None,
                customer_since=datetime(2020, 1, 1, tzinfo=timezone.utc),
            ),
            debt_info=DebtInfo(
                total_debt=900_000,
                original_amount=1_000_000,
                due_date=date(2026, 1, 1),
                days_overdue=days_overdue,
                debt_type="consumo",
                status="active",
            ),
            corporate_context=CorporateContext("corp-1", "Retail Sur", "77.777.777-7"),
            negotiation_history=(),
            payment_history=payments,
        )
    )


def _corporate() -> CorporateKnowledge:
    return CorporateKnowledge(
        profile=CorporateProfile(id="corp-1", name="Retail Sur", rut="77.777.777-7", industry="Retail"),
        negotiation_limits=NegotiationLimits(max_discount_percent=25),
        ai_configuration=AIConfiguration(),
    )


def _generate(message: str, **kwargs):
    return ResponseGenerator().generate(message, analyze(message), NegotiationLimits(), **kwargs)


def test_generic_discount_offer_uses_limits_and_defaults():
    response = _generate("Quiero un descuento")
    assert response.type == ResponseType.DISCOUNT_OFFER
    assert response.confidence == 0.9
    assert response.personalization_level == PersonalizationLevel.MEDIUM
    assert response.content.startswith("Cliente, entiendo")
    assert "hasta un 15%" in response.content
    assert "nuestra empresa" in response.content


def test_generic_agreement_summarizes_proposal():
    response = _generate("Acepto la propuesta", proposal=PROPOSAL)
    assert response.type == ResponseType.AGREEMENT_CONFIRMATION
    assert response.confidence == 1.0
    assert "$1.200.000" in response.content
    assert "Número de cuotas: 6" in response.content
    assert "$200.000" in response.content


def test_generic_time_extension_mentions_overdue_days_when_high():
    response = _generate("Necesito más tiempo", debtor=_debtor(days_overdue=75))
    assert response.type == ResponseType.TIME_EXTENSION
    assert "75 días de mora" in response.content
    assert "12 meses" in response.content
    assert response.personalization_level == PersonalizationLevel.HIGH


def test_default_corporate_keeps_generic_path():
    response = _generate("Quiero pagar en cuotas", debtor=_debtor(), corporate=default_corporate_knowledge())
    assert response.type == ResponseType.INSTALLMENT_OPTIONS
    assert response.content.startswith("Juan Pérez, claro que podemos")


def test_personalized_path_with_known_debtor_and_corporate():
    response = _generate("Quiero un descuento", debtor=_debtor(), corporate=_corporate())
    assert response.type == ResponseType.PERSONALIZED_RESPONSE
    assert response.personalization_level == PersonalizationLevel.ULTRA_HIGH
    assert response.confidence == 0.95
    assert response.content.startswith("Juan Pérez, como cliente de Retail Sur")
    assert "Por tu buen historial" in response.content
    assert response.prompt and "Juan Pérez" in response.prompt
    assert len(response.prompt_hash) == 64

    metadata = response.to_metadata()
    assert "prompt" not in metadata
    assert metadata["prompt_hash"] == response.prompt_hash


def test_personalized_agreement_reassures_high_risk_debtor():
    late = tuple(
        PaymentRecord(id=f"p{i}", amount=1000, status=PaymentStatus.LATE, created_at=None) for i in range(5)
    )
    debtor = _debtor(days_overdue=120, payments=late)
    assert debtor.personalization.risk_level == RiskLevel.HIGH
    response = _generate("Estoy de acuerdo", debtor=debtor, corporate=_corporate())
    assert "términos sean alcanzables" in response.content


def test_generation_failure_becomes_technical_error():
    message = "Quiero un descuento"
    response = ResponseGenerator().generate(message, analyze(message), limits=None)
    assert response.type == ResponseType.TECHNICAL_ERROR
    assert response.content == TECHNICAL_ERROR_CONTENT
    assert response.escalation_triggered is True
    assert response.escalation_reason == EscalationReason.TECHNICAL_ERROR
    assert response.confidence == 0.1


def test_handoff_message_per_reason():
    text = handoff_message(EscalationReason.USER_REQUESTED_HUMAN, _debtor(), _corporate())
    assert text.startswith("Juan Pérez, entiendo que prefieres hablar con una persona")
    assert "Retail Sur" in text

    fallback = handoff_message(EscalationReason.HIGH_DISCOUNT_REQUEST)
    assert fallback.startswith("Cliente, el descuento que solicitas")
    assert "nuestra empresa" in fallback


def test_unknown_handoff_reason_uses_technical_text():
    assert "problema técnico" in handoff_message("something_else")
    assert "problema técnico" in handoff_message(None)


def test_formal_style_changes_installment_wording():
    debtor = _debtor()
    assert debtor.personalization.communication_style == CommunicationStyle.PROFESSIONAL
    response = _generate("Quiero pagar en cuotas", debtor=debtor)
    assert "te funcionaría mejor" in response.content


def test_thankful_agreement_is_confirmed():
    analysis = analyze("gracias, de acuerdo")
    assert analysis.intent.value == "agreement"

    response = _generate("gracias, de acuerdo", proposal=PROPOSAL)
    assert response.type == ResponseType.AGREEMENT_CONFIRMATION
    assert response.confidence == 1.0
