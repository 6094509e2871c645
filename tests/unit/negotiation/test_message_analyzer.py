from __future__ import annotations

from app.core.enums import Complexity, Intent, Sentiment
from app.negotiation.analyzer import analyze, calculate_complexity


def test_discount_request_is_detected():
    analysis = analyze("Quiero un descuento del 30%")
    assert analysis.keywords.discount is True
    assert analysis.intent == Intent.DISCOUNT_REQUEST
    assert analysis.sentiment == Sentiment.NEUTRAL
    assert analysis.sentiment_score == 0.5


def test_discount_outranks_installments_when_both_present():
    analysis = analyze("Quiero pagar en cuotas con descuento")
    assert analysis.keywords.installments is True
    assert analysis.keywords.payment is True
    assert analysis.intent == Intent.DISCOUNT_REQUEST


def test_human_request_and_month_substring():
    assert analyze("Necesito hablar con una persona").intent == Intent.HUMAN_REQUEST
    analysis = analyze("Necesito 3 meses más")
    assert analysis.keywords.time is True
    assert analysis.intent == Intent.TIME_REQUEST


def test_distress_reads_negative_even_with_agreement_words():
    analysis = analyze("Es muy caro, no puedo pagar aunque quiero llegar a un acuerdo")
    assert analysis.keywords.distress is True
    assert analysis.keywords.agreement is True
    assert analysis.sentiment == Sentiment.NEGATIVE
    assert analysis.sentiment_score == 0.2


def test_agreement_is_positive():
    analysis = analyze("Gracias, estoy de acuerdo")
    assert analysis.intent == Intent.AGREEMENT
    assert analysis.sentiment == Sentiment.POSITIVE
    assert analysis.sentiment_score == 0.8


def test_plain_question_is_inquiry():
    analysis = analyze("Hola, quisiera información")
    assert analysis.intent == Intent.INQUIRY
    assert analysis.sentiment == Sentiment.NEUTRAL


def test_empty_message_yields_default_analysis():
    for message in ("", "   ", None):
        analysis = analyze(message)
        assert analysis.intent == Intent.INQUIRY
        assert analysis.sentiment_score == 0.5
        assert analysis.complexity == Complexity.LOW
        assert not any(analysis.keywords.to_dict().values())


def test_complexity_boundaries():
    assert calculate_complexity(" ".join(["palabra"] * 9)) == Complexity.LOW
    assert calculate_complexity(" ".join(["palabra"] * 10)) == Complexity.MEDIUM
    assert calculate_complexity(" ".join(["palabra"] * 24)) == Complexity.MEDIUM
    assert calculate_complexity(" ".join(["palabra"] * 25)) == Complexity.HIGH


def test_analysis_serializes_to_plain_values():
    payload = analyze("Quiero un descuento").to_dict()
    assert payload["intent"] == "discount_request"
    assert payload["keywords"]["discount"] is True
    assert payload["message_length"] == len("Quiero un descuento")
