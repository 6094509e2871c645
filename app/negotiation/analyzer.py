"""Message analyzer: keyword flags, sentiment, intent and complexity.

Pure and deterministic. The lexicon is Spanish and matched as lower-cased
substrings, so "mes" also matches "meses" and "pago" matches "pagos".
"""

from __future__ import annotations

from app.core.enums import Complexity, Intent, Sentiment
from app.negotiation.records import Analysis, KeywordFlags

LEXICON: dict[str, tuple[str, ...]] = {
    "discount": ("descuento", "rebaja"),
    "installments": ("cuota", "plazo"),
    "time": ("tiempo", "mes"),
    "human": ("persona", "humano", "agente"),
    "payment": ("pago", "pagar"),
    "distress": ("alto", "caro", "no puedo"),
    "agreement": ("acuerdo", "acepto", "de acuerdo"),
}

NEGATIVE_MARKERS = ("problema", "difícil")
POSITIVE_MARKERS = ("gracias", "bien")

NEGATIVE_SCORE = 0.2
NEUTRAL_SCORE = 0.5
POSITIVE_SCORE = 0.8

# First match wins; a message may carry several flags.
INTENT_PRIORITY: tuple[tuple[str, Intent], ...] = (
    ("discount", Intent.DISCOUNT_REQUEST),
    ("installments", Intent.INSTALLMENT_REQUEST),
    ("time", Intent.TIME_REQUEST),
    ("human", Intent.HUMAN_REQUEST),
    ("agreement", Intent.AGREEMENT),
)


def _contains_any(text: str, markers: tuple[str, ...]) -> bool:
    return any(marker in text for marker in markers)


def detect_keywords(lowered: str) -> KeywordFlags:
    return KeywordFlags(**{flag: _contains_any(lowered, markers) for flag, markers in LEXICON.items()})


def classify_sentiment(lowered: str, keywords: KeywordFlags) -> tuple[Sentiment, float]:
    # Distress is checked before agreement.
    if keywords.distress or _contains_any(lowered, NEGATIVE_MARKERS):
        return Sentiment.NEGATIVE, NEGATIVE_SCORE
    if keywords.agreement or _contains_any(lowered, POSITIVE_MARKERS):
        return Sentiment.POSITIVE, POSITIVE_SCORE
    return Sentiment.NEUTRAL, NEUTRAL_SCORE


def classify_intent(keywords: KeywordFlags) -> Intent:
    for flag, intent in INTENT_PRIORITY:
        if getattr(keywords, flag):
            return intent
    return Intent.INQUIRY


def calculate_complexity(message: str) -> Complexity:
    words = len(message.split())
    if words < 10:
        return Complexity.LOW
    if words < 25:
        return Complexity.MEDIUM
    return Complexity.HIGH


def analyze(message: str | None) -> Analysis:
    if not message or not message.strip():
        return Analysis(message_length=len(message or ""))

    lowered = message.lower()
    keywords = detect_keywords(lowered)
    sentiment, score = classify_sentiment(lowered, keywords)
    return Analysis(
        keywords=keywords,
        sentiment=sentiment,
        sentiment_score=score,
        intent=classify_intent(keywords),
        complexity=calculate_complexity(message),
        message_length=len(message),
    )
