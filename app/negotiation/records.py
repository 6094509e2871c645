"""Value objects passed between analyzer, escalation engine and response generator."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from app.core.enums import (
    Complexity,
    EscalationPriority,
    EscalationReason,
    Intent,
    PersonalizationLevel,
    ResponseType,
    Sentiment,
)


@dataclass(frozen=True)
class KeywordFlags:
    discount: bool = False
    installments: bool = False
    time: bool = False
    human: bool = False
    payment: bool = False
    distress: bool = False
    agreement: bool = False

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)


@dataclass(frozen=True)
class Analysis:
    keywords: KeywordFlags = field(default_factory=KeywordFlags)
    sentiment: Sentiment = Sentiment.NEUTRAL
    sentiment_score: float = 0.5
    intent: Intent = Intent.INQUIRY
    complexity: Complexity = Complexity.LOW
    message_length: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "keywords": self.keywords.to_dict(),
            "sentiment": self.sentiment.value,
            "sentiment_score": self.sentiment_score,
            "intent": self.intent.value,
            "complexity": self.complexity.value,
            "message_length": self.message_length,
        }


@dataclass(frozen=True)
class EscalationDecision:
    should_escalate: bool
    reason: EscalationReason | None = None
    priority: EscalationPriority | None = None
    rule: str | None = None

    @classmethod
    def no_escalation(cls) -> "EscalationDecision":
        return cls(should_escalate=False)

    @classmethod
    def technical_error(cls) -> "EscalationDecision":
        return cls(
            should_escalate=True,
            reason=EscalationReason.TECHNICAL_ERROR,
            priority=EscalationPriority.HIGH,
            rule="fail_closed",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "should_escalate": self.should_escalate,
            "reason": self.reason.value if self.reason else None,
            "priority": self.priority.value if self.priority else None,
            "rule": self.rule,
        }


@dataclass(frozen=True)
class GeneratedResponse:
    content: str
    confidence: float
    type: ResponseType
    personalization_level: PersonalizationLevel
    keywords: tuple[str, ...] = ()
    escalation_triggered: bool = False
    escalation_reason: EscalationReason | None = None
    prompt: str | None = None
    prompt_hash: str | None = None
    error: str | None = None

    def to_metadata(self) -> dict[str, Any]:
        """Fields persisted with the outbound message; the prompt body is not stored."""
        payload: dict[str, Any] = {
            "confidence": self.confidence,
            "response_type": self.type.value,
            "personalization_level": self.personalization_level.value,
            "keywords": list(self.keywords),
            "escalation_triggered": self.escalation_triggered,
            "escalation_reason": self.escalation_reason.value if self.escalation_reason else None,
        }
        if self.prompt_hash:
            payload["prompt_hash"] = self.prompt_hash
        if self.error:
            payload["error"] = self.error
        return payload
