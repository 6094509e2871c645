"""Escalation decision engine.

Rules are an ordered tuple evaluated first-match. An explicit request for a
human must always win over the numeric threshold checks, so new rules are
inserted by position, never appended blindly.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from app.core.enums import EscalationPriority, EscalationReason
from app.database.records import ConversationSnapshot
from app.knowledge.records import DebtorKnowledge, NegotiationLimits
from app.negotiation.extraction import AmountExtractor, RegexAmountExtractor
from app.negotiation.records import Analysis, EscalationDecision

logger = logging.getLogger(__name__)

NEGATIVE_SENTIMENT_THRESHOLD = 0.3


@dataclass(frozen=True)
class EscalationContext:
    message: str
    analysis: Analysis
    message_count: int
    limits: NegotiationLimits
    extractor: AmountExtractor
    debtor: DebtorKnowledge | None = None


Predicate = Callable[[EscalationContext], bool]


@dataclass(frozen=True)
class EscalationRule:
    name: str
    predicate: Predicate
    reason: EscalationReason
    priority: EscalationPriority


def _human_requested(ctx: EscalationContext) -> bool:
    return ctx.analysis.keywords.human


def _message_limit_reached(ctx: EscalationContext) -> bool:
    return ctx.message_count >= ctx.limits.escalation_thresholds.conversation_length


def _negative_sentiment(ctx: EscalationContext) -> bool:
    return ctx.analysis.sentiment_score < NEGATIVE_SENTIMENT_THRESHOLD


def _discount_above_threshold(ctx: EscalationContext) -> bool:
    if not ctx.analysis.keywords.discount:
        return False
    return ctx.extractor.extract_discount(ctx.message) > ctx.limits.escalation_thresholds.discount_requested


def _term_above_threshold(ctx: EscalationContext) -> bool:
    if not ctx.analysis.keywords.time:
        return False
    return ctx.extractor.extract_months(ctx.message) > ctx.limits.escalation_thresholds.time_requested


ESCALATION_RULES: tuple[EscalationRule, ...] = (
    EscalationRule("human_request", _human_requested, EscalationReason.USER_REQUESTED_HUMAN, EscalationPriority.HIGH),
    EscalationRule(
        "message_limit", _message_limit_reached, EscalationReason.MESSAGE_LIMIT_EXCEEDED, EscalationPriority.MEDIUM
    ),
    EscalationRule("negative_sentiment", _negative_sentiment, EscalationReason.NEGATIVE_SENTIMENT, EscalationPriority.HIGH),
    EscalationRule(
        "high_discount", _discount_above_threshold, EscalationReason.HIGH_DISCOUNT_REQUEST, EscalationPriority.MEDIUM
    ),
    EscalationRule(
        "extended_term", _term_above_threshold, EscalationReason.EXTENDED_TIME_REQUEST, EscalationPriority.MEDIUM
    ),
)


class EscalationEngine:
    def __init__(
        self,
        rules: tuple[EscalationRule, ...] = ESCALATION_RULES,
        extractor: AmountExtractor | None = None,
    ) -> None:
        self.rules = rules
        self.extractor = extractor or RegexAmountExtractor()

    def decide(
        self,
        message: str,
        analysis: Analysis,
        conversation: ConversationSnapshot,
        limits: NegotiationLimits,
        debtor: DebtorKnowledge | None = None,
    ) -> EscalationDecision:
        """Return the decision of the first matching rule.

        ``conversation`` is the state before the inbound message is appended.
        Any failure while evaluating fails closed into a technical-error
        escalation.
        """
        try:
            ctx = EscalationContext(
                message=message or "",
                analysis=analysis,
                message_count=conversation.message_count,
                limits=limits,
                extractor=self.extractor,
                debtor=debtor,
            )
            for rule in self.rules:
                if rule.predicate(ctx):
                    return EscalationDecision(
                        should_escalate=True,
                        reason=rule.reason,
                        priority=rule.priority,
                        rule=rule.name,
                    )
            return EscalationDecision.no_escalation()
        except Exception:
            logger.exception(
                "escalation.evaluation_failed",
                extra={"event": "escalation.evaluation_failed", "conversation_id": getattr(conversation, "id", None)},
            )
            return EscalationDecision.technical_error()
