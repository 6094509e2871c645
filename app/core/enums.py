"""Enums for the negotiation engine.

Values are the lower snake_case strings stored in the database and exchanged
over the API, so every enum derives from ``str``.
"""

from __future__ import annotations

import enum


class ConversationStatus(str, enum.Enum):
    ACTIVE = "active"
    NEGOTIATING = "negotiating"
    ESCALATED = "escalated"
    AGREED = "agreed"
    REJECTED = "rejected"
    ABANDONED = "abandoned"


class SenderType(str, enum.Enum):
    DEBTOR = "debtor"
    AI_ASSISTANT = "ai_assistant"
    HUMAN_AGENT = "human_agent"


class Intent(str, enum.Enum):
    DISCOUNT_REQUEST = "discount_request"
    INSTALLMENT_REQUEST = "installment_request"
    TIME_REQUEST = "time_request"
    HUMAN_REQUEST = "human_request"
    AGREEMENT = "agreement"
    INQUIRY = "inquiry"


class Sentiment(str, enum.Enum):
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    POSITIVE = "positive"


class Complexity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EscalationReason(str, enum.Enum):
    USER_REQUESTED_HUMAN = "user_requested_human"
    MESSAGE_LIMIT_EXCEEDED = "message_limit_exceeded"
    NEGATIVE_SENTIMENT = "negative_sentiment"
    HIGH_DISCOUNT_REQUEST = "high_discount_request"
    EXTENDED_TIME_REQUEST = "extended_time_request"
    TECHNICAL_ERROR = "technical_error"


class EscalationPriority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"


class ResponseType(str, enum.Enum):
    DISCOUNT_OFFER = "discount_offer"
    INSTALLMENT_OPTIONS = "installment_options"
    TIME_EXTENSION = "time_extension"
    AGREEMENT_CONFIRMATION = "agreement_confirmation"
    GENERAL_INQUIRY = "general_inquiry"
    PERSONALIZED_RESPONSE = "personalized_response"
    TECHNICAL_ERROR = "technical_error"


class PersonalizationLevel(str, enum.Enum):
    NONE = "none"
    MEDIUM = "medium"
    HIGH = "high"
    ULTRA_HIGH = "ultra_high"


class NegotiationTendency(str, enum.Enum):
    COOPERATIVE = "cooperative"
    NEUTRAL = "neutral"
    RESISTANT = "resistant"


class PaymentPattern(str, enum.Enum):
    REGULAR = "regular"
    IRREGULAR = "irregular"
    DELINQUENT = "delinquent"


class CommunicationStyle(str, enum.Enum):
    FORMAL = "formal"
    INFORMAL = "informal"
    PROFESSIONAL = "professional"


class RiskLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ContactMethod(str, enum.Enum):
    EMAIL = "email"
    PHONE = "phone"


class PaymentStatus(str, enum.Enum):
    ON_TIME = "on_time"
    LATE = "late"
    PENDING = "pending"


class ProposalStatus(str, enum.Enum):
    PENDING = "pending"
    NEGOTIATING = "negotiating"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ProposalAction(str, enum.Enum):
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    NEGOTIATE = "NEGOTIATE"


class AnalyticsOutcome(str, enum.Enum):
    AGREEMENT = "agreement"
    ESCALATED = "escalated"
    ABANDONED = "abandoned"
    REJECTED = "rejected"


class Trend(str, enum.Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


TERMINAL_STATUSES = frozenset(
    {ConversationStatus.AGREED, ConversationStatus.REJECTED, ConversationStatus.ABANDONED}
)
AI_TURN_STATUSES = frozenset({ConversationStatus.ACTIVE, ConversationStatus.NEGOTIATING})
