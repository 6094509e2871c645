"""Modular SQLAlchemy model package for the negotiation schema."""

from app.models.analytics_event import AnalyticsEvent
from app.models.base import Base
from app.models.conversation import Conversation, Message
from app.models.corporate_client import CorporateClient, CorporatePolicy, CustomResponse, NegotiationAIConfig
from app.models.debtor import Debt, Debtor, Payment
from app.models.proposal import PaymentAgreement, Proposal

__all__ = [
    "AnalyticsEvent",
    "Base",
    "Conversation",
    "CorporateClient",
    "CorporatePolicy",
    "CustomResponse",
    "Debt",
    "Debtor",
    "Message",
    "NegotiationAIConfig",
    "Payment",
    "PaymentAgreement",
    "Proposal",
]
