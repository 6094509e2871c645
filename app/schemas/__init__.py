"""Pydantic schema package for API contracts."""

from app.schemas.analytics import GeneralMetricsResponse
from app.schemas.common import APIEnvelope, ListEnvelope
from app.schemas.conversations import (
    ConversationResponse,
    HumanMessageRequest,
    MessageCreateRequest,
    MessageResponse,
    OutcomeRequest,
    TurnResponse,
)
from app.schemas.knowledge import (
    ActiveToggleRequest,
    AIConfigResponse,
    AIConfigUpdateRequest,
    CustomResponseCreateRequest,
    CustomResponseResponse,
    PaymentCreateRequest,
    PaymentResponse,
    PolicyCreateRequest,
    PolicyResponse,
)
from app.schemas.proposals import ProposalActionRequest, ProposalActionResponse

__all__ = [
    "AIConfigResponse",
    "AIConfigUpdateRequest",
    "APIEnvelope",
    "ActiveToggleRequest",
    "ConversationResponse",
    "CustomResponseCreateRequest",
    "CustomResponseResponse",
    "ListEnvelope",
    "GeneralMetricsResponse",
    "HumanMessageRequest",
    "MessageCreateRequest",
    "MessageResponse",
    "OutcomeRequest",
    "PaymentCreateRequest",
    "PaymentResponse",
    "PolicyCreateRequest",
    "PolicyResponse",
    "ProposalActionRequest",
    "ProposalActionResponse",
    "TurnResponse",
]
