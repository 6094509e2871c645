"""Conversation endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.api.v1._errors import HANDLED_ERRORS, to_http_error
from app.core.dependencies import EngineServices, get_services
from app.orchestration.conversation_orchestrator import TurnResult
from app.schemas.common import ListEnvelope
from app.schemas.conversations import (
    ConversationResponse,
    EscalationResponse,
    HumanMessageRequest,
    MessageCreateRequest,
    MessageResponse,
    OutcomeRequest,
    TurnResponse,
)

router = APIRouter(tags=["conversations"])


def _turn_response(result: TurnResult) -> TurnResponse:
    escalation = None
    if result.escalation is not None:
        escalation = EscalationResponse(
            should_escalate=result.escalation.should_escalate,
            reason=result.escalation.reason.value if result.escalation.reason else None,
            priority=result.escalation.priority.value if result.escalation.priority else None,
        )
    return TurnResponse(
        conversation=ConversationResponse.model_validate(result.conversation),
        inbound=MessageResponse.model_validate(result.inbound),
        reply=MessageResponse.model_validate(result.reply) if result.reply else None,
        escalated=result.escalated,
        escalation=escalation,
    )


@router.get("/conversations/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: str,
    services: EngineServices = Depends(get_services),
) -> ConversationResponse:
    try:
        conversation = await services.orchestrator.get_conversation(conversation_id)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return ConversationResponse.model_validate(conversation)


@router.get("/conversations/{conversation_id}/messages", response_model=ListEnvelope)
async def list_messages(conversation_id: str, services: EngineServices = Depends(get_services)) -> ListEnvelope:
    try:
        messages = await services.orchestrator.list_messages(conversation_id)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return ListEnvelope(items=[MessageResponse.model_validate(m) for m in messages], total=len(messages))


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=TurnResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_debtor_message(
    conversation_id: str,
    payload: MessageCreateRequest,
    services: EngineServices = Depends(get_services),
) -> TurnResponse:
    try:
        result = await services.orchestrator.process_message(conversation_id, payload.content)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return _turn_response(result)


@router.post(
    "/conversations/{conversation_id}/human-messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_human_message(
    conversation_id: str,
    payload: HumanMessageRequest,
    services: EngineServices = Depends(get_services),
) -> MessageResponse:
    try:
        message = await services.orchestrator.post_human_message(conversation_id, payload.content, payload.agent_id)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return MessageResponse.model_validate(message)


@router.post("/conversations/{conversation_id}/outcome", response_model=ConversationResponse)
async def record_outcome(
    conversation_id: str,
    payload: OutcomeRequest,
    services: EngineServices = Depends(get_services),
) -> ConversationResponse:
    try:
        conversation = await services.orchestrator.record_outcome(conversation_id, payload.outcome, payload.note)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return ConversationResponse.model_validate(conversation)
