"""Corporate policy and debtor payment endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.api.v1._errors import HANDLED_ERRORS, to_http_error
from app.core.dependencies import EngineServices, get_services
from app.schemas.common import APIEnvelope
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

router = APIRouter(tags=["knowledge"])


@router.put("/corporate-clients/{corporate_client_id}/ai-config", response_model=AIConfigResponse)
async def update_ai_config(
    corporate_client_id: str,
    payload: AIConfigUpdateRequest,
    services: EngineServices = Depends(get_services),
) -> AIConfigResponse:
    try:
        config = await services.policies.update_ai_config(corporate_client_id, **payload.model_dump())
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return AIConfigResponse(**config)


@router.post(
    "/corporate-clients/{corporate_client_id}/policies",
    response_model=PolicyResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_policy(
    corporate_client_id: str,
    payload: PolicyCreateRequest,
    services: EngineServices = Depends(get_services),
) -> PolicyResponse:
    try:
        record = await services.policies.add_policy(
            corporate_client_id, payload.title, payload.content, payload.policy_type
        )
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return PolicyResponse.model_validate(record)


@router.patch("/policies/{policy_id}", response_model=APIEnvelope)
async def toggle_policy(
    policy_id: str,
    payload: ActiveToggleRequest,
    services: EngineServices = Depends(get_services),
) -> APIEnvelope:
    try:
        await services.policies.set_policy_active(policy_id, payload.is_active)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return APIEnvelope(message="Policy updated")


@router.post(
    "/corporate-clients/{corporate_client_id}/custom-responses",
    response_model=CustomResponseResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_custom_response(
    corporate_client_id: str,
    payload: CustomResponseCreateRequest,
    services: EngineServices = Depends(get_services),
) -> CustomResponseResponse:
    try:
        record = await services.policies.add_custom_response(corporate_client_id, payload.trigger, payload.response)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return CustomResponseResponse.model_validate(record)


@router.patch("/custom-responses/{response_id}", response_model=APIEnvelope)
async def toggle_custom_response(
    response_id: str,
    payload: ActiveToggleRequest,
    services: EngineServices = Depends(get_services),
) -> APIEnvelope:
    try:
        await services.policies.set_custom_response_active(response_id, payload.is_active)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return APIEnvelope(message="Custom response updated")


@router.post(
    "/debtors/{debtor_id}/payments",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    debtor_id: str,
    payload: PaymentCreateRequest,
    services: EngineServices = Depends(get_services),
) -> PaymentResponse:
    try:
        record = await services.policies.record_payment(debtor_id, payload.amount, payload.status)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return PaymentResponse.model_validate(record)
