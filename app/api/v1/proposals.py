"""Proposal action endpoint for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.v1._errors import HANDLED_ERRORS, to_http_error
from app.core.dependencies import EngineServices, get_services
from app.orchestration.proposal_actions import DebtorData
from app.schemas.proposals import ProposalActionRequest, ProposalActionResponse

router = APIRouter(tags=["proposals"])


@router.post("/proposals/{proposal_id}/actions", response_model=ProposalActionResponse)
async def proposal_action(
    proposal_id: str,
    payload: ProposalActionRequest,
    services: EngineServices = Depends(get_services),
) -> ProposalActionResponse:
    debtor = DebtorData(
        id=payload.debtor_id,
        name=payload.debtor_name,
        company_id=payload.company_id,
        corporate_client_id=payload.corporate_client_id,
        rejection_reason=payload.rejection_reason,
    )
    try:
        result = await services.proposals.handle(proposal_id, payload.action, debtor)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return ProposalActionResponse(**result.__dict__)
