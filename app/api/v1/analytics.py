"""Analytics endpoints for API v1."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from app.api.v1._errors import HANDLED_ERRORS, to_http_error
from app.core.dependencies import EngineServices, get_services
from app.schemas.analytics import GeneralMetricsResponse
from app.schemas.common import ListEnvelope

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/{company_id}/metrics", response_model=GeneralMetricsResponse)
async def general_metrics(company_id: str, services: EngineServices = Depends(get_services)) -> GeneralMetricsResponse:
    try:
        metrics = await services.analytics.get_general_metrics(company_id)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return GeneralMetricsResponse(**metrics)


@router.get("/{company_id}/trends")
async def negotiation_trends(
    company_id: str,
    days: int = Query(default=30, ge=1, le=365),
    services: EngineServices = Depends(get_services),
) -> dict:
    try:
        return await services.analytics.get_negotiation_trends(company_id, days=days)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc


@router.get("/{company_id}/active", response_model=ListEnvelope)
async def active_negotiations(company_id: str, services: EngineServices = Depends(get_services)) -> ListEnvelope:
    try:
        items = await services.analytics.get_active_negotiations(company_id)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return ListEnvelope(items=items, total=len(items))


@router.get("/{company_id}/report")
async def performance_report(
    company_id: str,
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    include_details: bool = Query(default=False),
    services: EngineServices = Depends(get_services),
) -> dict:
    try:
        return await services.analytics.generate_performance_report(
            company_id, start=start_date, end=end_date, include_details=include_details
        )
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
