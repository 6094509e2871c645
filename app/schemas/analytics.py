"""Analytics read schemas."""

from __future__ import annotations

from pydantic import BaseModel


class GeneralMetricsResponse(BaseModel):
    active_negotiations: int
    total_negotiations: int
    ai_success_rate: int
    escalations: int
    avg_resolution_time: float
    last_updated: str
