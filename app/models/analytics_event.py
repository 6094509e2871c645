"""Analytics event model. Rows are appended and aggregated, never mutated."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.enums import AnalyticsOutcome
from app.models.base import Base, IdMixin, utcnow


class AnalyticsEvent(Base, IdMixin):
    __tablename__ = "negotiation_analytics"
    __table_args__ = (Index("idx_analytics_company_created", "company_id", "created_at"),)

    company_id: Mapped[str | None] = mapped_column(String(36))
    proposal_id: Mapped[str | None] = mapped_column(String(36))
    conversation_id: Mapped[str | None] = mapped_column(String(36))
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    outcome: Mapped[AnalyticsOutcome | None] = mapped_column(Enum(AnalyticsOutcome))
    conversation_duration_minutes: Mapped[float | None] = mapped_column(Float)
    ai_messages: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    event_metadata: Mapped[dict | None] = mapped_column("metadata", JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
