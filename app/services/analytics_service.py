"""Analytics aggregator: negotiation events, cached company metrics, trends and reports."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from app.core.cache import TTLCache
from app.core.enums import AnalyticsOutcome, Trend
from app.database.records import AnalyticsEventRecord
from app.database.store import NegotiationStore

logger = logging.getLogger(__name__)

METRICS_WINDOW = 100
TREND_WINDOW_DAYS = 7
TREND_THRESHOLD = 5.0
PROGRESS_MESSAGE_CEILING = 15


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _percent(part: int, total: int) -> int:
    # Half-up, so 62.5 reads as 63.
    return math.floor(part / total * 100 + 0.5) if total else 0


def _count(events: Sequence[AnalyticsEventRecord], outcome: AnalyticsOutcome) -> int:
    return sum(1 for e in events if e.outcome == outcome)


def success_rate(events: Sequence[AnalyticsEventRecord]) -> int:
    return _percent(_count(events, AnalyticsOutcome.AGREEMENT), len(events))


def average_resolution_time(events: Sequence[AnalyticsEventRecord]) -> float:
    if not events:
        return 0.0
    total = sum(e.conversation_duration_minutes or 0 for e in events)
    return round(total / len(events), 1)


def customer_satisfaction(events: Sequence[AnalyticsEventRecord]) -> float:
    """Weighted outcome score (agreement=5, escalation=2). Not backed by debtor feedback."""
    if not events:
        return 0.0
    score = (_count(events, AnalyticsOutcome.AGREEMENT) * 5 + _count(events, AnalyticsOutcome.ESCALATED) * 2) / len(
        events
    )
    return round(score, 1)


def group_by_day(events: Sequence[AnalyticsEventRecord]) -> list[dict[str, Any]]:
    buckets: dict[str, list[AnalyticsEventRecord]] = {}
    for event in sorted(events, key=lambda e: e.created_at):
        buckets.setdefault(event.created_at.date().isoformat(), []).append(event)
    return [
        {
            "date": day,
            "negotiations": len(items),
            "successful": _count(items, AnalyticsOutcome.AGREEMENT),
            "escalated": _count(items, AnalyticsOutcome.ESCALATED),
        }
        for day, items in buckets.items()
    ]


def classify_trend(
    events: Sequence[AnalyticsEventRecord],
    now: datetime,
    window_days: int = TREND_WINDOW_DAYS,
) -> dict[str, Any]:
    """Compare the success rate of the last window against the one before it."""
    recent_start = now - timedelta(days=window_days)
    previous_start = recent_start - timedelta(days=window_days)
    recent = [e for e in events if recent_start <= e.created_at <= now]
    previous = [e for e in events if previous_start <= e.created_at < recent_start]

    if len({e.created_at.date() for e in (*recent, *previous)}) < 2:
        return {"trend": Trend.STABLE.value, "change": 0.0}

    def rate(items: list[AnalyticsEventRecord]) -> float:
        return _count(items, AnalyticsOutcome.AGREEMENT) / len(items) * 100 if items else 0.0

    change = rate(recent) - rate(previous)
    if change > TREND_THRESHOLD:
        trend = Trend.IMPROVING
    elif change < -TREND_THRESHOLD:
        trend = Trend.DECLINING
    else:
        trend = Trend.STABLE
    return {"trend": trend.value, "change": round(change, 1)}


class AnalyticsAggregator:
    """Append-only analytics log with per-company metric reads.

    ``get_general_metrics`` is cached under ``general_metrics:<company_id>``;
    :meth:`track` invalidates that key for the company it writes to.
    """

    def __init__(
        self,
        store: NegotiationStore,
        cache: TTLCache,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self._clock = clock or _now

    @staticmethod
    def metrics_key(company_id: str) -> str:
        return f"general_metrics:{company_id}"

    async def track(self, company_id: str, event_type: str, payload: dict[str, Any] | None = None) -> AnalyticsEventRecord:
        payload = dict(payload or {})
        outcome = payload.pop("outcome", None)
        record = await asyncio.to_thread(
            self._store.insert_analytics_event,
            event_type=event_type,
            company_id=company_id,
            proposal_id=payload.pop("proposal_id", None),
            conversation_id=payload.pop("conversation_id", None),
            outcome=AnalyticsOutcome(outcome) if outcome else None,
            conversation_duration_minutes=payload.pop("conversation_duration_minutes", None),
            ai_messages=int(payload.pop("ai_messages", 0) or 0),
            metadata=payload.pop("metadata", None) or payload,
            created_at=self._clock(),
        )
        self._cache.invalidate(self.metrics_key(company_id))
        logger.info(
            "analytics.event.tracked",
            extra={
                "event": "analytics.event.tracked",
                "company_id": company_id,
                "event_type": event_type,
                "outcome": outcome,
            },
        )
        return record

    async def get_general_metrics(self, company_id: str) -> dict[str, Any]:
        key = self.metrics_key(company_id)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        version = self._cache.version(key)
        active = await asyncio.to_thread(self._store.list_active_conversations, company_id)
        events = await asyncio.to_thread(self._store.list_analytics_events, company_id, limit=METRICS_WINDOW)
        metrics = {
            "active_negotiations": len(active),
            "total_negotiations": len(events),
            "ai_success_rate": success_rate(events),
            "escalations": _count(events, AnalyticsOutcome.ESCALATED),
            "avg_resolution_time": average_resolution_time(events),
            "last_updated": self._clock().isoformat(),
        }
        self._cache.set(key, metrics, version=version)
        return metrics

    async def get_negotiation_trends(self, company_id: str, days: int = 30) -> dict[str, Any]:
        now = self._clock()
        since = now - timedelta(days=max(days, TREND_WINDOW_DAYS * 2))
        events = await asyncio.to_thread(self._store.list_analytics_events, company_id, since=since)
        period_start = now - timedelta(days=days)
        in_period = [e for e in events if e.created_at >= period_start]
        return {
            "period": days,
            "daily_data": group_by_day(in_period),
            "total_negotiations": len(in_period),
            "average_success_rate": success_rate(in_period),
            "trends": classify_trend(events, now),
        }

    async def get_active_negotiations(self, company_id: str) -> list[dict[str, Any]]:
        conversations = await asyncio.to_thread(self._store.list_active_conversations, company_id)
        result = []
        for conversation in conversations:
            last = await asyncio.to_thread(self._store.latest_message, conversation.id)
            result.append(
                {
                    "id": conversation.id,
                    "proposal_id": conversation.proposal_id,
                    "status": conversation.status.value,
                    "ai_active": conversation.ai_enabled,
                    "message_count": conversation.message_count,
                    "last_message_at": last.created_at.isoformat() if last else None,
                    "last_message_content": last.content if last else None,
                    "progress": min(_percent(conversation.message_count, PROGRESS_MESSAGE_CEILING), 100),
                    "created_at": conversation.created_at.isoformat() if conversation.created_at else None,
                    "updated_at": conversation.updated_at.isoformat() if conversation.updated_at else None,
                }
            )
        return result

    async def generate_performance_report(
        self,
        company_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        include_details: bool = False,
    ) -> dict[str, Any]:
        end = end or self._clock()
        start = start or end - timedelta(days=30)
        events = await asyncio.to_thread(
            self._store.list_analytics_events,
            company_id,
            since=start,
            until=end + timedelta(microseconds=1),
        )
        total = len(events)
        report: dict[str, Any] = {
            "period": {"start_date": start.isoformat(), "end_date": end.isoformat()},
            "summary": {
                "total_negotiations": total,
                "successful_negotiations": _count(events, AnalyticsOutcome.AGREEMENT),
                "escalated_negotiations": _count(events, AnalyticsOutcome.ESCALATED),
                "average_resolution_time": average_resolution_time(events),
                "success_rate": success_rate(events),
            },
            "performance": {
                "ai_efficiency": _percent(sum(1 for e in events if e.ai_messages > 0), total),
                "escalation_rate": _percent(_count(events, AnalyticsOutcome.ESCALATED), total),
                "customer_satisfaction": customer_satisfaction(events),
                "customer_satisfaction_validated": False,
            },
        }
        if include_details:
            report["details"] = [
                {
                    "id": e.id,
                    "event_type": e.event_type,
                    "outcome": e.outcome.value if e.outcome else None,
                    "conversation_id": e.conversation_id,
                    "proposal_id": e.proposal_id,
                    "conversation_duration_minutes": e.conversation_duration_minutes,
                    "ai_messages": e.ai_messages,
                    "metadata": e.metadata,
                    "created_at": e.created_at.isoformat(),
                }
                for e in events
            ]
        return report
