"""KnowledgeBase resolver: corporate and debtor knowledge per conversation turn."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from app.core.cache import TTLCache
from app.database.store import NegotiationStore
from app.knowledge import profiling
from app.knowledge.prompts import generate_personalized_prompt
from app.knowledge.records import (
    DEFAULT_CORPORATE_NAME,
    AIConfiguration,
    CorporateKnowledge,
    CorporateProfile,
    CorporateSource,
    DebtorKnowledge,
    DebtorSource,
    NegotiationLimits,
    PersonalizationData,
)
from app.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)


def default_corporate_knowledge() -> CorporateKnowledge:
    return CorporateKnowledge(
        profile=CorporateProfile(id=None, name=DEFAULT_CORPORATE_NAME, rut="Sin RUT", industry="General"),
        negotiation_limits=NegotiationLimits(),
        ai_configuration=AIConfiguration(),
        is_default=True,
        last_updated=datetime.now(timezone.utc),
    )


def build_corporate_knowledge(source: CorporateSource) -> CorporateKnowledge:
    ai_config = source.ai_config or {}
    return CorporateKnowledge(
        profile=source.profile,
        negotiation_limits=NegotiationLimits.from_ai_config(source.ai_config),
        ai_configuration=AIConfiguration(
            auto_respond=bool(ai_config.get("auto_respond", True)),
            working_hours=ai_config.get("working_hours") or AIConfiguration().working_hours,
        ),
        policies=source.policies,
        custom_responses=source.custom_responses,
        last_updated=datetime.now(timezone.utc),
    )


def build_debtor_knowledge(source: DebtorSource) -> DebtorKnowledge:
    messages = [content for negotiation in source.negotiation_history for content in negotiation.messages]
    return DebtorKnowledge(
        personal_info=source.personal_info,
        debt_info=source.debt_info,
        corporate_context=source.corporate_context,
        negotiation_history=source.negotiation_history,
        payment_history=source.payment_history,
        behavior_profile=profiling.analyze_behavior(source.negotiation_history, source.payment_history),
        personalization=PersonalizationData(
            preferred_contact_method=profiling.detect_preferred_contact(source.personal_info),
            communication_style=profiling.detect_communication_style(messages),
            risk_level=profiling.assess_risk_level(source.debt_info.days_overdue, source.payment_history),
        ),
    )


class KnowledgeBaseResolver:
    """Loads and merges corporate and debtor knowledge.

    Corporate knowledge is cached per corporate client; writers call
    :meth:`invalidate_corporate` for the one client they changed. Debtor
    knowledge is recomputed on every request unless a debtor cache with a
    positive TTL is supplied, in which case :meth:`invalidate_debtor` must be
    called after payments and negotiation turns.
    """

    def __init__(
        self,
        store: NegotiationStore,
        corporate_cache: TTLCache,
        debtor_cache: TTLCache | None = None,
        retry: RetryPolicy | None = None,
    ) -> None:
        self._store = store
        self._corporate_cache = corporate_cache
        self._debtor_cache = debtor_cache if debtor_cache is not None else TTLCache(ttl_seconds=0)
        self._retry = retry or RetryPolicy()

    async def resolve_corporate_knowledge(self, corporate_client_id: str | None) -> CorporateKnowledge:
        if not corporate_client_id:
            return default_corporate_knowledge()

        cached = self._corporate_cache.get(corporate_client_id)
        if cached is not None:
            return cached

        version = self._corporate_cache.version(corporate_client_id)
        source = await self._retry.run(
            self._store.fetch_corporate_source, corporate_client_id, operation="fetch_corporate_source"
        )
        if source is None:
            logger.info(
                "knowledge.corporate.defaulted",
                extra={"event": "knowledge.corporate.defaulted", "corporate_client_id": corporate_client_id},
            )
            return default_corporate_knowledge()

        knowledge = build_corporate_knowledge(source)
        self._corporate_cache.set(corporate_client_id, knowledge, version=version)
        return knowledge

    async def resolve_debtor_knowledge(
        self,
        debtor_id: str,
        corporate_client_id: str | None = None,
    ) -> DebtorKnowledge | None:
        cached = self._debtor_cache.get(debtor_id)
        if cached is not None and cached[0] == corporate_client_id:
            return cached[1]

        version = self._debtor_cache.version(debtor_id)
        source = await self._retry.run(
            self._store.fetch_debtor_source, debtor_id, corporate_client_id, operation="fetch_debtor_source"
        )
        if source is None:
            return None

        knowledge = build_debtor_knowledge(source)
        self._debtor_cache.set(debtor_id, (corporate_client_id, knowledge), version=version)
        return knowledge

    def generate_personalized_prompt(
        self,
        debtor: DebtorKnowledge,
        corporate: CorporateKnowledge,
        message: str,
    ) -> str:
        return generate_personalized_prompt(debtor, corporate, message)

    def invalidate_corporate(self, corporate_client_id: str) -> bool:
        removed = self._corporate_cache.invalidate(corporate_client_id)
        logger.info(
            "knowledge.corporate.invalidated",
            extra={
                "event": "knowledge.corporate.invalidated",
                "corporate_client_id": corporate_client_id,
                "removed": removed,
            },
        )
        return removed

    def invalidate_debtor(self, debtor_id: str) -> bool:
        return self._debtor_cache.invalidate(debtor_id)

    def clear(self) -> None:
        """Drop every cached entry. Meant for tests and admin tooling only."""
        self._corporate_cache.clear()
        self._debtor_cache.clear()
