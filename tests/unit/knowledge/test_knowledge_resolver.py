from __future__ import annotations

import asyncio

from conftest import NO_BACKOFF, add_payments

from app.core.cache import TTLCache
from app.core.enums import PaymentStatus, RiskLevel
from app.knowledge.records import DEFAULT_CORPORATE_NAME
from app.knowledge.resolver import KnowledgeBaseResolver


def test_missing_corporate_id_yields_defaults(resolver):
    knowledge = asyncio.run(resolver.resolve_corporate_knowledge(None))
    assert knowledge.is_default is True
    assert knowledge.profile.name == DEFAULT_CORPORATE_NAME
    assert knowledge.negotiation_limits.max_discount_percent == 15
    assert knowledge.negotiation_limits.max_term_months == 12
    assert knowledge.negotiation_limits.escalation_thresholds.conversation_length == 15


def test_unknown_corporate_client_is_default_and_not_cached(resolver):
    first = asyncio.run(resolver.resolve_corporate_knowledge("missing"))
    second = asyncio.run(resolver.resolve_corporate_knowledge("missing"))
    assert first.is_default and second.is_default
    assert first is not second


def test_corporate_knowledge_merges_partial_thresholds(resolver, seed):
    knowledge = asyncio.run(resolver.resolve_corporate_knowledge(seed.corporate_client_id))
    assert knowledge.is_default is False
    assert knowledge.profile.name == "Banco Andino"
    limits = knowledge.negotiation_limits
    assert limits.max_discount_percent == 25
    assert limits.max_term_months == 24
    assert limits.escalation_thresholds.conversation_length == 10
    assert limits.escalation_thresholds.discount_requested == 30
    assert limits.escalation_thresholds.time_requested == 18
    assert [p.title for p in knowledge.policies] == ["Descuentos"]
    assert [r.trigger for r in knowledge.custom_responses] == ["horario"]


def test_corporate_knowledge_is_cached_until_invalidated(resolver, seed):
    first = asyncio.run(resolver.resolve_corporate_knowledge(seed.corporate_client_id))
    assert asyncio.run(resolver.resolve_corporate_knowledge(seed.corporate_client_id)) is first

    assert resolver.invalidate_corporate(seed.corporate_client_id) is True
    assert resolver.invalidate_corporate(seed.corporate_client_id) is False
    assert asyncio.run(resolver.resolve_corporate_knowledge(seed.corporate_client_id)) is not first


def test_debtor_knowledge_for_seeded_debtor(resolver, seed):
    knowledge = asyncio.run(resolver.resolve_debtor_knowledge(seed.debtor_id, seed.corporate_client_id))
    assert knowledge is not None
    assert knowledge.name == "María González"
    assert knowledge.debt_info.total_debt == 1_200_000
    assert knowledge.debt_info.days_overdue == 45
    assert knowledge.corporate_context.corporate_client_name == "Banco Andino"
    assert knowledge.personalization.risk_level == RiskLevel.LOW
    assert knowledge.summary()["debtor_id"] == seed.debtor_id


def test_unknown_debtor_or_debt_is_none(resolver, seed):
    assert asyncio.run(resolver.resolve_debtor_knowledge("nobody")) is None
    assert asyncio.run(resolver.resolve_debtor_knowledge(seed.debtor_id, "other-client")) is None


def test_debtor_knowledge_without_client_uses_latest_debt(resolver, seed):
    knowledge = asyncio.run(resolver.resolve_debtor_knowledge(seed.debtor_id))
    assert knowledge.corporate_context.corporate_client_id == seed.corporate_client_id


def test_debtor_knowledge_recomputed_without_debtor_cache(resolver, seed, session_factory):
    before = asyncio.run(resolver.resolve_debtor_knowledge(seed.debtor_id, seed.corporate_client_id))
    add_payments(session_factory, seed.debtor_id, [PaymentStatus.LATE] * 10)
    after = asyncio.run(resolver.resolve_debtor_knowledge(seed.debtor_id, seed.corporate_client_id))
    assert before.personalization.risk_level == RiskLevel.LOW
    assert after.personalization.risk_level == RiskLevel.MEDIUM


def test_debtor_cache_serves_until_invalidated(store, seed, session_factory):
    resolver = KnowledgeBaseResolver(
        store,
        corporate_cache=TTLCache(ttl_seconds=300),
        debtor_cache=TTLCache(ttl_seconds=300),
        retry=NO_BACKOFF,
    )
    first = asyncio.run(resolver.resolve_debtor_knowledge(seed.debtor_id, seed.corporate_client_id))
    add_payments(session_factory, seed.debtor_id, [PaymentStatus.LATE] * 10)
    assert asyncio.run(resolver.resolve_debtor_knowledge(seed.debtor_id, seed.corporate_client_id)) is first

    assert resolver.invalidate_debtor(seed.debtor_id) is True
    refreshed = asyncio.run(resolver.resolve_debtor_knowledge(seed.debtor_id, seed.corporate_client_id))
    assert refreshed.personalization.risk_level == RiskLevel.MEDIUM
