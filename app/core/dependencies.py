"""Dependency providers for API handlers.

Services are process-wide singletons built from configuration; FastAPI routes
depend on :func:`get_services` so tests can override the whole container.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy.orm import sessionmaker

from app.core.cache import TTLCache
from app.core.config import Config, get_config
from app.database.db import get_session_factory
from app.database.store import NegotiationStore
from app.knowledge.resolver import KnowledgeBaseResolver
from app.orchestration.conversation_orchestrator import ConversationOrchestrator
from app.orchestration.locks import ConversationLockRegistry
from app.orchestration.proposal_actions import ProposalActionService
from app.services.analytics_service import AnalyticsAggregator
from app.services.policy_service import PolicyService
from app.utils.retry import RetryPolicy


@dataclass(frozen=True)
class EngineServices:
    store: NegotiationStore
    resolver: KnowledgeBaseResolver
    analytics: AnalyticsAggregator
    orchestrator: ConversationOrchestrator
    proposals: ProposalActionService
    policies: PolicyService


def get_settings() -> Config:
    """Return validated application configuration."""
    return get_config()


def build_services(session_factory: sessionmaker, config: Config) -> EngineServices:
    """Wire the engine around one session factory."""
    store = NegotiationStore(session_factory)
    retry = RetryPolicy(
        max_retries=config.NEGOTIATION_MAX_RETRIES,
        base_backoff_seconds=config.NEGOTIATION_RETRY_BACKOFF_SECONDS,
    )
    resolver = KnowledgeBaseResolver(
        store,
        corporate_cache=TTLCache(ttl_seconds=config.KNOWLEDGE_CACHE_TTL_SECONDS),
        debtor_cache=TTLCache(ttl_seconds=config.DEBTOR_CACHE_TTL_SECONDS),
        retry=retry,
    )
    analytics = AnalyticsAggregator(store, TTLCache(ttl_seconds=config.METRICS_CACHE_TTL_SECONDS))
    orchestrator = ConversationOrchestrator(
        store,
        resolver,
        analytics,
        locks=ConversationLockRegistry(reject_concurrent=config.REJECT_CONCURRENT_TURNS),
        retry=retry,
        timeout_seconds=config.NEGOTIATION_TIMEOUT_SECONDS,
    )
    return EngineServices(
        store=store,
        resolver=resolver,
        analytics=analytics,
        orchestrator=orchestrator,
        proposals=ProposalActionService(store, analytics, retry=retry),
        policies=PolicyService(store, resolver, retry=retry),
    )


@lru_cache(maxsize=1)
def get_services() -> EngineServices:
    """Process-wide service container bound to the active database."""
    return build_services(get_session_factory(), get_settings())
