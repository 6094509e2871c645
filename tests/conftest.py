from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.cache import TTLCache
from app.core.enums import ConversationStatus, PaymentStatus, ProposalStatus
from app.database.store import NegotiationStore
from app.knowledge.resolver import KnowledgeBaseResolver
from app.models import (
    Base,
    CorporateClient,
    CorporatePolicy,
    CustomResponse,
    Debt,
    Debtor,
    NegotiationAIConfig,
    Payment,
    Proposal,
)
from app.orchestration.conversation_orchestrator import ConversationOrchestrator
from app.services.analytics_service import AnalyticsAggregator
from app.utils.retry import RetryPolicy

NO_BACKOFF = RetryPolicy(max_retries=2, base_backoff_seconds=0)


@dataclass
class Seed:
    corporate_client_id: str
    debtor_id: str
    debt_id: str
    proposal_id: str
    company_id: str = "company-1"


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'negotiation_test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return NegotiationStore(session_factory)


@pytest.fixture
def seed(session_factory):
    """One corporate client with policy, a debtor with a debt and a pending proposal."""
    session = session_factory()
    try:
        client = CorporateClient(business_name="Banco Andino", rut="76.123.456-7", industry="Banca")
        session.add(client)
        session.flush()
        session.add(
            NegotiationAIConfig(
                corporate_client_id=client.id,
                max_negotiation_discount=25,
                max_negotiation_term=24,
                escalation_thresholds={"conversationLength": 10, "discountRequested": 30},
            )
        )
        session.add(CorporatePolicy(corporate_client_id=client.id, title="Descuentos", content="Hasta 25%"))
        session.add(CustomResponse(corporate_client_id=client.id, trigger="horario", response="Lunes a viernes"))
        debtor = Debtor(full_name="María González", rut="12.345.678-9", email="maria@example.com")
        session.add(debtor)
        session.flush()
        debt = Debt(
            debtor_id=debtor.id,
            corporate_client_id=client.id,
            original_amount=1_500_000,
            current_amount=1_200_000,
            due_date=date(2026, 6, 1),
            days_overdue=45,
            debt_type="tarjeta",
        )
        session.add(debt)
        session.flush()
        proposal = Proposal(
            company_id="company-1",
            company_name="Banco Andino",
            debtor_id=debtor.id,
            debt_id=debt.id,
            corporate_client_id=client.id,
            total_amount=1_200_000,
            installments=6,
            installment_amount=200_000,
            status=ProposalStatus.PENDING,
        )
        session.add(proposal)
        session.commit()
        return Seed(
            corporate_client_id=client.id,
            debtor_id=debtor.id,
            debt_id=debt.id,
            proposal_id=proposal.id,
        )
    finally:
        session.close()


def add_payments(session_factory, debtor_id: str, statuses: list[PaymentStatus]) -> None:
    session = session_factory()
    try:
        for status in statuses:
            session.add(Payment(debtor_id=debtor_id, amount=50_000, status=status))
        session.commit()
    finally:
        session.close()


def open_conversation(
    store: NegotiationStore,
    seed: Seed,
    status: ConversationStatus = ConversationStatus.NEGOTIATING,
    ai_enabled: bool = True,
    limits: dict | None = None,
):
    proposal = store.get_proposal(seed.proposal_id)
    context = {"proposal": proposal.to_context(), "limits": limits or {}}
    return store.create_conversation(
        proposal,
        seed.debtor_id,
        status,
        context,
        ai_enabled=ai_enabled,
        corporate_client_id=seed.corporate_client_id,
    )


class FixedClock:
    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def resolver(store):
    return KnowledgeBaseResolver(store, corporate_cache=TTLCache(ttl_seconds=300), retry=NO_BACKOFF)


@pytest.fixture
def analytics(store):
    return AnalyticsAggregator(store, TTLCache(ttl_seconds=300))


@pytest.fixture
def orchestrator(store, resolver, analytics):
    return ConversationOrchestrator(store, resolver, analytics, retry=NO_BACKOFF, timeout_seconds=5.0)
