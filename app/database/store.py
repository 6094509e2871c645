"""Data-access layer for negotiation conversations.

Every public method opens its own session, commits or rolls back, and hands
back immutable snapshots. Backend failures surface as ``PersistenceError``.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.enums import (
    AI_TURN_STATUSES,
    AnalyticsOutcome,
    ConversationStatus,
    PaymentStatus,
    ProposalStatus,
    SenderType,
    TERMINAL_STATUSES,
)
from app.core.exceptions import NotFoundError, PersistenceError
from app.database.records import (
    AnalyticsEventRecord,
    ConversationSnapshot,
    MessageSnapshot,
    ProposalSnapshot,
)
from app.knowledge.records import (
    CorporateContext,
    CorporateProfile,
    CorporateSource,
    CustomResponseRecord,
    DebtInfo,
    DebtorSource,
    NegotiationRecord,
    PaymentRecord,
    PersonalInfo,
    PolicyRecord,
)
from app.models import (
    AnalyticsEvent,
    Conversation,
    CorporateClient,
    CorporatePolicy,
    CustomResponse,
    Debt,
    Debtor,
    Message,
    NegotiationAIConfig,
    Payment,
    PaymentAgreement,
    Proposal,
)
from app.models.base import as_utc, utcnow
from app.utils.validators import sanitize_text

logger = logging.getLogger(__name__)

NEGOTIATION_HISTORY_LIMIT = 5
PAYMENT_HISTORY_LIMIT = 10
MAX_MESSAGE_LENGTH = 8000


def _proposal_snapshot(row: Proposal) -> ProposalSnapshot:
    return ProposalSnapshot(
        id=row.id,
        company_id=row.company_id,
        company_name=row.company_name or "",
        total_amount=float(row.total_amount or 0),
        installments=int(row.installments or 0),
        installment_amount=float(row.installment_amount or 0),
        status=row.status,
        debtor_id=row.debtor_id,
        debt_id=row.debt_id,
        corporate_client_id=row.corporate_client_id,
        due_date=row.due_date,
    )


def _conversation_snapshot(row: Conversation) -> ConversationSnapshot:
    return ConversationSnapshot(
        id=row.id,
        proposal_id=row.proposal_id,
        debtor_id=row.debtor_id,
        company_id=row.company_id,
        corporate_client_id=row.corporate_client_id,
        status=row.status,
        ai_enabled=bool(row.ai_enabled),
        message_count=int(row.message_count or 0),
        negotiation_context=dict(row.negotiation_context or {}),
        summary=row.summary,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
        closed_at=as_utc(row.closed_at),
    )


def _message_snapshot(row: Message) -> MessageSnapshot:
    return MessageSnapshot(
        id=row.id,
        conversation_id=row.conversation_id,
        sequence=row.sequence,
        sender_type=row.sender_type,
        content=row.content,
        metadata=dict(row.message_metadata or {}),
        created_at=as_utc(row.created_at),
    )


def _ai_config_dict(row: NegotiationAIConfig) -> dict[str, Any]:
    return {
        "max_negotiation_discount": row.max_negotiation_discount,
        "max_negotiation_term": row.max_negotiation_term,
        "escalation_thresholds": dict(row.escalation_thresholds or {}),
        "auto_respond": bool(row.auto_respond),
        "working_hours": dict(row.working_hours or {}),
    }


def _event_record(row: AnalyticsEvent) -> AnalyticsEventRecord:
    return AnalyticsEventRecord(
        id=row.id,
        company_id=row.company_id,
        proposal_id=row.proposal_id,
        conversation_id=row.conversation_id,
        event_type=row.event_type,
        outcome=row.outcome,
        conversation_duration_minutes=row.conversation_duration_minutes,
        ai_messages=int(row.ai_messages or 0),
        metadata=dict(row.event_metadata or {}),
        created_at=as_utc(row.created_at),
    )


class NegotiationStore:
    """Session-per-operation access to proposals, conversations and knowledge rows."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str, **log_fields: Any) -> Generator[Session, None, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception(
                "store.operation_failed",
                extra={"event": "store.operation_failed", "operation": operation, **log_fields},
            )
            raise PersistenceError(f"{operation} failed") from exc
        finally:
            session.close()

    # ==========================================================================
    # PROPOSALS
    # ==========================================================================

    def get_proposal(self, proposal_id: str) -> ProposalSnapshot | None:
        with self._session("get_proposal", proposal_id=proposal_id) as session:
            row = session.get(Proposal, proposal_id)
            return _proposal_snapshot(row) if row else None

    def update_proposal_status(self, proposal_id: str, status: ProposalStatus) -> ProposalSnapshot:
        with self._session("update_proposal_status", proposal_id=proposal_id) as session:
            row = session.get(Proposal, proposal_id)
            if row is None:
                raise NotFoundError(f"Proposal {proposal_id} not found")
            row.status = status
            session.commit()
            logger.info(
                "proposal.status.updated",
                extra={"event": "proposal.status.updated", "proposal_id": proposal_id, "status": status.value},
            )
            return _proposal_snapshot(row)

    def create_payment_agreement(self, proposal: ProposalSnapshot, debtor_id: str) -> str:
        with self._session("create_payment_agreement", proposal_id=proposal.id) as session:
            agreement = PaymentAgreement(
                proposal_id=proposal.id,
                debtor_id=debtor_id,
                company_id=proposal.company_id,
                total_amount=proposal.total_amount,
                installments=proposal.installments,
                installment_amount=proposal.installment_amount,
                status="active",
            )
            session.add(agreement)
            session.commit()
            return agreement.id

    def get_ai_config(self, corporate_client_id: str | None) -> dict[str, Any] | None:
        if not corporate_client_id:
            return None
        with self._session("get_ai_config", corporate_client_id=corporate_client_id) as session:
            row = (
                session.query(NegotiationAIConfig)
                .filter(NegotiationAIConfig.corporate_client_id == corporate_client_id)
                .first()
            )
            return _ai_config_dict(row) if row else None

    # ==========================================================================
    # CONVERSATIONS
    # ==========================================================================

    def create_conversation(
        self,
        proposal: ProposalSnapshot,
        debtor_id: str,
        status: ConversationStatus,
        negotiation_context: dict[str, Any],
        ai_enabled: bool = True,
        corporate_client_id: str | None = None,
    ) -> ConversationSnapshot:
        with self._session("create_conversation", proposal_id=proposal.id) as session:
            row = Conversation(
                proposal_id=proposal.id,
                debtor_id=debtor_id,
                company_id=proposal.company_id,
                corporate_client_id=corporate_client_id or proposal.corporate_client_id,
                status=status,
                ai_enabled=ai_enabled,
                message_count=0,
                negotiation_context=negotiation_context,
            )
            session.add(row)
            session.commit()
            logger.info(
                "conversation.created",
                extra={"event": "conversation.created", "conversation_id": row.id, "proposal_id": proposal.id},
            )
            return _conversation_snapshot(row)

    def get_conversation(self, conversation_id: str) -> ConversationSnapshot | None:
        with self._session("get_conversation", conversation_id=conversation_id) as session:
            row = session.get(Conversation, conversation_id)
            return _conversation_snapshot(row) if row else None

    def append_message(
        self,
        conversation_id: str,
        sender_type: SenderType,
        content: str,
        metadata: dict[str, Any] | None = None,
        status: ConversationStatus | None = None,
        ai_enabled: bool | None = None,
    ) -> tuple[MessageSnapshot, ConversationSnapshot]:
        """Append one message and apply any status change in the same transaction.

        The sequence number is derived from the locked conversation row so that
        message order and ``message_count`` never disagree.
        """
        with self._session("append_message", conversation_id=conversation_id) as session:
            conversation = (
                session.query(Conversation)
                .filter(Conversation.id == conversation_id)
                .with_for_update()
                .first()
            )
            if conversation is None:
                raise NotFoundError(f"Conversation {conversation_id} not found")

            sequence = int(conversation.message_count or 0) + 1
            message = Message(
                conversation_id=conversation_id,
                sequence=sequence,
                sender_type=sender_type,
                content=sanitize_text(content, max_len=MAX_MESSAGE_LENGTH),
                message_metadata=metadata or {},
            )
            session.add(message)
            conversation.message_count = sequence
            conversation.updated_at = utcnow()
            if status is not None:
                conversation.status = status
                if status in TERMINAL_STATUSES:
                    conversation.closed_at = utcnow()
            if ai_enabled is not None:
                conversation.ai_enabled = ai_enabled
            session.commit()
            return _message_snapshot(message), _conversation_snapshot(conversation)

    def update_conversation(
        self,
        conversation_id: str,
        status: ConversationStatus | None = None,
        ai_enabled: bool | None = None,
        summary: str | None = None,
        negotiation_context: dict[str, Any] | None = None,
    ) -> ConversationSnapshot:
        with self._session("update_conversation", conversation_id=conversation_id) as session:
            row = session.get(Conversation, conversation_id)
            if row is None:
                raise NotFoundError(f"Conversation {conversation_id} not found")
            if status is not None:
                row.status = status
                if status in TERMINAL_STATUSES:
                    row.closed_at = utcnow()
            if ai_enabled is not None:
                row.ai_enabled = ai_enabled
            if summary is not None:
                row.summary = summary
            if negotiation_context is not None:
                row.negotiation_context = negotiation_context
            session.commit()
            return _conversation_snapshot(row)

    def list_messages(self, conversation_id: str) -> list[MessageSnapshot]:
        with self._session("list_messages", conversation_id=conversation_id) as session:
            rows = (
                session.query(Message)
                .filter(Message.conversation_id == conversation_id)
                .order_by(Message.sequence.asc())
                .all()
            )
            return [_message_snapshot(row) for row in rows]

    def list_active_conversations(self, company_id: str) -> list[ConversationSnapshot]:
        with self._session("list_active_conversations", company_id=company_id) as session:
            rows = (
                session.query(Conversation)
                .filter(
                    Conversation.company_id == company_id,
                    Conversation.status.in_(tuple(AI_TURN_STATUSES)),
                    Conversation.ai_enabled.is_(True),
                )
                .order_by(Conversation.updated_at.desc())
                .all()
            )
            return [_conversation_snapshot(row) for row in rows]

    def latest_message(self, conversation_id: str) -> MessageSnapshot | None:
        with self._session("latest_message", conversation_id=conversation_id) as session:
            row = (
                session.query(Message)
                .filter(Message.conversation_id == conversation_id)
                .order_by(Message.sequence.desc())
                .first()
            )
            return _message_snapshot(row) if row else None

    # ==========================================================================
    # KNOWLEDGE SOURCES
    # ==========================================================================

    def fetch_corporate_source(self, corporate_client_id: str) -> CorporateSource | None:
        with self._session("fetch_corporate_source", corporate_client_id=corporate_client_id) as session:
            client = session.get(CorporateClient, corporate_client_id)
            if client is None:
                return None
            config = (
                session.query(NegotiationAIConfig)
                .filter(NegotiationAIConfig.corporate_client_id == corporate_client_id)
                .first()
            )
            policies = (
                session.query(CorporatePolicy)
                .filter(CorporatePolicy.corporate_client_id == corporate_client_id, CorporatePolicy.is_active.is_(True))
                .order_by(CorporatePolicy.created_at.asc())
                .all()
            )
            responses = (
                session.query(CustomResponse)
                .filter(CustomResponse.corporate_client_id == corporate_client_id, CustomResponse.is_active.is_(True))
                .order_by(CustomResponse.created_at.asc())
                .all()
            )
            return CorporateSource(
                profile=CorporateProfile(
                    id=client.id,
                    name=client.business_name,
                    rut=client.rut or "",
                    industry=client.industry or "",
                    category=client.display_category,
                    description=client.description,
                    website=client.website,
                    contact_email=client.contact_email,
                    contact_phone=client.contact_phone,
                    address=client.address,
                ),
                ai_config=_ai_config_dict(config) if config else None,
                policies=tuple(
                    PolicyRecord(id=p.id, title=p.title, content=p.content, policy_type=p.policy_type) for p in policies
                ),
                custom_responses=tuple(
                    CustomResponseRecord(id=r.id, trigger=r.trigger, response=r.response) for r in responses
                ),
            )

    def fetch_debtor_source(self, debtor_id: str, corporate_client_id: str | None = None) -> DebtorSource | None:
        """Load the debtor, the matching debt and recent history.

        Without a corporate client the debtor's most recent debt is used. A
        debtor with no matching debt yields ``None``.
        """
        with self._session("fetch_debtor_source", debtor_id=debtor_id) as session:
            debtor = session.get(Debtor, debtor_id)
            if debtor is None:
                return None

            debt_query = session.query(Debt).filter(Debt.debtor_id == debtor_id)
            if corporate_client_id:
                debt_query = debt_query.filter(Debt.corporate_client_id == corporate_client_id)
            debt = debt_query.order_by(Debt.created_at.desc()).first()
            if debt is None:
                return None

            client = None
            if debt.corporate_client_id:
                client = session.get(CorporateClient, debt.corporate_client_id)

            conversation_query = session.query(Conversation).filter(Conversation.debtor_id == debtor_id)
            if corporate_client_id:
                conversation_query = conversation_query.filter(Conversation.corporate_client_id == corporate_client_id)
            conversations = (
                conversation_query.order_by(Conversation.created_at.desc()).limit(NEGOTIATION_HISTORY_LIMIT).all()
            )
            payments = (
                session.query(Payment)
                .filter(Payment.debtor_id == debtor_id)
                .order_by(Payment.created_at.desc())
                .limit(PAYMENT_HISTORY_LIMIT)
                .all()
            )

            negotiations = tuple(
                NegotiationRecord(
                    id=conv.id,
                    status=conv.status.value,
                    summary=conv.summary,
                    created_at=as_utc(conv.created_at),
                    messages=tuple(msg.content for msg in conv.messages),
                )
                for conv in conversations
            )
            return DebtorSource(
                personal_info=PersonalInfo(
                    id=debtor.id,
                    name=debtor.full_name,
                    rut=debtor.rut,
                    email=debtor.email,
                    phone=debtor.phone,
                    customer_since=as_utc(debtor.created_at),
                ),
                debt_info=DebtInfo(
                    total_debt=float(debt.current_amount if debt.current_amount is not None else debt.original_amount),
                    original_amount=float(debt.original_amount),
                    due_date=debt.due_date,
                    days_overdue=int(debt.days_overdue or 0),
                    debt_type=debt.debt_type,
                    status=debt.status,
                ),
                corporate_context=CorporateContext(
                    corporate_client_id=client.id if client else None,
                    corporate_client_name=client.business_name if client else None,
                    corporate_client_rut=client.rut if client else None,
                ),
                negotiation_history=negotiations,
                payment_history=tuple(
                    PaymentRecord(
                        id=p.id,
                        amount=float(p.amount),
                        status=p.status,
                        created_at=as_utc(p.created_at),
                    )
                    for p in payments
                ),
            )

    def record_payment(self, debtor_id: str, amount: float, status: PaymentStatus) -> PaymentRecord:
        with self._session("record_payment", debtor_id=debtor_id) as session:
            if session.get(Debtor, debtor_id) is None:
                raise NotFoundError(f"Debtor {debtor_id} not found")
            row = Payment(debtor_id=debtor_id, amount=amount, status=status)
            session.add(row)
            session.commit()
            return PaymentRecord(id=row.id, amount=float(row.amount), status=row.status, created_at=as_utc(row.created_at))

    # ==========================================================================
    # CORPORATE KNOWLEDGE WRITES
    # ==========================================================================

    def upsert_ai_config(self, corporate_client_id: str, **fields: Any) -> dict[str, Any]:
        """Create or update the client's AI configuration; ``None`` fields are left untouched."""
        with self._session("upsert_ai_config", corporate_client_id=corporate_client_id) as session:
            if session.get(CorporateClient, corporate_client_id) is None:
                raise NotFoundError(f"Corporate client {corporate_client_id} not found")
            row = (
                session.query(NegotiationAIConfig)
                .filter(NegotiationAIConfig.corporate_client_id == corporate_client_id)
                .first()
            )
            if row is None:
                row = NegotiationAIConfig(corporate_client_id=corporate_client_id)
                session.add(row)
            for key, value in fields.items():
                if value is not None:
                    setattr(row, key, value)
            session.commit()
            return _ai_config_dict(row)

    def add_policy(
        self, corporate_client_id: str, title: str, content: str, policy_type: str = "general"
    ) -> PolicyRecord:
        with self._session("add_policy", corporate_client_id=corporate_client_id) as session:
            if session.get(CorporateClient, corporate_client_id) is None:
                raise NotFoundError(f"Corporate client {corporate_client_id} not found")
            row = CorporatePolicy(
                corporate_client_id=corporate_client_id,
                title=sanitize_text(title, max_len=255),
                content=sanitize_text(content, max_len=MAX_MESSAGE_LENGTH),
                policy_type=policy_type,
                is_active=True,
            )
            session.add(row)
            session.commit()
            return PolicyRecord(id=row.id, title=row.title, content=row.content, policy_type=row.policy_type)

    def set_policy_active(self, policy_id: str, is_active: bool) -> str:
        """Toggle a policy and return its corporate client id."""
        with self._session("set_policy_active", policy_id=policy_id) as session:
            row = session.get(CorporatePolicy, policy_id)
            if row is None:
                raise NotFoundError(f"Policy {policy_id} not found")
            row.is_active = is_active
            session.commit()
            return row.corporate_client_id

    def add_custom_response(self, corporate_client_id: str, trigger: str, response: str) -> CustomResponseRecord:
        with self._session("add_custom_response", corporate_client_id=corporate_client_id) as session:
            if session.get(CorporateClient, corporate_client_id) is None:
                raise NotFoundError(f"Corporate client {corporate_client_id} not found")
            row = CustomResponse(
                corporate_client_id=corporate_client_id,
                trigger=sanitize_text(trigger, max_len=255),
                response=sanitize_text(response, max_len=MAX_MESSAGE_LENGTH),
                is_active=True,
            )
            session.add(row)
            session.commit()
            return CustomResponseRecord(id=row.id, trigger=row.trigger, response=row.response)

    def set_custom_response_active(self, response_id: str, is_active: bool) -> str:
        with self._session("set_custom_response_active", response_id=response_id) as session:
            row = session.get(CustomResponse, response_id)
            if row is None:
                raise NotFoundError(f"Custom response {response_id} not found")
            row.is_active = is_active
            session.commit()
            return row.corporate_client_id

    # ==========================================================================
    # ANALYTICS
    # ==========================================================================

    def insert_analytics_event(
        self,
        event_type: str,
        company_id: str | None,
        proposal_id: str | None = None,
        conversation_id: str | None = None,
        outcome: AnalyticsOutcome | None = None,
        conversation_duration_minutes: float | None = None,
        ai_messages: int = 0,
        metadata: dict[str, Any] | None = None,
        created_at: datetime | None = None,
    ) -> AnalyticsEventRecord:
        with self._session("insert_analytics_event", company_id=company_id, event_type=event_type) as session:
            row = AnalyticsEvent(
                company_id=company_id,
                proposal_id=proposal_id,
                conversation_id=conversation_id,
                event_type=event_type,
                outcome=outcome,
                conversation_duration_minutes=conversation_duration_minutes,
                ai_messages=ai_messages,
                event_metadata=metadata or {},
                created_at=created_at or utcnow(),
            )
            session.add(row)
            session.commit()
            return _event_record(row)

    def list_analytics_events(
        self,
        company_id: str,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> list[AnalyticsEventRecord]:
        """Events for a company, newest first."""
        with self._session("list_analytics_events", company_id=company_id) as session:
            query = session.query(AnalyticsEvent).filter(AnalyticsEvent.company_id == company_id)
            if since is not None:
                query = query.filter(AnalyticsEvent.created_at >= since)
            if until is not None:
                query = query.filter(AnalyticsEvent.created_at < until)
            query = query.order_by(AnalyticsEvent.created_at.desc())
            if limit is not None:
                query = query.limit(limit)
            return [_event_record(row) for row in query.all()]
