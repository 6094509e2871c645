"""Conversation orchestrator: runs one debtor turn end to end.

A turn reads the conversation, appends the inbound message, resolves
knowledge, analyzes, decides escalation, and appends either the AI reply or a
handoff message. Turns for one conversation never overlap.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from app.core.enums import (
    AI_TURN_STATUSES,
    TERMINAL_STATUSES,
    AnalyticsOutcome,
    ConversationStatus,
    ProposalStatus,
    SenderType,
)
from app.core.exceptions import ConversationClosedError, NotFoundError, ValidationError
from app.core.logging import LogContext, build_log_event
from app.database.records import ConversationSnapshot, MessageSnapshot
from app.database.store import MAX_MESSAGE_LENGTH, NegotiationStore
from app.knowledge.records import CorporateKnowledge, NegotiationLimits
from app.knowledge.resolver import KnowledgeBaseResolver
from app.negotiation.analyzer import analyze
from app.negotiation.escalation import EscalationEngine
from app.negotiation.records import Analysis, EscalationDecision, GeneratedResponse
from app.negotiation.responses import ResponseGenerator, handoff_message, technical_error_response
from app.orchestration.locks import ConversationLockRegistry
from app.orchestration.state_machine import conversation_state_machine
from app.services.analytics_service import AnalyticsAggregator
from app.utils.ids import new_trace_id
from app.utils.retry import RetryPolicy
from app.utils.validators import sanitize_text

logger = logging.getLogger(__name__)

OUTCOME_BY_STATUS = {
    ConversationStatus.AGREED: AnalyticsOutcome.AGREEMENT,
    ConversationStatus.REJECTED: AnalyticsOutcome.REJECTED,
    ConversationStatus.ABANDONED: AnalyticsOutcome.ABANDONED,
}


@dataclass(frozen=True)
class TurnResult:
    conversation: ConversationSnapshot
    inbound: MessageSnapshot
    reply: MessageSnapshot | None = None
    analysis: Analysis | None = None
    escalation: EscalationDecision | None = None
    response: GeneratedResponse | None = None

    @property
    def escalated(self) -> bool:
        return self.conversation.status == ConversationStatus.ESCALATED


@dataclass(frozen=True)
class _ReplyPlan:
    content: str
    escalation: EscalationDecision
    response: GeneratedResponse | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def _minutes_since(started: datetime | None) -> float:
    if started is None:
        return 0.0
    return round((datetime.now(timezone.utc) - started).total_seconds() / 60, 1)


class ConversationOrchestrator:
    def __init__(
        self,
        store: NegotiationStore,
        resolver: KnowledgeBaseResolver,
        analytics: AnalyticsAggregator,
        locks: ConversationLockRegistry | None = None,
        escalation: EscalationEngine | None = None,
        generator: ResponseGenerator | None = None,
        retry: RetryPolicy | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self.analytics = analytics
        self.locks = locks or ConversationLockRegistry()
        self.escalation = escalation or EscalationEngine()
        self.generator = generator or ResponseGenerator()
        self.retry = retry or RetryPolicy()
        self.timeout_seconds = timeout_seconds

    # ==========================================================================
    # DEBTOR TURNS
    # ==========================================================================

    async def process_message(self, conversation_id: str, content: str) -> TurnResult:
        """Run one debtor turn. Raises ``PersistenceError`` if the turn could not be stored."""
        async with self.locks.hold(conversation_id):
            return await self._run_turn(conversation_id, content)

    async def _run_turn(self, conversation_id: str, content: str) -> TurnResult:
        conversation = await self._load(conversation_id)
        context = LogContext(
            conversation_id=conversation.id,
            company_id=conversation.company_id,
            debtor_id=conversation.debtor_id,
            corporate_client_id=conversation.corporate_client_id,
            trace_id=new_trace_id(),
        )
        if conversation.status in TERMINAL_STATUSES:
            raise ConversationClosedError(
                f"Conversation {conversation_id} is {conversation.status.value} and accepts no new messages"
            )

        if conversation.status not in AI_TURN_STATUSES or not conversation.ai_enabled:
            inbound, updated = await self.retry.run(
                self.store.append_message,
                conversation_id,
                SenderType.DEBTOR,
                content,
                {"ai_handled": False},
                operation="append_message",
            )
            logger.info("negotiation.turn.human_handled", extra=build_log_event("negotiation.turn.human_handled", context))
            return TurnResult(conversation=updated, inbound=inbound)

        analysis = analyze(content)
        inbound = await self._unanswered_inbound(conversation, content)
        if inbound is not None:
            # Retry of a turn whose reply was never stored; escalation sees the count before this message.
            conversation = replace(conversation, message_count=inbound.sequence - 1)
            logger.info(
                "negotiation.turn.resumed",
                extra=build_log_event("negotiation.turn.resumed", context, message_id=inbound.id),
            )
        else:
            inbound, _ = await self.retry.run(
                self.store.append_message,
                conversation_id,
                SenderType.DEBTOR,
                content,
                {"analysis": analysis.to_dict(), "trace_id": context.trace_id},
                operation="append_message",
            )

        try:
            plan = await asyncio.wait_for(
                self._plan_reply(conversation, content, analysis, context),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                "negotiation.turn.timeout",
                extra=build_log_event("negotiation.turn.timeout", context, timeout_seconds=self.timeout_seconds),
            )
            plan = self._safety_net(analysis, error="timeout")

        if plan.escalation.should_escalate:
            conversation_state_machine.assert_transition(conversation.status, ConversationStatus.ESCALATED)
            reply, updated = await self.retry.run(
                self.store.append_message,
                conversation_id,
                SenderType.AI_ASSISTANT,
                plan.content,
                plan.metadata,
                status=ConversationStatus.ESCALATED,
                ai_enabled=False,
                operation="append_message",
            )
            logger.warning(
                "negotiation.turn.escalated",
                extra=build_log_event(
                    "negotiation.turn.escalated",
                    context,
                    reason=plan.escalation.reason.value if plan.escalation.reason else None,
                    priority=plan.escalation.priority.value if plan.escalation.priority else None,
                ),
            )
            await self._track_outcome(
                updated,
                "negotiation_escalated",
                AnalyticsOutcome.ESCALATED,
                {"reason": plan.escalation.reason.value if plan.escalation.reason else None},
            )
        else:
            next_status = None
            if conversation.status == ConversationStatus.ACTIVE:
                conversation_state_machine.assert_transition(conversation.status, ConversationStatus.NEGOTIATING)
                next_status = ConversationStatus.NEGOTIATING
            reply, updated = await self.retry.run(
                self.store.append_message,
                conversation_id,
                SenderType.AI_ASSISTANT,
                plan.content,
                plan.metadata,
                status=next_status,
                operation="append_message",
            )
            logger.info(
                "negotiation.turn.replied",
                extra=build_log_event(
                    "negotiation.turn.replied",
                    context,
                    intent=analysis.intent.value,
                    response_type=plan.response.type.value if plan.response else None,
                ),
            )

        self.resolver.invalidate_debtor(conversation.debtor_id)
        return TurnResult(
            conversation=updated,
            inbound=inbound,
            reply=reply,
            analysis=analysis,
            escalation=plan.escalation,
            response=plan.response,
        )

    async def _unanswered_inbound(self, conversation: ConversationSnapshot, content: str) -> MessageSnapshot | None:
        """The trailing debtor message of a failed AI turn, when ``content`` repeats it."""
        latest = await self.retry.run(self.store.latest_message, conversation.id, operation="latest_message")
        if latest is None or latest.sender_type != SenderType.DEBTOR or "analysis" not in latest.metadata:
            return None
        if latest.content != sanitize_text(content, max_len=MAX_MESSAGE_LENGTH):
            return None
        return latest

    async def _plan_reply(
        self,
        conversation: ConversationSnapshot,
        content: str,
        analysis: Analysis,
        context: LogContext,
    ) -> _ReplyPlan:
        try:
            corporate, debtor = await asyncio.gather(
                self.resolver.resolve_corporate_knowledge(conversation.corporate_client_id),
                self.resolver.resolve_debtor_knowledge(conversation.debtor_id, conversation.corporate_client_id),
            )
        except Exception as exc:
            logger.exception(
                "negotiation.knowledge.failed",
                extra=build_log_event("negotiation.knowledge.failed", context, error=str(exc)),
            )
            return self._safety_net(analysis, error=str(exc))

        limits = self._limits_for(conversation, corporate)
        decision = self.escalation.decide(content, analysis, conversation, limits, debtor)
        base_metadata: dict[str, Any] = {
            "analysis": analysis.to_dict(),
            "escalation": decision.to_dict(),
            "debtor": debtor.summary() if debtor else None,
            "corporate_client": None if corporate.is_default else corporate.profile.name,
            "trace_id": context.trace_id,
        }

        if decision.should_escalate:
            return _ReplyPlan(
                content=handoff_message(decision.reason, debtor, corporate),
                escalation=decision,
                metadata={**base_metadata, "confidence": 1.0, "escalation_triggered": True},
            )

        response = self.generator.generate(
            content,
            analysis,
            limits,
            proposal=conversation.negotiation_context.get("proposal"),
            debtor=debtor,
            corporate=corporate,
        )
        if response.escalation_triggered:
            decision = EscalationDecision.technical_error()
            base_metadata["escalation"] = decision.to_dict()
        return _ReplyPlan(
            content=response.content,
            escalation=decision,
            response=response,
            metadata={**base_metadata, **response.to_metadata()},
        )

    @staticmethod
    def _limits_for(conversation: ConversationSnapshot, corporate: CorporateKnowledge) -> NegotiationLimits:
        # Live corporate policy wins over the snapshot taken when the conversation opened.
        if not corporate.is_default:
            return corporate.negotiation_limits
        return NegotiationLimits.from_dict(conversation.negotiation_context.get("limits"))

    @staticmethod
    def _safety_net(analysis: Analysis, error: str) -> _ReplyPlan:
        response = technical_error_response(error=error)
        decision = EscalationDecision.technical_error()
        return _ReplyPlan(
            content=response.content,
            escalation=decision,
            response=response,
            metadata={"analysis": analysis.to_dict(), "escalation": decision.to_dict(), **response.to_metadata()},
        )

    # ==========================================================================
    # HUMAN AGENT AND OUTCOMES
    # ==========================================================================

    async def post_human_message(self, conversation_id: str, content: str, agent_id: str | None = None) -> MessageSnapshot:
        """Append a human agent message; the AI stops replying on this conversation."""
        async with self.locks.hold(conversation_id):
            conversation = await self._load(conversation_id)
            if conversation.status in TERMINAL_STATUSES:
                raise ConversationClosedError(f"Conversation {conversation_id} is {conversation.status.value}")
            message, _ = await self.retry.run(
                self.store.append_message,
                conversation_id,
                SenderType.HUMAN_AGENT,
                content,
                {"agent_id": agent_id},
                ai_enabled=False,
                operation="append_message",
            )
            return message

    async def record_outcome(
        self,
        conversation_id: str,
        outcome: ConversationStatus | str,
        note: str | None = None,
    ) -> ConversationSnapshot:
        """Close a conversation as agreed, rejected or abandoned and emit its analytics event."""
        try:
            target = ConversationStatus(outcome)
        except ValueError as exc:
            raise ValidationError(f"Unknown outcome: {outcome}") from exc
        if target not in OUTCOME_BY_STATUS:
            raise ValidationError(f"Outcome must be one of agreed, rejected, abandoned; got {target.value}")

        async with self.locks.hold(conversation_id):
            conversation = await self._load(conversation_id)
            conversation_state_machine.assert_transition(conversation.status, target)
            updated = await self.retry.run(
                self.store.update_conversation,
                conversation_id,
                status=target,
                ai_enabled=False,
                summary=note,
                operation="update_conversation",
            )
            if target == ConversationStatus.AGREED:
                await self.retry.run(
                    self.store.update_proposal_status,
                    conversation.proposal_id,
                    ProposalStatus.ACCEPTED,
                    operation="update_proposal_status",
                )
                proposal = await self.retry.run(
                    self.store.get_proposal, conversation.proposal_id, operation="get_proposal"
                )
                await self.retry.run(
                    self.store.create_payment_agreement,
                    proposal,
                    conversation.debtor_id,
                    operation="create_payment_agreement",
                )
            elif target == ConversationStatus.REJECTED:
                await self.retry.run(
                    self.store.update_proposal_status,
                    conversation.proposal_id,
                    ProposalStatus.REJECTED,
                    operation="update_proposal_status",
                )

            await self._track_outcome(updated, f"negotiation_{target.value}", OUTCOME_BY_STATUS[target], {"note": note})
            self.resolver.invalidate_debtor(conversation.debtor_id)
            logger.info(
                "negotiation.conversation.closed",
                extra={
                    "event": "negotiation.conversation.closed",
                    "conversation_id": conversation_id,
                    "status": target.value,
                },
            )
            return updated

    async def abandon(self, conversation_id: str, note: str | None = None) -> ConversationSnapshot:
        return await self.record_outcome(conversation_id, ConversationStatus.ABANDONED, note=note)

    async def get_conversation(self, conversation_id: str) -> ConversationSnapshot:
        return await self._load(conversation_id)

    async def list_messages(self, conversation_id: str) -> list[MessageSnapshot]:
        await self._load(conversation_id)
        return await self.retry.run(self.store.list_messages, conversation_id, operation="list_messages")

    # ==========================================================================
    # HELPERS
    # ==========================================================================

    async def _load(self, conversation_id: str) -> ConversationSnapshot:
        conversation = await self.retry.run(self.store.get_conversation, conversation_id, operation="get_conversation")
        if conversation is None:
            raise NotFoundError(f"Conversation {conversation_id} not found")
        return conversation

    async def _track_outcome(
        self,
        conversation: ConversationSnapshot,
        event_type: str,
        outcome: AnalyticsOutcome,
        metadata: dict[str, Any],
    ) -> None:
        try:
            messages = await self.retry.run(self.store.list_messages, conversation.id, operation="list_messages")
            await self.analytics.track(
                conversation.company_id,
                event_type,
                {
                    "outcome": outcome.value,
                    "proposal_id": conversation.proposal_id,
                    "conversation_id": conversation.id,
                    "conversation_duration_minutes": _minutes_since(conversation.created_at),
                    "ai_messages": sum(1 for m in messages if m.sender_type == SenderType.AI_ASSISTANT),
                    "metadata": {k: v for k, v in metadata.items() if v is not None},
                },
            )
        except Exception:
            # Conversation state is already committed at this point.
            logger.exception(
                "analytics.track_failed",
                extra={"event": "analytics.track_failed", "conversation_id": conversation.id, "event_type": event_type},
            )
