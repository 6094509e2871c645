"""Debtor responses to a proposal: accept, reject, or open a negotiation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from app.core.enums import AnalyticsOutcome, ConversationStatus, ProposalAction, ProposalStatus, SenderType
from app.core.exceptions import NotFoundError, ValidationError
from app.database.records import ProposalSnapshot
from app.database.store import NegotiationStore
from app.knowledge.prompts import format_amount
from app.knowledge.records import NegotiationLimits
from app.services.analytics_service import AnalyticsAggregator
from app.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DebtorData:
    id: str
    name: str
    company_id: str | None = None
    corporate_client_id: str | None = None
    rejection_reason: str | None = None


@dataclass(frozen=True)
class ProposalActionResult:
    action: str
    message: str
    proposal_id: str
    success: bool = True
    conversation_id: str | None = None
    agreement_id: str | None = None


def opening_message(proposal: ProposalSnapshot, debtor_name: str) -> str:
    """AI-authored first message of a negotiation summarizing the current proposal."""
    return (
        f"¡Hola {debtor_name}! Soy el asistente virtual de {proposal.company_name or 'nuestra empresa'}.\n\n"
        "Entiendo que estás interesado en renegociar tu propuesta de pago. Estoy aquí para ayudarte a encontrar "
        "una solución que se ajuste a tu situación.\n\n"
        "Tu propuesta actual es:\n"
        f"- Monto total: ${format_amount(proposal.total_amount)}\n"
        f"- Cuotas propuestas: {proposal.installments}\n"
        f"- Valor por cuota: ${format_amount(proposal.installment_amount)}\n\n"
        "¿En qué aspectos te gustaría que trabajáramos? Puedo ayudarte con:\n"
        "- Ajustar el número de cuotas\n"
        "- Revisar opciones de descuento\n"
        "- Modificar fechas de pago\n"
        "- Cualquier otra pregunta que tengas\n\n"
        "¿Por dónde te gustaría empezar?"
    )


class ProposalActionService:
    def __init__(
        self,
        store: NegotiationStore,
        analytics: AnalyticsAggregator,
        retry: RetryPolicy | None = None,
    ) -> None:
        self.store = store
        self.analytics = analytics
        self.retry = retry or RetryPolicy()

    async def handle(self, proposal_id: str, action: ProposalAction | str, debtor: DebtorData) -> ProposalActionResult:
        try:
            action = ProposalAction(action)
        except ValueError as exc:
            raise ValidationError(f"Invalid proposal action: {action}") from exc

        proposal = await self.retry.run(self.store.get_proposal, proposal_id, operation="get_proposal")
        if proposal is None:
            raise NotFoundError(f"Proposal {proposal_id} not found")

        if action == ProposalAction.ACCEPT:
            return await self._accept(proposal, debtor)
        if action == ProposalAction.REJECT:
            return await self._reject(proposal, debtor)
        return await self._negotiate(proposal, debtor)

    async def _accept(self, proposal: ProposalSnapshot, debtor: DebtorData) -> ProposalActionResult:
        await self.retry.run(
            self.store.update_proposal_status, proposal.id, ProposalStatus.ACCEPTED, operation="update_proposal_status"
        )
        agreement_id = await self.retry.run(
            self.store.create_payment_agreement, proposal, debtor.id, operation="create_payment_agreement"
        )
        await self.analytics.track(
            debtor.company_id or proposal.company_id,
            "proposal_accepted",
            {
                "outcome": AnalyticsOutcome.AGREEMENT.value,
                "proposal_id": proposal.id,
                "metadata": {"debtor_id": debtor.id, "agreement_id": agreement_id},
            },
        )
        return ProposalActionResult(
            action="accepted",
            message="Propuesta aceptada exitosamente",
            proposal_id=proposal.id,
            agreement_id=agreement_id,
        )

    async def _reject(self, proposal: ProposalSnapshot, debtor: DebtorData) -> ProposalActionResult:
        await self.retry.run(
            self.store.update_proposal_status, proposal.id, ProposalStatus.REJECTED, operation="update_proposal_status"
        )
        metadata = {"debtor_id": debtor.id}
        if debtor.rejection_reason:
            metadata["reason"] = debtor.rejection_reason
        await self.analytics.track(
            debtor.company_id or proposal.company_id,
            "proposal_rejected",
            {"outcome": AnalyticsOutcome.REJECTED.value, "proposal_id": proposal.id, "metadata": metadata},
        )
        return ProposalActionResult(action="rejected", message="Propuesta rechazada", proposal_id=proposal.id)

    async def _negotiate(self, proposal: ProposalSnapshot, debtor: DebtorData) -> ProposalActionResult:
        corporate_client_id = debtor.corporate_client_id or proposal.corporate_client_id
        await self.retry.run(
            self.store.update_proposal_status,
            proposal.id,
            ProposalStatus.NEGOTIATING,
            operation="update_proposal_status",
        )
        ai_config = await self.retry.run(self.store.get_ai_config, corporate_client_id, operation="get_ai_config")
        limits = NegotiationLimits.from_ai_config(ai_config)
        context = {
            "proposal": proposal.to_context(),
            "debtor": {"id": debtor.id, "name": debtor.name},
            "limits": limits.to_dict(),
            "started_at": datetime.now(timezone.utc).isoformat(),
        }
        conversation = await self.retry.run(
            self.store.create_conversation,
            proposal,
            debtor.id,
            ConversationStatus.NEGOTIATING,
            context,
            ai_enabled=True,
            corporate_client_id=corporate_client_id,
            operation="create_conversation",
        )
        await self.retry.run(
            self.store.append_message,
            conversation.id,
            SenderType.AI_ASSISTANT,
            opening_message(proposal, debtor.name),
            {"response_type": "opening", "confidence": 1.0},
            operation="append_message",
        )
        logger.info(
            "negotiation.started",
            extra={
                "event": "negotiation.started",
                "proposal_id": proposal.id,
                "conversation_id": conversation.id,
                "debtor_id": debtor.id,
            },
        )
        return ProposalActionResult(
            action="negotiating",
            message="Negociación iniciada",
            proposal_id=proposal.id,
            conversation_id=conversation.id,
        )
