"""Writes to corporate negotiation policy and debtor payments, with cache invalidation."""

from __future__ import annotations

import logging
from typing import Any

from app.core.enums import PaymentStatus
from app.core.exceptions import ValidationError
from app.database.store import NegotiationStore
from app.knowledge.records import CustomResponseRecord, EscalationThresholds, PaymentRecord, PolicyRecord
from app.knowledge.resolver import KnowledgeBaseResolver
from app.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)


class PolicyService:
    """Writers for corporate policy rows and debtor payments.

    Each write invalidates exactly the cache entry it affects, so the next
    resolve reads fresh knowledge without waiting for the TTL.
    """

    def __init__(
        self,
        store: NegotiationStore,
        resolver: KnowledgeBaseResolver,
        retry: RetryPolicy | None = None,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self.retry = retry or RetryPolicy()

    async def update_ai_config(
        self,
        corporate_client_id: str,
        max_negotiation_discount: int | None = None,
        max_negotiation_term: int | None = None,
        escalation_thresholds: dict[str, Any] | None = None,
        auto_respond: bool | None = None,
        working_hours: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        if max_negotiation_discount is not None and not 0 <= max_negotiation_discount <= 100:
            raise ValidationError("max_negotiation_discount must be between 0 and 100")
        if max_negotiation_term is not None and max_negotiation_term < 1:
            raise ValidationError("max_negotiation_term must be at least 1 month")

        thresholds = None
        if escalation_thresholds is not None:
            thresholds = EscalationThresholds.from_mapping(escalation_thresholds).to_dict()

        config = await self.retry.run(
            self.store.upsert_ai_config,
            corporate_client_id,
            max_negotiation_discount=max_negotiation_discount,
            max_negotiation_term=max_negotiation_term,
            escalation_thresholds=thresholds,
            auto_respond=auto_respond,
            working_hours=working_hours,
            operation="upsert_ai_config",
        )
        self.resolver.invalidate_corporate(corporate_client_id)
        logger.info(
            "policy.ai_config.updated",
            extra={"event": "policy.ai_config.updated", "corporate_client_id": corporate_client_id},
        )
        return config

    async def add_policy(
        self, corporate_client_id: str, title: str, content: str, policy_type: str = "general"
    ) -> PolicyRecord:
        if not title.strip() or not content.strip():
            raise ValidationError("Policy title and content are required")
        record = await self.retry.run(
            self.store.add_policy, corporate_client_id, title, content, policy_type, operation="add_policy"
        )
        self.resolver.invalidate_corporate(corporate_client_id)
        return record

    async def set_policy_active(self, policy_id: str, is_active: bool) -> None:
        corporate_client_id = await self.retry.run(
            self.store.set_policy_active, policy_id, is_active, operation="set_policy_active"
        )
        self.resolver.invalidate_corporate(corporate_client_id)

    async def add_custom_response(self, corporate_client_id: str, trigger: str, response: str) -> CustomResponseRecord:
        if not trigger.strip() or not response.strip():
            raise ValidationError("Custom response trigger and text are required")
        record = await self.retry.run(
            self.store.add_custom_response, corporate_client_id, trigger, response, operation="add_custom_response"
        )
        self.resolver.invalidate_corporate(corporate_client_id)
        return record

    async def set_custom_response_active(self, response_id: str, is_active: bool) -> None:
        corporate_client_id = await self.retry.run(
            self.store.set_custom_response_active, response_id, is_active, operation="set_custom_response_active"
        )
        self.resolver.invalidate_corporate(corporate_client_id)

    async def record_payment(self, debtor_id: str, amount: float, status: PaymentStatus | str) -> PaymentRecord:
        if amount <= 0:
            raise ValidationError("Payment amount must be positive")
        try:
            status = PaymentStatus(status)
        except ValueError as exc:
            raise ValidationError(f"Invalid payment status: {status}") from exc
        record = await self.retry.run(self.store.record_payment, debtor_id, amount, status, operation="record_payment")
        self.resolver.invalidate_debtor(debtor_id)
        logger.info(
            "payment.recorded",
            extra={"event": "payment.recorded", "debtor_id": debtor_id, "status": status.value},
        )
        return record
