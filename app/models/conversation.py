"""Negotiation conversation and message models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.enums import ConversationStatus, SenderType
from app.models.base import AuditMixin, Base, IdMixin, utcnow


class Conversation(Base, IdMixin, AuditMixin):
    __tablename__ = "negotiation_conversations"
    __table_args__ = (
        Index("idx_conversations_company_status", "company_id", "status"),
        Index("idx_conversations_debtor_client", "debtor_id", "corporate_client_id"),
    )

    proposal_id: Mapped[str] = mapped_column(ForeignKey("proposals.id", ondelete="RESTRICT"), nullable=False)
    debtor_id: Mapped[str] = mapped_column(String(36), nullable=False)
    company_id: Mapped[str] = mapped_column(String(36), nullable=False)
    corporate_client_id: Mapped[str | None] = mapped_column(String(36))
    status: Mapped[ConversationStatus] = mapped_column(
        Enum(ConversationStatus), default=ConversationStatus.ACTIVE, nullable=False
    )
    ai_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    message_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    negotiation_context: Mapped[dict | None] = mapped_column(JSON)
    summary: Mapped[str | None] = mapped_column(Text)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    messages = relationship(
        "Message",
        back_populates="conversation",
        order_by="Message.sequence",
        cascade="all, delete-orphan",
    )


class Message(Base, IdMixin):
    """Append-only conversation turn. Rows are never updated."""

    __tablename__ = "negotiation_messages"
    __table_args__ = (Index("idx_messages_conversation_sequence", "conversation_id", "sequence", unique=True),)

    conversation_id: Mapped[str] = mapped_column(
        ForeignKey("negotiation_conversations.id", ondelete="CASCADE"), nullable=False
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    sender_type: Mapped[SenderType] = mapped_column(Enum(SenderType), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    message_metadata: Mapped[dict | None] = mapped_column("metadata", JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    conversation = relationship("Conversation", back_populates="messages")
