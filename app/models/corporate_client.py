"""Corporate client, AI configuration, policy and custom response models."""

from __future__ import annotations

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import AuditMixin, Base, IdMixin


class CorporateClient(Base, IdMixin, AuditMixin):
    __tablename__ = "corporate_clients"

    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    rut: Mapped[str | None] = mapped_column(String(32))
    industry: Mapped[str | None] = mapped_column(String(120))
    contact_email: Mapped[str | None] = mapped_column(String(255))
    contact_phone: Mapped[str | None] = mapped_column(String(64))
    address: Mapped[str | None] = mapped_column(String(255))
    display_category: Mapped[str | None] = mapped_column(String(120))
    description: Mapped[str | None] = mapped_column(Text)
    website: Mapped[str | None] = mapped_column(String(255))

    ai_config = relationship("NegotiationAIConfig", back_populates="corporate_client", uselist=False)


class NegotiationAIConfig(Base, IdMixin, AuditMixin):
    __tablename__ = "negotiation_ai_configs"

    corporate_client_id: Mapped[str] = mapped_column(
        ForeignKey("corporate_clients.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    max_negotiation_discount: Mapped[int | None] = mapped_column(Integer)
    max_negotiation_term: Mapped[int | None] = mapped_column(Integer)
    escalation_thresholds: Mapped[dict | None] = mapped_column(JSON)
    auto_respond: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    working_hours: Mapped[dict | None] = mapped_column(JSON)

    corporate_client = relationship("CorporateClient", back_populates="ai_config")


class CorporatePolicy(Base, IdMixin, AuditMixin):
    __tablename__ = "corporate_policies"
    __table_args__ = (Index("idx_corporate_policies_client_active", "corporate_client_id", "is_active"),)

    corporate_client_id: Mapped[str] = mapped_column(
        ForeignKey("corporate_clients.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    policy_type: Mapped[str] = mapped_column(String(64), default="general", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class CustomResponse(Base, IdMixin, AuditMixin):
    __tablename__ = "custom_responses"
    __table_args__ = (Index("idx_custom_responses_client_active", "corporate_client_id", "is_active"),)

    corporate_client_id: Mapped[str] = mapped_column(
        ForeignKey("corporate_clients.id", ondelete="CASCADE"), nullable=False
    )
    trigger: Mapped[str] = mapped_column(String(255), nullable=False)
    response: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
