"""Proposal and payment agreement models."""

from __future__ import annotations

from datetime import date

from sqlalchemy import Date, Enum, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.enums import ProposalStatus
from app.models.base import AuditMixin, Base, IdMixin


class Proposal(Base, IdMixin, AuditMixin):
    __tablename__ = "proposals"
    __table_args__ = (Index("idx_proposals_company_status", "company_id", "status"),)

    company_id: Mapped[str] = mapped_column(String(36), nullable=False)
    company_name: Mapped[str | None] = mapped_column(String(255))
    debtor_id: Mapped[str | None] = mapped_column(ForeignKey("debtors.id", ondelete="RESTRICT"))
    debt_id: Mapped[str | None] = mapped_column(ForeignKey("debts.id", ondelete="RESTRICT"))
    corporate_client_id: Mapped[str | None] = mapped_column(ForeignKey("corporate_clients.id", ondelete="RESTRICT"))
    total_amount: Mapped[float] = mapped_column(Numeric(14, 2), default=0, nullable=False)
    installments: Mapped[int] = mapped_column(Integer, default=6, nullable=False)
    installment_amount: Mapped[float] = mapped_column(Numeric(14, 2), default=0, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[ProposalStatus] = mapped_column(Enum(ProposalStatus), default=ProposalStatus.PENDING, nullable=False)


class PaymentAgreement(Base, IdMixin, AuditMixin):
    __tablename__ = "payment_agreements"

    proposal_id: Mapped[str] = mapped_column(ForeignKey("proposals.id", ondelete="RESTRICT"), nullable=False)
    debtor_id: Mapped[str] = mapped_column(String(36), nullable=False)
    company_id: Mapped[str] = mapped_column(String(36), nullable=False)
    total_amount: Mapped[float] = mapped_column(Numeric(14, 2), nullable=False)
    installments: Mapped[int] = mapped_column(Integer, nullable=False)
    installment_amount: Mapped[float] = mapped_column(Numeric(14, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(32), default="active", nullable=False)
