"""Debtor, debt and payment models."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.enums import PaymentStatus
from app.models.base import AuditMixin, Base, IdMixin, utcnow


class Debtor(Base, IdMixin, AuditMixin):
    __tablename__ = "debtors"

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    rut: Mapped[str | None] = mapped_column(String(32))
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(64))

    debts = relationship("Debt", back_populates="debtor")


class Debt(Base, IdMixin, AuditMixin):
    __tablename__ = "debts"
    __table_args__ = (Index("idx_debts_debtor_client", "debtor_id", "corporate_client_id"),)

    debtor_id: Mapped[str] = mapped_column(ForeignKey("debtors.id", ondelete="RESTRICT"), nullable=False)
    corporate_client_id: Mapped[str | None] = mapped_column(ForeignKey("corporate_clients.id", ondelete="RESTRICT"))
    original_amount: Mapped[float] = mapped_column(Numeric(14, 2), nullable=False)
    current_amount: Mapped[float | None] = mapped_column(Numeric(14, 2))
    due_date: Mapped[date | None] = mapped_column(Date)
    days_overdue: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    debt_type: Mapped[str | None] = mapped_column(String(64))
    status: Mapped[str] = mapped_column(String(32), default="active", nullable=False)

    debtor = relationship("Debtor", back_populates="debts")
    corporate_client = relationship("CorporateClient")


class Payment(Base, IdMixin, AuditMixin):
    __tablename__ = "payments"
    __table_args__ = (Index("idx_payments_debtor_created", "debtor_id", "created_at"),)

    debtor_id: Mapped[str] = mapped_column(ForeignKey("debtors.id", ondelete="RESTRICT"), nullable=False)
    amount: Mapped[float] = mapped_column(Numeric(14, 2), nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=utcnow)
