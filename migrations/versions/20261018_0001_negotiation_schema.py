"""negotiation schema: clients, debtors, proposals, conversations, analytics

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 00:00:01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None

# SQLAlchemy's Enum type persists member names.
CONVERSATION_STATUS = sa.Enum(
    "ACTIVE", "NEGOTIATING", "ESCALATED", "AGREED", "REJECTED", "ABANDONED", name="conversationstatus"
)
SENDER_TYPE = sa.Enum("DEBTOR", "AI_ASSISTANT", "HUMAN_AGENT", name="sendertype")
PROPOSAL_STATUS = sa.Enum("PENDING", "NEGOTIATING", "ACCEPTED", "REJECTED", name="proposalstatus")
PAYMENT_STATUS = sa.Enum("ON_TIME", "LATE", "PENDING", name="paymentstatus")
ANALYTICS_OUTCOME = sa.Enum("AGREEMENT", "ESCALATED", "ABANDONED", "REJECTED", name="analyticsoutcome")


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "corporate_clients",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("business_name", sa.String(255), nullable=False),
        sa.Column("rut", sa.String(32), nullable=True),
        sa.Column("industry", sa.String(120), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("contact_phone", sa.String(64), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("display_category", sa.String(120), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("website", sa.String(255), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "negotiation_ai_configs",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("corporate_client_id", sa.String(36), nullable=False),
        sa.Column("max_negotiation_discount", sa.Integer(), nullable=True),
        sa.Column("max_negotiation_term", sa.Integer(), nullable=True),
        sa.Column("escalation_thresholds", sa.JSON(), nullable=True),
        sa.Column("auto_respond", sa.Boolean(), nullable=False),
        sa.Column("working_hours", sa.JSON(), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["corporate_client_id"], ["corporate_clients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("corporate_client_id"),
    )

    op.create_table(
        "corporate_policies",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("corporate_client_id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("policy_type", sa.String(64), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["corporate_client_id"], ["corporate_clients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_corporate_policies_client_active", "corporate_policies", ["corporate_client_id", "is_active"])

    op.create_table(
        "custom_responses",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("corporate_client_id", sa.String(36), nullable=False),
        sa.Column("trigger", sa.String(255), nullable=False),
        sa.Column("response", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["corporate_client_id"], ["corporate_clients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_custom_responses_client_active", "custom_responses", ["corporate_client_id", "is_active"])

    op.create_table(
        "debtors",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("rut", sa.String(32), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "debts",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("debtor_id", sa.String(36), nullable=False),
        sa.Column("corporate_client_id", sa.String(36), nullable=True),
        sa.Column("original_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("current_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("days_overdue", sa.Integer(), nullable=False),
        sa.Column("debt_type", sa.String(64), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["debtor_id"], ["debtors.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["corporate_client_id"], ["corporate_clients.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_debts_debtor_client", "debts", ["debtor_id", "corporate_client_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("debtor_id", sa.String(36), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("status", PAYMENT_STATUS, nullable=False),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["debtor_id"], ["debtors.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_payments_debtor_created", "payments", ["debtor_id", "created_at"])

    op.create_table(
        "proposals",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("company_id", sa.String(36), nullable=False),
        sa.Column("company_name", sa.String(255), nullable=True),
        sa.Column("debtor_id", sa.String(36), nullable=True),
        sa.Column("debt_id", sa.String(36), nullable=True),
        sa.Column("corporate_client_id", sa.String(36), nullable=True),
        sa.Column("total_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("installments", sa.Integer(), nullable=False),
        sa.Column("installment_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("status", PROPOSAL_STATUS, nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["debtor_id"], ["debtors.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["debt_id"], ["debts.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["corporate_client_id"], ["corporate_clients.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_proposals_company_status", "proposals", ["company_id", "status"])

    op.create_table(
        "payment_agreements",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("proposal_id", sa.String(36), nullable=False),
        sa.Column("debtor_id", sa.String(36), nullable=False),
        sa.Column("company_id", sa.String(36), nullable=False),
        sa.Column("total_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("installments", sa.Integer(), nullable=False),
        sa.Column("installment_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["proposal_id"], ["proposals.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "negotiation_conversations",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("proposal_id", sa.String(36), nullable=False),
        sa.Column("debtor_id", sa.String(36), nullable=False),
        sa.Column("company_id", sa.String(36), nullable=False),
        sa.Column("corporate_client_id", sa.String(36), nullable=True),
        sa.Column("status", CONVERSATION_STATUS, nullable=False),
        sa.Column("ai_enabled", sa.Boolean(), nullable=False),
        sa.Column("message_count", sa.Integer(), nullable=False),
        sa.Column("negotiation_context", sa.JSON(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["proposal_id"], ["proposals.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_conversations_company_status", "negotiation_conversations", ["company_id", "status"])
    op.create_index(
        "idx_conversations_debtor_client", "negotiation_conversations", ["debtor_id", "corporate_client_id"]
    )

    op.create_table(
        "negotiation_messages",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("conversation_id", sa.String(36), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("sender_type", SENDER_TYPE, nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["conversation_id"], ["negotiation_conversations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_messages_conversation_sequence",
        "negotiation_messages",
        ["conversation_id", "sequence"],
        unique=True,
    )

    op.create_table(
        "negotiation_analytics",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("company_id", sa.String(36), nullable=True),
        sa.Column("proposal_id", sa.String(36), nullable=True),
        sa.Column("conversation_id", sa.String(36), nullable=True),
        sa.Column("event_type", sa.String(64), nullable=False),
        sa.Column("outcome", ANALYTICS_OUTCOME, nullable=True),
        sa.Column("conversation_duration_minutes", sa.Float(), nullable=True),
        sa.Column("ai_messages", sa.Integer(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_analytics_company_created", "negotiation_analytics", ["company_id", "created_at"])


def downgrade() -> None:
    op.drop_index("idx_analytics_company_created", table_name="negotiation_analytics")
    op.drop_table("negotiation_analytics")
    op.drop_index("idx_messages_conversation_sequence", table_name="negotiation_messages")
    op.drop_table("negotiation_messages")
    op.drop_index("idx_conversations_debtor_client", table_name="negotiation_conversations")
    op.drop_index("idx_conversations_company_status", table_name="negotiation_conversations")
    op.drop_table("negotiation_conversations")
    op.drop_table("payment_agreements")
    op.drop_index("idx_proposals_company_status", table_name="proposals")
    op.drop_table("proposals")
    op.drop_index("idx_payments_debtor_created", table_name="payments")
    op.drop_table("payments")
    op.drop_index("idx_debts_debtor_client", table_name="debts")
    op.drop_table("debts")
    op.drop_table("debtors")
    op.drop_index("idx_custom_responses_client_active", table_name="custom_responses")
    op.drop_table("custom_responses")
    op.drop_index("idx_corporate_policies_client_active", table_name="corporate_policies")
    op.drop_table("corporate_policies")
    op.drop_table("negotiation_ai_configs")
    op.drop_table("corporate_clients")
    for enum_type in (ANALYTICS_OUTCOME, PAYMENT_STATUS, PROPOSAL_STATUS, SENDER_TYPE, CONVERSATION_STATUS):
        enum_type.drop(op.get_bind(), checkfirst=True)
