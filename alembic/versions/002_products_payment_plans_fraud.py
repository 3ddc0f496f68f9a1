"""Policy products, payment plans and fraud detection.

Revision ID: 002
Revises: 001
Create Date: 2025-07-16

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

MONEY = sa.Numeric(14, 2)


def _uuid(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), nullable=nullable)


def _jsonb(name: str, default: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.JSONB(astext_type=sa.Text()),
        nullable=False,
        server_default=sa.text(f"'{default}'::jsonb"),
    )


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    ]


def _company_fk(table: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        ["insurance_company_id"],
        ["insurance_companies.id"],
        name=op.f(f"fk_{table}_insurance_company_id_insurance_companies"),
    )


def upgrade() -> None:
    """Create the product catalogue, installment plans and fraud tables."""
    op.create_table(
        "policy_products",
        *_base_columns(),
        _uuid("insurance_company_id"),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("tier", sa.String(20), nullable=False, server_default="BASIC"),
        sa.Column("status", sa.String(20), nullable=False, server_default="DRAFT"),
        sa.Column("waiting_period_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_members", sa.Integer(), nullable=True),
        sa.Column("base_premium", MONEY, nullable=False),
        sa.Column(
            "premium_frequency", sa.String(20), nullable=False, server_default="MONTHLY"
        ),
        _jsonb("benefits", "[]"),
        _jsonb("eligibility_rules", "{}"),
        _jsonb("premium_modifiers", "{}"),
        sa.Column("valid_from", sa.Date(), nullable=False),
        sa.Column("valid_to", sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_policy_products")),
        sa.UniqueConstraint(
            "insurance_company_id", "code", name=op.f("uq_policy_products_company_code")
        ),
        _company_fk("policy_products"),
        sa.CheckConstraint(
            "status IN ('DRAFT', 'ACTIVE', 'INACTIVE')",
            name=op.f("ck_policy_products_status"),
        ),
        sa.CheckConstraint(
            "base_premium >= 0", name=op.f("ck_policy_products_base_premium_positive")
        ),
    )

    op.create_table(
        "payment_plans",
        *_base_columns(),
        sa.Column("plan_number", sa.String(40), nullable=False),
        _uuid("invoice_id"),
        _uuid("insurance_company_id"),
        _uuid("member_id", nullable=True),
        _uuid("corporate_client_id", nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("frequency", sa.String(20), nullable=False),
        sa.Column("total_amount", MONEY, nullable=False),
        sa.Column("installment_amount", MONEY, nullable=False),
        sa.Column("total_installments", sa.Integer(), nullable=False),
        sa.Column("installments_paid", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("amount_paid", MONEY, nullable=False, server_default="0"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("next_due_date", sa.Date(), nullable=True),
        sa.Column("grace_period_days", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("payment_method", sa.String(30), nullable=True),
        sa.Column("auto_debit", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_payment_plans")),
        sa.UniqueConstraint("plan_number", name=op.f("uq_payment_plans_plan_number")),
        _company_fk("payment_plans"),
        sa.ForeignKeyConstraint(
            ["invoice_id"], ["invoices.id"], name=op.f("fk_payment_plans_invoice_id_invoices")
        ),
        sa.CheckConstraint(
            "status IN ('active', 'completed', 'defaulted', 'cancelled')",
            name=op.f("ck_payment_plans_status"),
        ),
        sa.CheckConstraint(
            "amount_paid <= total_amount", name=op.f("ck_payment_plans_amount_paid")
        ),
    )

    op.create_table(
        "fraud_rules",
        *_base_columns(),
        # NULL company means the rule applies to every tenant
        _uuid("insurance_company_id", nullable=True),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("severity", sa.String(20), nullable=False, server_default="MEDIUM"),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        _jsonb("configuration", "{}"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_fraud_rules")),
        sa.UniqueConstraint(
            "insurance_company_id", "code", name=op.f("uq_fraud_rules_company_code")
        ),
        _company_fk("fraud_rules"),
        sa.CheckConstraint(
            "type IN ('FREQUENCY', 'COMPATIBILITY', 'UPCODING', 'DUPLICATE')",
            name=op.f("ck_fraud_rules_type"),
        ),
    )

    op.create_table(
        "claim_fraud_alerts",
        *_base_columns(),
        _uuid("claim_id"),
        _uuid("rule_id"),
        sa.Column("rule_type", sa.String(20), nullable=False),
        _uuid("insurance_company_id"),
        sa.Column("severity", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="NEW"),
        sa.Column("resolution", sa.String(30), nullable=False, server_default="NONE"),
        sa.Column("explanation", sa.Text(), nullable=False),
        sa.Column("confidence_score", sa.Integer(), nullable=False),
        _jsonb("additional_data", "{}"),
        _uuid("reviewed_by_user_id", nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_claim_fraud_alerts")),
        sa.UniqueConstraint(
            "claim_id", "rule_id", name=op.f("uq_claim_fraud_alerts_claim_rule")
        ),
        _company_fk("claim_fraud_alerts"),
        sa.ForeignKeyConstraint(
            ["claim_id"], ["claims.id"], name=op.f("fk_claim_fraud_alerts_claim_id_claims")
        ),
        sa.ForeignKeyConstraint(
            ["rule_id"],
            ["fraud_rules.id"],
            name=op.f("fk_claim_fraud_alerts_rule_id_fraud_rules"),
        ),
        sa.CheckConstraint(
            "confidence_score BETWEEN 0 AND 100",
            name=op.f("ck_claim_fraud_alerts_confidence_score"),
        ),
    )

    for table in ("policy_products", "payment_plans", "claim_fraud_alerts"):
        op.create_index(
            op.f(f"ix_{table}_insurance_company_id"), table, ["insurance_company_id"]
        )
    op.create_index(op.f("ix_payment_plans_invoice_id"), "payment_plans", ["invoice_id"])
    op.create_index(
        "ix_payment_plans_status_next_due_date",
        "payment_plans",
        ["status", "next_due_date"],
    )
    # Rule checks look up a member's claims by service code and date
    op.create_index(
        "ix_claims_member_service_date", "claims", ["member_id", "service_code", "service_date"]
    )


def downgrade() -> None:
    """Drop the tables in reverse dependency order."""
    op.drop_index("ix_claims_member_service_date", table_name="claims")
    for table in ("claim_fraud_alerts", "fraud_rules", "payment_plans", "policy_products"):
        op.drop_table(table)
