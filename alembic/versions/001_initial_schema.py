"""Initial database schema.

Revision ID: 001
Revises:
Create Date: 2025-07-02

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

MONEY = sa.Numeric(14, 2)


def _uuid(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), nullable=nullable)


def _base_columns() -> list[sa.Column]:
    """Primary key and audit timestamps shared by every table."""
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


def _is_active() -> sa.Column:
    return sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true())


def upgrade() -> None:
    """Create initial database schema."""
    op.create_table(
        "insurance_companies",
        *_base_columns(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(30), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("website", sa.String(200), nullable=True),
        sa.Column("license_number", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        _is_active(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_insurance_companies")),
        sa.UniqueConstraint("name", name=op.f("uq_insurance_companies_name")),
        sa.UniqueConstraint("code", name=op.f("uq_insurance_companies_code")),
    )

    op.create_table(
        "admin_users",
        *_base_columns(),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("user_type", sa.String(30), nullable=False),
        _uuid("insurance_company_id", nullable=True),
        _uuid("corporate_client_id", nullable=True),
        _is_active(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_admin_users")),
        sa.UniqueConstraint("username", name=op.f("uq_admin_users_username")),
        _company_fk("admin_users"),
        sa.CheckConstraint(
            "user_type IN ('ADMIN', 'INSURANCE_ADMIN', 'CORPORATE_ADMIN', "
            "'PROVIDER_ADMIN', 'STAFF', 'MEMBER')",
            name=op.f("ck_admin_users_user_type"),
        ),
    )

    op.create_table(
        "corporate_clients",
        *_base_columns(),
        _uuid("insurance_company_id"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("registration_number", sa.String(100), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("phone", sa.String(30), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("website", sa.String(200), nullable=True),
        sa.Column("contact_name", sa.String(200), nullable=False),
        sa.Column("contact_position", sa.String(100), nullable=True),
        sa.Column("contact_phone", sa.String(30), nullable=True),
        sa.Column("contact_email", sa.String(320), nullable=True),
        _is_active(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_corporate_clients")),
        sa.UniqueConstraint("name", name=op.f("uq_corporate_clients_name")),
        sa.UniqueConstraint(
            "registration_number", name=op.f("uq_corporate_clients_registration_number")
        ),
        _company_fk("corporate_clients"),
    )

    op.create_table(
        "coverage_plans",
        *_base_columns(),
        _uuid("corporate_client_id"),
        sa.Column("service_type", sa.String(30), nullable=False),
        sa.Column("coverage_type", sa.String(20), nullable=False),
        sa.Column("coverage_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("max_amount", MONEY, nullable=True),
        sa.Column("annual_limit", MONEY, nullable=True),
        sa.Column("waiting_period_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "pre_authorization_required",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column(
            "exclusions",
            postgresql.ARRAY(sa.Text()),
            nullable=False,
            server_default="{}",
        ),
        _is_active(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_coverage_plans")),
        sa.ForeignKeyConstraint(
            ["corporate_client_id"],
            ["corporate_clients.id"],
            name=op.f("fk_coverage_plans_corporate_client_id_corporate_clients"),
            ondelete="CASCADE",
        ),
    )

    op.create_table(
        "members",
        *_base_columns(),
        _uuid("insurance_company_id"),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("date_of_birth", sa.DateTime(timezone=True), nullable=False),
        sa.Column("gender", sa.String(50), nullable=True),
        sa.Column("national_id", sa.String(50), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        _uuid("employer_id", nullable=True),
        _is_active(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_members")),
        sa.UniqueConstraint(
            "insurance_company_id",
            "national_id",
            name=op.f("uq_members_insurance_company_id_national_id"),
        ),
        _company_fk("members"),
        sa.ForeignKeyConstraint(
            ["employer_id"],
            ["corporate_clients.id"],
            name=op.f("fk_members_employer_id_corporate_clients"),
            ondelete="SET NULL",
        ),
    )

    op.create_table(
        "providers",
        *_base_columns(),
        _uuid("insurance_company_id"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("license_number", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(30), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column(
            "specialties",
            postgresql.ARRAY(sa.Text()),
            nullable=False,
            server_default="{}",
        ),
        _is_active(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_providers")),
        sa.UniqueConstraint(
            "insurance_company_id",
            "license_number",
            name=op.f("uq_providers_insurance_company_id_license_number"),
        ),
        _company_fk("providers"),
    )

    op.create_table(
        "policy_contracts",
        *_base_columns(),
        sa.Column("contract_number", sa.String(20), nullable=False),
        _uuid("insurance_company_id"),
        _uuid("member_id"),
        sa.Column("policy_type", sa.String(100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("premium", MONEY, nullable=False),
        sa.Column("coverage_amount", MONEY, nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("cancellation_reason", sa.String(30), nullable=True),
        sa.Column("cancellation_date", sa.Date(), nullable=True),
        _uuid("previous_contract_id", nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_policy_contracts")),
        sa.UniqueConstraint(
            "contract_number", name=op.f("uq_policy_contracts_contract_number")
        ),
        _company_fk("policy_contracts"),
        sa.ForeignKeyConstraint(
            ["member_id"],
            ["members.id"],
            name=op.f("fk_policy_contracts_member_id_members"),
        ),
        sa.ForeignKeyConstraint(
            ["previous_contract_id"],
            ["policy_contracts.id"],
            name=op.f("fk_policy_contracts_previous_contract_id_policy_contracts"),
        ),
        sa.CheckConstraint(
            "status IN ('PENDING', 'ACTIVE', 'EXPIRED', 'CANCELED', 'RENEWED')",
            name=op.f("ck_policy_contracts_status"),
        ),
        sa.CheckConstraint(
            "end_date > start_date", name=op.f("ck_policy_contracts_date_order")
        ),
    )

    op.create_table(
        "medical_categories",
        *_base_columns(),
        _uuid("insurance_company_id"),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _uuid("parent_category_id", nullable=True),
        _is_active(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_medical_categories")),
        sa.UniqueConstraint(
            "insurance_company_id",
            "code",
            name=op.f("uq_medical_categories_insurance_company_id_code"),
        ),
        _company_fk("medical_categories"),
        sa.ForeignKeyConstraint(
            ["parent_category_id"],
            ["medical_categories.id"],
            name=op.f("fk_medical_categories_parent_category_id_medical_categories"),
        ),
    )

    for table, extra in (
        (
            "medical_services",
            [
                sa.Column("coding_system", sa.String(50), nullable=True),
                sa.Column("standard_duration_minutes", sa.Integer(), nullable=True),
            ],
        ),
        (
            "medical_items",
            [
                sa.Column("unit", sa.String(30), nullable=False, server_default="unit"),
                sa.Column("brand_name", sa.String(200), nullable=True),
                sa.Column("manufacturer", sa.String(200), nullable=True),
            ],
        ),
    ):
        op.create_table(
            table,
            *_base_columns(),
            _uuid("insurance_company_id"),
            _uuid("category_id"),
            sa.Column("code", sa.String(50), nullable=False),
            sa.Column("name", sa.String(200), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("type", sa.String(30), nullable=False),
            sa.Column("base_price", MONEY, nullable=False),
            sa.Column(
                "requires_prior_auth",
                sa.Boolean(),
                nullable=False,
                server_default=sa.false(),
            ),
            *extra,
            _is_active(),
            sa.PrimaryKeyConstraint("id", name=op.f(f"pk_{table}")),
            sa.UniqueConstraint(
                "insurance_company_id",
                "code",
                name=op.f(f"uq_{table}_insurance_company_id_code"),
            ),
            _company_fk(table),
            sa.ForeignKeyConstraint(
                ["category_id"],
                ["medical_categories.id"],
                name=op.f(f"fk_{table}_category_id_medical_categories"),
            ),
        )

    op.create_table(
        "claims",
        *_base_columns(),
        sa.Column("claim_number", sa.String(30), nullable=False),
        _uuid("insurance_company_id"),
        _uuid("member_id"),
        _uuid("policy_contract_id"),
        _uuid("provider_id"),
        sa.Column("claim_type", sa.String(20), nullable=False),
        sa.Column("service_code", sa.String(50), nullable=False),
        sa.Column("service_date", sa.Date(), nullable=False),
        sa.Column("total_amount", MONEY, nullable=False),
        sa.Column("approved_amount", MONEY, nullable=False, server_default="0"),
        sa.Column("paid_amount", MONEY, nullable=False, server_default="0"),
        sa.Column("diagnosis_code", sa.String(20), nullable=True),
        sa.Column("is_emergency", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(30), nullable=False, server_default="SUBMITTED"),
        sa.Column("denial_reason", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_claims")),
        sa.UniqueConstraint("claim_number", name=op.f("uq_claims_claim_number")),
        _company_fk("claims"),
        sa.ForeignKeyConstraint(
            ["member_id"], ["members.id"], name=op.f("fk_claims_member_id_members")
        ),
        sa.ForeignKeyConstraint(
            ["policy_contract_id"],
            ["policy_contracts.id"],
            name=op.f("fk_claims_policy_contract_id_policy_contracts"),
        ),
        sa.ForeignKeyConstraint(
            ["provider_id"], ["providers.id"], name=op.f("fk_claims_provider_id_providers")
        ),
    )

    op.create_table(
        "invoices",
        *_base_columns(),
        sa.Column("invoice_number", sa.String(30), nullable=False),
        _uuid("insurance_company_id"),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        _uuid("policy_contract_id", nullable=True),
        _uuid("member_id", nullable=True),
        _uuid("corporate_client_id", nullable=True),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("paid_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("subtotal", MONEY, nullable=False),
        sa.Column("tax", MONEY, nullable=False, server_default="0"),
        sa.Column("discount", MONEY, nullable=False, server_default="0"),
        sa.Column("total", MONEY, nullable=False),
        sa.Column("amount_paid", MONEY, nullable=False, server_default="0"),
        sa.Column("amount_due", MONEY, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_invoices")),
        sa.UniqueConstraint("invoice_number", name=op.f("uq_invoices_invoice_number")),
        _company_fk("invoices"),
        sa.ForeignKeyConstraint(
            ["policy_contract_id"],
            ["policy_contracts.id"],
            name=op.f("fk_invoices_policy_contract_id_policy_contracts"),
        ),
        sa.CheckConstraint(
            "status IN ('draft', 'pending', 'paid', 'partially_paid', 'overdue', "
            "'cancelled', 'void')",
            name=op.f("ck_invoices_status"),
        ),
    )

    op.create_table(
        "payments",
        *_base_columns(),
        sa.Column("transaction_id", sa.String(40), nullable=False),
        _uuid("insurance_company_id"),
        _uuid("invoice_id"),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("method", sa.String(30), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("refund_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reference", sa.String(100), nullable=True),
        sa.Column("payer_name", sa.String(200), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_payments")),
        sa.UniqueConstraint("transaction_id", name=op.f("uq_payments_transaction_id")),
        _company_fk("payments"),
        sa.ForeignKeyConstraint(
            ["invoice_id"], ["invoices.id"], name=op.f("fk_payments_invoice_id_invoices")
        ),
        sa.CheckConstraint("amount > 0", name=op.f("ck_payments_amount_positive")),
    )

    # Tenant scoping and the date columns the analytics filter on
    for table in (
        "corporate_clients",
        "members",
        "providers",
        "policy_contracts",
        "claims",
        "invoices",
        "payments",
    ):
        op.create_index(
            op.f(f"ix_{table}_insurance_company_id"), table, ["insurance_company_id"]
        )
    op.create_index(
        "ix_policy_contracts_company_status",
        "policy_contracts",
        ["insurance_company_id", "status"],
    )
    op.create_index(op.f("ix_policy_contracts_start_date"), "policy_contracts", ["start_date"])
    op.create_index(op.f("ix_policy_contracts_end_date"), "policy_contracts", ["end_date"])
    op.create_index(op.f("ix_policy_contracts_member_id"), "policy_contracts", ["member_id"])
    op.create_index("ix_claims_company_created_at", "claims", ["insurance_company_id", "created_at"])
    op.create_index(op.f("ix_claims_provider_id"), "claims", ["provider_id"])
    op.create_index(
        "ix_invoices_company_issue_date", "invoices", ["insurance_company_id", "issue_date"]
    )
    op.create_index(op.f("ix_payments_invoice_id"), "payments", ["invoice_id"])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    for table in (
        "payments",
        "invoices",
        "claims",
        "medical_items",
        "medical_services",
        "medical_categories",
        "policy_contracts",
        "providers",
        "members",
        "coverage_plans",
        "corporate_clients",
        "admin_users",
        "insurance_companies",
    ):
        op.drop_table(table)
