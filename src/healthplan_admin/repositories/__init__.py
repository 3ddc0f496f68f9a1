# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Repository layer: one repository per entity, built explicitly.

``Repositories`` is the bundle handed to services. It is assembled once per
application (PostgreSQL) or per test (in memory); there is no global
registry.
"""

from typing import Any

from attrs import field, frozen
from beartype import beartype

from ..core.database import Database
from ..models.admin import AdminUser
from ..models.billing import Invoice, Payment
from ..models.claim import Claim
from ..models.corporate import CorporateClient, CoveragePlan
from ..models.fraud import ClaimFraudAlert, FraudRule
from ..models.insurance_company import InsuranceCompany
from ..models.medical_catalog import MedicalCategory, MedicalItem, MedicalService
from ..models.member import Member
from ..models.payment_plan import PaymentPlan
from ..models.policy_contract import PolicyContract
from ..models.policy_product import PolicyProduct
from ..models.provider import Provider
from .base import DuplicateRecordError, Repository
from .memory import InMemoryRepository
from .postgres import PostgresRepository

# attribute -> (model, table, unique field groups)
TABLES: dict[str, tuple[type[Any], str, tuple[tuple[str, ...], ...]]] = {
    "insurance_companies": (
        InsuranceCompany,
        "insurance_companies",
        (("name",), ("code",)),
    ),
    "corporate_clients": (
        CorporateClient,
        "corporate_clients",
        (("name",), ("registration_number",)),
    ),
    "coverage_plans": (CoveragePlan, "coverage_plans", ()),
    "members": (Member, "members", (("insurance_company_id", "national_id"),)),
    "providers": (
        Provider,
        "providers",
        (("insurance_company_id", "license_number"),),
    ),
    "policy_products": (
        PolicyProduct,
        "policy_products",
        (("insurance_company_id", "code"),),
    ),
    "policy_contracts": (PolicyContract, "policy_contracts", (("contract_number",),)),
    "claims": (Claim, "claims", (("claim_number",),)),
    "medical_categories": (
        MedicalCategory,
        "medical_categories",
        (("insurance_company_id", "code"),),
    ),
    "medical_services": (
        MedicalService,
        "medical_services",
        (("insurance_company_id", "code"),),
    ),
    "medical_items": (
        MedicalItem,
        "medical_items",
        (("insurance_company_id", "code"),),
    ),
    "invoices": (Invoice, "invoices", (("invoice_number",),)),
    "payments": (Payment, "payments", (("transaction_id",),)),
    "payment_plans": (PaymentPlan, "payment_plans", (("plan_number",),)),
    "fraud_rules": (FraudRule, "fraud_rules", (("insurance_company_id", "code"),)),
    "fraud_alerts": (
        ClaimFraudAlert,
        "claim_fraud_alerts",
        (("claim_id", "rule_id"),),
    ),
    "admin_users": (AdminUser, "admin_users", (("username",),)),
}


@frozen
class Repositories:
    """All repositories of one storage backend."""

    insurance_companies: Repository[InsuranceCompany] = field()
    corporate_clients: Repository[CorporateClient] = field()
    coverage_plans: Repository[CoveragePlan] = field()
    members: Repository[Member] = field()
    providers: Repository[Provider] = field()
    policy_products: Repository[PolicyProduct] = field()
    policy_contracts: Repository[PolicyContract] = field()
    claims: Repository[Claim] = field()
    medical_categories: Repository[MedicalCategory] = field()
    medical_services: Repository[MedicalService] = field()
    medical_items: Repository[MedicalItem] = field()
    invoices: Repository[Invoice] = field()
    payments: Repository[Payment] = field()
    payment_plans: Repository[PaymentPlan] = field()
    fraud_rules: Repository[FraudRule] = field()
    fraud_alerts: Repository[ClaimFraudAlert] = field()
    admin_users: Repository[AdminUser] = field()


@beartype
def postgres_repositories(db: Database) -> Repositories:
    """Repositories backed by the PostgreSQL pool."""
    return Repositories(
        **{
            name: PostgresRepository(db, model, table)
            for name, (model, table, _) in TABLES.items()
        }
    )


@beartype
def memory_repositories() -> Repositories:
    """Fresh, empty in-process repositories."""
    return Repositories(
        **{
            name: InMemoryRepository(model, table, unique)
            for name, (model, table, unique) in TABLES.items()
        }
    )


__all__ = [
    "DuplicateRecordError",
    "InMemoryRepository",
    "PostgresRepository",
    "Repositories",
    "Repository",
    "memory_repositories",
    "postgres_repositories",
]
