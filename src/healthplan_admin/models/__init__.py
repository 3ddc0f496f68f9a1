# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.


"""Domain models package for HealthPlan Admin.

This package exports the Pydantic domain models; every model is immutable
and validated on construction.
"""

from .admin import AdminUser, AdminUserCreate, UserType
from .base import BaseModelConfig, IdentifiableModel, TimestampedModel
from .billing import (
    Invoice,
    InvoiceCreate,
    InvoiceStatus,
    InvoiceType,
    Payment,
    PaymentCreate,
    PaymentMethod,
    PaymentStatus,
)
from .claim import Claim, ClaimCreate, ClaimStatus, ClaimStatusUpdate, ClaimType
from .corporate import (
    CorporateClient,
    CorporateClientCreate,
    CoveragePlan,
    CoveragePlanCreate,
    CoverageType,
    ServiceType,
)
from .fraud import (
    AlertStatus,
    ClaimFraudAlert,
    FraudRule,
    FraudRuleCreate,
    RuleSeverity,
    RuleStatus,
    RuleType,
)
from .insurance_company import (
    InsuranceCompany,
    InsuranceCompanyCreate,
    InsuranceCompanyUpdate,
)
from .medical_catalog import MedicalCategory, MedicalItem, MedicalService
from .member import Member, MemberCreate, MemberUpdate
from .payment_plan import (
    InstallmentFrequency,
    PaymentPlan,
    PaymentPlanCreate,
    PaymentPlanStatus,
)
from .policy_contract import (
    CancellationReason,
    ContractStatus,
    PolicyContract,
    PolicyContractCreate,
)
from .policy_product import (
    PolicyProduct,
    PolicyProductCreate,
    PolicyType,
    ProductStatus,
    ProductTier,
)
from .provider import Provider, ProviderCategory, ProviderCreate

__all__ = [
    # Base models
    "BaseModelConfig",
    "TimestampedModel",
    "IdentifiableModel",
    # Accounts
    "AdminUser",
    "AdminUserCreate",
    "UserType",
    # Tenants and customers
    "InsuranceCompany",
    "InsuranceCompanyCreate",
    "InsuranceCompanyUpdate",
    "CorporateClient",
    "CorporateClientCreate",
    "CoveragePlan",
    "CoveragePlanCreate",
    "CoverageType",
    "ServiceType",
    "Member",
    "MemberCreate",
    "MemberUpdate",
    "Provider",
    "ProviderCategory",
    "ProviderCreate",
    # Contracts and claims
    "PolicyContract",
    "PolicyContractCreate",
    "ContractStatus",
    "CancellationReason",
    "Claim",
    "ClaimCreate",
    "ClaimStatus",
    "ClaimStatusUpdate",
    "ClaimType",
    # Products
    "PolicyProduct",
    "PolicyProductCreate",
    "PolicyType",
    "ProductStatus",
    "ProductTier",
    # Fraud detection
    "FraudRule",
    "FraudRuleCreate",
    "RuleType",
    "RuleSeverity",
    "RuleStatus",
    "ClaimFraudAlert",
    "AlertStatus",
    # Catalog
    "MedicalCategory",
    "MedicalService",
    "MedicalItem",
    # Billing
    "Invoice",
    "InvoiceCreate",
    "InvoiceStatus",
    "InvoiceType",
    "Payment",
    "PaymentCreate",
    "PaymentMethod",
    "PaymentStatus",
    "PaymentPlan",
    "PaymentPlanCreate",
    "PaymentPlanStatus",
    "InstallmentFrequency",
]
