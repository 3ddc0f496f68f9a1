# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Business logic service layer."""

from ..core.result_types import Err, Ok, Result
from .analytics import AnalyticsService
from .auth_service import AuthService
from .billing_service import InvoiceService, PaymentService
from .claim_service import ClaimService
from .corporate_service import CorporateService
from .insurance_company_service import InsuranceCompanyService
from .medical_catalog_service import MedicalCatalogService
from .member_service import MemberService
from .policy_contract_service import PolicyContractService
from .provider_service import ProviderService

__all__ = [
    "Result",
    "Ok",
    "Err",
    "AnalyticsService",
    "AuthService",
    "ClaimService",
    "CorporateService",
    "InsuranceCompanyService",
    "InvoiceService",
    "MedicalCatalogService",
    "MemberService",
    "PaymentService",
    "PolicyContractService",
    "ProviderService",
]
