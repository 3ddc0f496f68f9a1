# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""FastAPI dependencies for authentication, role gates and services.

This module provides reusable dependencies that can be injected into
API endpoints for cross-cutting concerns.
"""

from collections.abc import Awaitable, Callable
from operator import attrgetter
from typing import Annotated, Any
from uuid import UUID

from beartype import beartype
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.config import Settings, get_settings
from ..core.database import get_database
from ..core.result_types import Ok, Result
from ..core.security import Security, get_security
from ..models.admin import UserType
from ..repositories import Repositories, memory_repositories, postgres_repositories
from ..schemas.auth import CurrentUser
from ..services.analytics import AnalyticsService
from ..services.auth_service import AuthService
from ..services.billing_service import InvoiceService, PaymentService
from ..services.claim_service import ClaimService
from ..services.corporate_service import CorporateService
from ..services.fraud_detection_service import FraudDetectionService
from ..services.fraud_rules import RuleEvaluator
from ..services.insurance_company_service import InsuranceCompanyService
from ..services.medical_catalog_service import MedicalCatalogService
from ..services.member_service import MemberService
from ..services.payment_plan_service import PaymentPlanService
from ..services.policy_contract_service import PolicyContractService
from ..services.policy_product_service import PolicyProductService
from ..services.provider_service import ProviderService

# Security scheme; missing credentials are turned into a 401 below
bearer_scheme = HTTPBearer(auto_error=False)

_repositories: Repositories | None = None


@beartype
def get_repositories() -> Repositories:
    """Repository bundle for the configured storage backend.

    The PostgreSQL bundle shares the global connection pool; the memory
    bundle lives for the lifetime of the process.
    """
    global _repositories
    if _repositories is None:
        if get_settings().storage_backend == "memory":
            _repositories = memory_repositories()
        else:
            _repositories = postgres_repositories(get_database())
    return _repositories


@beartype
def clear_repositories_cache() -> None:
    """Drop the cached repository bundle (for testing)."""
    global _repositories
    _repositories = None


Repos = Annotated[Repositories, Depends(get_repositories)]


@beartype
async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    security: Annotated[Security, Depends(get_security)],
) -> CurrentUser:
    """Validate the bearer token and return the user it identifies.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized

    payload = security.decode_token(credentials.credentials)
    if payload is None:
        raise unauthorized

    try:
        return CurrentUser(
            user_id=UUID(payload.sub),
            user_type=UserType(payload.user_type),
            insurance_company_id=(
                UUID(payload.insurance_company_id) if payload.insurance_company_id else None
            ),
            corporate_client_id=(
                UUID(payload.corporate_client_id) if payload.corporate_client_id else None
            ),
        )
    except ValueError as e:
        # NOTE: dependencies raise HTTPException, endpoints return ErrorResponse
        raise unauthorized from e


@beartype
def require_roles(
    *roles: UserType,
) -> Callable[[CurrentUser], Awaitable[CurrentUser]]:
    """Dependency factory admitting the given roles; ADMIN is always admitted."""
    allowed = frozenset(roles) | {UserType.ADMIN}

    async def dependency(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if current_user.user_type not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role {current_user.user_type.value} is not allowed here",
            )
        return current_user

    return dependency


AdminUserDep = Annotated[CurrentUser, Depends(require_roles())]
CompanyStaffDep = Annotated[CurrentUser, Depends(require_roles(UserType.INSURANCE_ADMIN))]


@beartype
def ensure_company_access(user: CurrentUser, insurance_company_id: UUID) -> None:
    """Tenant guard: non-ADMIN accounts only reach their own company.

    Raises:
        HTTPException: 403 when the company is not the user's
    """
    if user.is_admin:
        return
    if user.insurance_company_id != insurance_company_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Access to insurance company {insurance_company_id} is not allowed",
        )


@beartype
class PaginationParams:
    """Common pagination parameters for list endpoints."""

    def __init__(
        self,
        skip: int = 0,
        limit: int = 100,
    ) -> None:
        """Initialize pagination parameters.

        Args:
            skip: Number of records to skip (offset)
            limit: Maximum number of records to return

        Raises:
            HTTPException: If parameters are invalid
        """
        if skip < 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Skip parameter cannot be negative",
            )
        if limit < 1:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Limit must be at least 1",
            )
        if limit > 1000:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Limit cannot exceed 1000",
            )

        self.skip = skip
        self.limit = limit


Pagination = Annotated[PaginationParams, Depends()]


# Service providers


@beartype
def get_auth_service(
    repos: Repos, security: Annotated[Security, Depends(get_security)]
) -> AuthService:
    return AuthService(repos.admin_users, security)


@beartype
def get_analytics_service(
    repos: Repos, settings: Annotated[Settings, Depends(get_settings)]
) -> AnalyticsService:
    return AnalyticsService(
        repos, expiring_window_days=settings.expiring_policy_window_days
    )


@beartype
def get_insurance_company_service(repos: Repos) -> InsuranceCompanyService:
    return InsuranceCompanyService(repos.insurance_companies)


@beartype
def get_corporate_service(
    repos: Repos, auth: Annotated[AuthService, Depends(get_auth_service)]
) -> CorporateService:
    return CorporateService(
        repos.corporate_clients,
        repos.coverage_plans,
        repos.insurance_companies,
        repos.admin_users,
        auth,
    )


@beartype
def get_member_service(repos: Repos) -> MemberService:
    return MemberService(repos.members, repos.insurance_companies)


@beartype
def get_provider_service(repos: Repos) -> ProviderService:
    return ProviderService(repos.providers, repos.insurance_companies)


@beartype
def get_policy_contract_service(repos: Repos) -> PolicyContractService:
    return PolicyContractService(repos.policy_contracts, repos.members)


@beartype
def get_medical_catalog_service(repos: Repos) -> MedicalCatalogService:
    return MedicalCatalogService(
        repos.medical_categories, repos.medical_services, repos.medical_items
    )


@beartype
def get_claim_service(repos: Repos) -> ClaimService:
    return ClaimService(repos.claims, repos.policy_contracts, repos.providers)


@beartype
def get_invoice_service(repos: Repos) -> InvoiceService:
    return InvoiceService(repos.invoices, repos.policy_contracts)


@beartype
def get_payment_service(repos: Repos) -> PaymentService:
    return PaymentService(repos.payments, repos.invoices)


@beartype
def get_payment_plan_service(
    repos: Repos, payments: Annotated[PaymentService, Depends(get_payment_service)]
) -> PaymentPlanService:
    return PaymentPlanService(repos.payment_plans, repos.invoices, payments)


@beartype
def get_policy_product_service(repos: Repos) -> PolicyProductService:
    return PolicyProductService(
        repos.policy_products, repos.insurance_companies, repos.members
    )


@beartype
def get_fraud_detection_service(repos: Repos) -> FraudDetectionService:
    return FraudDetectionService(
        repos.fraud_rules,
        repos.fraud_alerts,
        repos.claims,
        repos.insurance_companies,
        RuleEvaluator(repos.claims, repos.providers),
    )


@beartype
def owned_by_company(
    user: CurrentUser,
    result: Result[Any, str],
    company_id_of: Callable[[Any], UUID] = attrgetter("insurance_company_id"),
) -> Result[Any, str]:
    """Apply the tenant guard to the record inside a successful Result."""
    if isinstance(result, Ok):
        ensure_company_access(user, company_id_of(result.value))
    return result
