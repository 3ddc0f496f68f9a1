# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Analytics endpoints.

Every route is scoped to one insurance company, passed as the
``insuranceCompanyId`` query parameter; reporting windows are passed as
``startDate`` and ``endDate`` (ISO dates, inclusive).
"""

import logging
from datetime import date
from typing import Annotated
from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response

from ...schemas.analytics import (
    ClaimsAnalytics,
    DashboardSummary,
    FinancialSummary,
    MemberAnalytics,
    MonthlyRevenue,
    PolicyAnalytics,
    ProviderAnalytics,
)
from ...services.analytics import AnalyticsService
from ..dependencies import CompanyStaffDep, ensure_company_access, get_analytics_service
from ..response_patterns import ErrorResponse, handle_result

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])

AnalyticsServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service)]
CompanyId = Annotated[UUID, Query(alias="insuranceCompanyId")]
StartDate = Annotated[date, Query(alias="startDate")]
EndDate = Annotated[date, Query(alias="endDate")]


@router.get("/financial-summary")
@beartype
async def financial_summary(
    response: Response,
    insurance_company_id: CompanyId,
    start_date: StartDate,
    end_date: EndDate,
    current_user: CompanyStaffDep,
    service: AnalyticsServiceDep,
) -> FinancialSummary | ErrorResponse:
    """Revenue, expenses and profit for the window."""
    ensure_company_access(current_user, insurance_company_id)
    result = await service.financial_summary(insurance_company_id, start_date, end_date)
    return handle_result(result, response)


@router.get("/monthly-revenue")
@beartype
async def monthly_revenue(
    response: Response,
    insurance_company_id: CompanyId,
    year: Annotated[int, Query()],
    current_user: CompanyStaffDep,
    service: AnalyticsServiceDep,
) -> list[MonthlyRevenue] | ErrorResponse:
    """Paid premium revenue for each month of ``year``."""
    ensure_company_access(current_user, insurance_company_id)
    result = await service.monthly_revenue(insurance_company_id, year)
    return handle_result(result, response)


@router.get("/claims")
@beartype
async def claims_analytics(
    response: Response,
    insurance_company_id: CompanyId,
    start_date: StartDate,
    end_date: EndDate,
    current_user: CompanyStaffDep,
    service: AnalyticsServiceDep,
) -> ClaimsAnalytics | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.claims_analytics(insurance_company_id, start_date, end_date)
    return handle_result(result, response)


@router.get("/members")
@beartype
async def member_analytics(
    response: Response,
    insurance_company_id: CompanyId,
    start_date: StartDate,
    end_date: EndDate,
    current_user: CompanyStaffDep,
    service: AnalyticsServiceDep,
) -> MemberAnalytics | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.member_analytics(insurance_company_id, start_date, end_date)
    return handle_result(result, response)


@router.get("/providers")
@beartype
async def provider_analytics(
    response: Response,
    insurance_company_id: CompanyId,
    start_date: StartDate,
    end_date: EndDate,
    current_user: CompanyStaffDep,
    service: AnalyticsServiceDep,
) -> ProviderAnalytics | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.provider_analytics(insurance_company_id, start_date, end_date)
    return handle_result(result, response)


@router.get("/policies")
@beartype
async def policy_analytics(
    response: Response,
    insurance_company_id: CompanyId,
    start_date: StartDate,
    end_date: EndDate,
    current_user: CompanyStaffDep,
    service: AnalyticsServiceDep,
) -> PolicyAnalytics | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.policy_analytics(insurance_company_id, start_date, end_date)
    return handle_result(result, response)


@router.get("/dashboard")
@beartype
async def dashboard(
    insurance_company_id: CompanyId,
    current_user: CompanyStaffDep,
    service: AnalyticsServiceDep,
) -> DashboardSummary:
    """Point-in-time headline figures for the company."""
    ensure_company_access(current_user, insurance_company_id)
    logger.debug("Dashboard requested for %s", insurance_company_id)
    return await service.dashboard(insurance_company_id)
