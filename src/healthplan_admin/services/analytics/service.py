# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Analytics business logic service.

Entry point used by the HTTP layer. Every operation is a read; the only
business failure is an inverted date range. Unknown company ids are not
checked and simply yield zero/empty figures. Database errors propagate.
"""

from datetime import date, datetime
from uuid import UUID

from beartype import beartype

from ...core.result_types import Err, Ok, Result
from ...repositories import Repositories
from ...schemas.analytics import (
    ClaimsAnalytics,
    DashboardSummary,
    FinancialSummary,
    MemberAnalytics,
    MonthlyRevenue,
    PolicyAnalytics,
    ProviderAnalytics,
)
from .claims import ClaimsAggregator
from .dashboard import DashboardAssembler
from .demographics import DemographicsAggregator
from .enrollment import EnrollmentAggregator
from .financial import FinancialAggregator
from .period import make_period
from .policies import PolicyAggregator


class AnalyticsService:
    """Service for company-scoped analytics."""

    def __init__(self, repos: Repositories, *, expiring_window_days: int = 30) -> None:
        """Wire the aggregators onto the given repositories."""
        if not repos or not hasattr(repos, "policy_contracts"):
            raise ValueError("Repositories required")

        self.enrollment = EnrollmentAggregator(repos.policy_contracts)
        self.demographics = DemographicsAggregator(repos.policy_contracts, repos.members)
        self.policies = PolicyAggregator(repos.policy_contracts, repos.invoices, repos.claims)
        self.financial = FinancialAggregator(repos.invoices)
        self.claims = ClaimsAggregator(repos.claims, repos.providers)
        self.dashboard_assembler = DashboardAssembler(
            contracts=repos.policy_contracts,
            providers=repos.providers,
            enrollment=self.enrollment,
            demographics=self.demographics,
            financial=self.financial,
            claims=self.claims,
            expiring_window_days=expiring_window_days,
        )

    @beartype
    async def financial_summary(
        self, insurance_company_id: UUID, start_date: date, end_date: date
    ) -> Result[FinancialSummary, str]:
        period = make_period(start_date, end_date)
        if isinstance(period, Err):
            return period
        return Ok(
            await self.financial.financial_summary(insurance_company_id, period.value)
        )

    @beartype
    async def monthly_revenue(
        self, insurance_company_id: UUID, year: int
    ) -> Result[list[MonthlyRevenue], str]:
        if not 1900 <= year <= 9999:
            return Err(f"Invalid year: {year}")
        return Ok(await self.financial.monthly_revenue(insurance_company_id, year))

    @beartype
    async def claims_analytics(
        self, insurance_company_id: UUID, start_date: date, end_date: date
    ) -> Result[ClaimsAnalytics, str]:
        period = make_period(start_date, end_date)
        if isinstance(period, Err):
            return period
        return Ok(await self.claims.claims_analytics(insurance_company_id, period.value))

    @beartype
    async def member_analytics(
        self, insurance_company_id: UUID, start_date: date, end_date: date
    ) -> Result[MemberAnalytics, str]:
        period = make_period(start_date, end_date)
        if isinstance(period, Err):
            return period
        window = period.value

        return Ok(
            MemberAnalytics(
                enrollment_stats=await self.enrollment.enrollment_stats(
                    insurance_company_id, window
                ),
                demographics=await self.demographics.demographics(insurance_company_id),
                retention_rate=await self.enrollment.retention_rate(
                    insurance_company_id, window
                ),
                period=window,
            )
        )

    @beartype
    async def provider_analytics(
        self, insurance_company_id: UUID, start_date: date, end_date: date
    ) -> Result[ProviderAnalytics, str]:
        period = make_period(start_date, end_date)
        if isinstance(period, Err):
            return period
        return Ok(await self.claims.provider_analytics(insurance_company_id, period.value))

    @beartype
    async def policy_analytics(
        self, insurance_company_id: UUID, start_date: date, end_date: date
    ) -> Result[PolicyAnalytics, str]:
        period = make_period(start_date, end_date)
        if isinstance(period, Err):
            return period
        window = period.value

        return Ok(
            PolicyAnalytics(
                policy_distribution=await self.policies.distribution(insurance_company_id),
                renewal_rate=await self.policies.renewal_rates(insurance_company_id, window),
                policy_profitability=await self.policies.profitability(
                    insurance_company_id, window
                ),
                period=window,
            )
        )

    @beartype
    async def dashboard(
        self, insurance_company_id: UUID, now: datetime | None = None
    ) -> DashboardSummary:
        return await self.dashboard_assembler.dashboard(insurance_company_id, now)
