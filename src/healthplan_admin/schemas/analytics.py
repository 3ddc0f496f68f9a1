# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Analytics response schemas.

These are per-request value objects: the aggregation engine builds them
from repository reads and nothing persists them. Rates and percentages are
plain floats in the 0-100 range (growth can be negative); money is Decimal.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from beartype import beartype
from pydantic import Field

from ..models.base import BaseModelConfig


@beartype
class Period(BaseModelConfig):
    """Closed reporting window ``[start_date, end_date]``."""

    start_date: date
    end_date: date


@beartype
class EnrollmentStats(BaseModelConfig):
    """Enrollment movement over a window."""

    new_enrollments: int = Field(..., ge=0)
    canceled_enrollments: int = Field(..., ge=0)
    net_change: int
    total_at_start: int = Field(..., ge=0)
    growth_rate: float


@beartype
class DemographicBucket(BaseModelConfig):
    """One age or gender bucket."""

    category: str = Field(..., description='"Age" or "Gender"')
    value: str
    count: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0, le=100)


@beartype
class MemberAnalytics(BaseModelConfig):
    enrollment_stats: EnrollmentStats
    demographics: list[DemographicBucket]
    retention_rate: float = Field(..., ge=0, le=100)
    period: Period


@beartype
class PolicyDistributionEntry(BaseModelConfig):
    policy_type: str
    count: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0, le=100)


@beartype
class RenewalRateEntry(BaseModelConfig):
    policy_type: str
    eligible_count: int = Field(..., ge=0)
    renewed_count: int = Field(..., ge=0)
    renewal_rate: float = Field(..., ge=0, le=100)


@beartype
class PolicyProfitabilityEntry(BaseModelConfig):
    policy_type: str
    premium_revenue: Decimal
    claim_expenses: Decimal
    profit: Decimal
    profit_margin: float


@beartype
class PolicyAnalytics(BaseModelConfig):
    policy_distribution: list[PolicyDistributionEntry]
    renewal_rate: list[RenewalRateEntry]
    policy_profitability: list[PolicyProfitabilityEntry]
    period: Period


@beartype
class RevenueSummary(BaseModelConfig):
    """Premium invoices issued in the window."""

    total: Decimal
    collected: Decimal
    outstanding: Decimal


@beartype
class ExpenseSummary(BaseModelConfig):
    """Claim invoices issued in the window."""

    total: Decimal
    paid: Decimal
    pending: Decimal


@beartype
class FinancialSummary(BaseModelConfig):
    revenue: RevenueSummary
    expenses: ExpenseSummary
    outstanding_payments: Decimal = Field(
        ..., description="Amount due on every open invoice of the company"
    )
    profit: Decimal
    period: Period


@beartype
class MonthlyRevenue(BaseModelConfig):
    month: int = Field(..., ge=1, le=12)
    revenue: Decimal


@beartype
class ClaimsByStatus(BaseModelConfig):
    status: str
    count: int = Field(..., ge=0)
    amount: Decimal


@beartype
class ClaimsByProvider(BaseModelConfig):
    provider_id: UUID
    provider_name: str
    count: int = Field(..., ge=0)
    amount: Decimal


@beartype
class TopClaimCategory(BaseModelConfig):
    category: str
    count: int = Field(..., ge=0)
    amount: Decimal


@beartype
class ClaimsAnalytics(BaseModelConfig):
    claims_by_status: list[ClaimsByStatus]
    avg_processing_time: float = Field(..., ge=0, description="Days")
    claims_by_provider: list[ClaimsByProvider]
    top_claim_categories: list[TopClaimCategory]
    period: Period


@beartype
class ProviderPerformance(BaseModelConfig):
    provider_id: UUID
    provider_name: str
    claims_processed: int = Field(..., ge=0)
    avg_processing_time: float = Field(..., ge=0, description="Days")
    approval_rate: float = Field(..., ge=0, le=100)


@beartype
class TopProvider(BaseModelConfig):
    provider_id: UUID
    provider_name: str
    claims_count: int = Field(..., ge=0)
    claims_amount: Decimal


@beartype
class ProviderAnalytics(BaseModelConfig):
    provider_performance: list[ProviderPerformance]
    top_providers: list[TopProvider]
    period: Period


@beartype
class DashboardSummary(BaseModelConfig):
    """Point-in-time snapshot; sub-metrics are read independently."""

    financial_summary: FinancialSummary
    pending_claims: int = Field(..., ge=0)
    active_members: int = Field(..., ge=0)
    active_providers: int = Field(..., ge=0)
    expiring_policies: int = Field(..., ge=0)
    enrollment_stats: EnrollmentStats
    demographics: list[DemographicBucket]
    last_updated: datetime
