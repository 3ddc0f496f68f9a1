# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Dashboard snapshot assembled from the other aggregators."""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from beartype import beartype

from ...models.policy_contract import ContractStatus, PolicyContract
from ...models.provider import Provider
from ...repositories.base import Repository
from ...repositories.filters import between, eq
from ...schemas.analytics import DashboardSummary
from .claims import ClaimsAggregator
from .demographics import DemographicsAggregator
from .enrollment import EnrollmentAggregator
from .financial import FinancialAggregator
from .period import month_period

logger = logging.getLogger(__name__)


class DashboardAssembler:
    """Composes current-month figures and live counters.

    Each sub-metric is read separately, so under concurrent writes the
    pieces of one snapshot may reflect slightly different moments.
    """

    def __init__(
        self,
        *,
        contracts: Repository[PolicyContract],
        providers: Repository[Provider],
        enrollment: EnrollmentAggregator,
        demographics: DemographicsAggregator,
        financial: FinancialAggregator,
        claims: ClaimsAggregator,
        expiring_window_days: int = 30,
    ) -> None:
        self._contracts = contracts
        self._providers = providers
        self._enrollment = enrollment
        self._demographics = demographics
        self._financial = financial
        self._claims = claims
        self._expiring_window = timedelta(days=expiring_window_days)

    @beartype
    async def active_members(self, insurance_company_id: UUID) -> int:
        """Distinct members holding at least one ACTIVE contract."""
        member_ids = await self._contracts.distinct(
            "member_id",
            (
                eq("insurance_company_id", insurance_company_id),
                eq("status", ContractStatus.ACTIVE),
            ),
        )
        return len(member_ids)

    @beartype
    async def active_providers(self, insurance_company_id: UUID) -> int:
        return await self._providers.count(
            (
                eq("insurance_company_id", insurance_company_id),
                eq("is_active", True),
            )
        )

    @beartype
    async def expiring_policies(self, insurance_company_id: UUID, now: datetime) -> int:
        """ACTIVE contracts ending between today and the look-ahead horizon."""
        today = now.date()
        return await self._contracts.count(
            (
                eq("insurance_company_id", insurance_company_id),
                eq("status", ContractStatus.ACTIVE),
                between("end_date", today, today + self._expiring_window),
            )
        )

    @beartype
    async def dashboard(
        self, insurance_company_id: UUID, now: datetime | None = None
    ) -> DashboardSummary:
        now = now or datetime.now(timezone.utc)
        current_month = month_period(now.date())
        logger.debug("Assembling dashboard for %s", insurance_company_id)

        return DashboardSummary(
            financial_summary=await self._financial.financial_summary(
                insurance_company_id, current_month
            ),
            pending_claims=await self._claims.pending_claims(insurance_company_id),
            active_members=await self.active_members(insurance_company_id),
            active_providers=await self.active_providers(insurance_company_id),
            expiring_policies=await self.expiring_policies(insurance_company_id, now),
            enrollment_stats=await self._enrollment.enrollment_stats(
                insurance_company_id, current_month
            ),
            demographics=await self._demographics.demographics(insurance_company_id, now),
            last_updated=datetime.now(timezone.utc),
        )
