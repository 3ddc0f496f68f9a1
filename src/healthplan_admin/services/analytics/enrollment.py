# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Enrollment and retention figures over policy contracts."""

import logging
from uuid import UUID

from beartype import beartype

from ...models.policy_contract import ContractStatus, PolicyContract
from ...repositories.base import Repository
from ...repositories.filters import between, eq, in_, lt
from ...schemas.analytics import EnrollmentStats, Period
from .period import rate

logger = logging.getLogger(__name__)

RENEWAL_ELIGIBLE_STATUSES = (
    ContractStatus.ACTIVE,
    ContractStatus.EXPIRED,
    ContractStatus.RENEWED,
)


class EnrollmentAggregator:
    """Counts contract starts, cancellations and renewals for one company."""

    def __init__(self, contracts: Repository[PolicyContract]) -> None:
        if not contracts or not hasattr(contracts, "count"):
            raise ValueError("Policy contract repository required")
        self._contracts = contracts

    @beartype
    async def enrollment_stats(
        self, insurance_company_id: UUID, period: Period
    ) -> EnrollmentStats:
        """New, canceled and pre-existing enrollments for the window.

        Growth is measured against the ACTIVE contracts that started before
        the window and is zero when there were none.
        """
        company = eq("insurance_company_id", insurance_company_id)
        window = (period.start_date, period.end_date)

        new_enrollments = await self._contracts.count(
            (
                company,
                eq("status", ContractStatus.ACTIVE),
                between("start_date", *window),
            )
        )
        canceled_enrollments = await self._contracts.count(
            (
                company,
                eq("status", ContractStatus.CANCELED),
                between("end_date", *window),
            )
        )
        total_at_start = await self._contracts.count(
            (
                company,
                eq("status", ContractStatus.ACTIVE),
                lt("start_date", period.start_date),
            )
        )

        net_change = new_enrollments - canceled_enrollments
        logger.debug(
            "Enrollment for %s %s..%s: +%d -%d (base %d)",
            insurance_company_id,
            period.start_date,
            period.end_date,
            new_enrollments,
            canceled_enrollments,
            total_at_start,
        )
        return EnrollmentStats(
            new_enrollments=new_enrollments,
            canceled_enrollments=canceled_enrollments,
            net_change=net_change,
            total_at_start=total_at_start,
            growth_rate=rate(net_change, total_at_start),
        )

    @beartype
    async def retention_rate(self, insurance_company_id: UUID, period: Period) -> float:
        """Share of contracts ending in the window that were renewed."""
        ending = (
            eq("insurance_company_id", insurance_company_id),
            between("end_date", period.start_date, period.end_date),
        )
        eligible = await self._contracts.count(
            ending + (in_("status", RENEWAL_ELIGIBLE_STATUSES),)
        )
        renewed = await self._contracts.count(
            ending + (eq("status", ContractStatus.RENEWED),)
        )
        return rate(renewed, eligible)
