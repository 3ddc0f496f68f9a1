# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Claim volume, processing time and provider breakdowns.

All figures cover claims *created* in the reporting window.
"""

import logging
import math
from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID

from attrs import define, field
from beartype import beartype

from ...models.claim import (
    DECIDED_CLAIM_STATUSES,
    EXPENSED_CLAIM_STATUSES,
    Claim,
    ClaimStatus,
)
from ...models.provider import Provider
from ...repositories.base import Repository
from ...repositories.filters import between, eq, in_
from ...schemas.analytics import (
    ClaimsAnalytics,
    ClaimsByProvider,
    ClaimsByStatus,
    Period,
    ProviderAnalytics,
    ProviderPerformance,
    TopClaimCategory,
    TopProvider,
)
from .period import period_bounds, rate

logger = logging.getLogger(__name__)

TOP_N = 10
_SECONDS_PER_DAY = 24 * 60 * 60

# Claims that have left adjudication, for provider performance.
PROCESSED_CLAIM_STATUSES = DECIDED_CLAIM_STATUSES | {ClaimStatus.PAID}


@beartype
def processing_days(claim: Claim) -> int:
    """Whole days from submission to last update, rounded up."""
    seconds = abs((claim.updated_at - claim.created_at).total_seconds())
    return math.ceil(seconds / _SECONDS_PER_DAY)


@beartype
def average_processing_days(claims: Iterable[Claim]) -> float:
    days = [processing_days(c) for c in claims]
    return sum(days) / len(days) if days else 0.0


@define
class _Tally:
    count: int = 0
    amount: Decimal = field(factory=Decimal)

    def add(self, amount: Decimal) -> None:
        self.count += 1
        self.amount += amount


class ClaimsAggregator:
    """Claim analytics for one company."""

    def __init__(
        self,
        claims: Repository[Claim],
        providers: Repository[Provider],
    ) -> None:
        if not claims or not hasattr(claims, "find"):
            raise ValueError("Claim repository required")
        if not providers or not hasattr(providers, "find"):
            raise ValueError("Provider repository required")
        self._claims = claims
        self._providers = providers

    async def _claims_in(self, insurance_company_id: UUID, period: Period) -> list[Claim]:
        return await self._claims.find(
            (
                eq("insurance_company_id", insurance_company_id),
                between("created_at", *period_bounds(period)),
            )
        )

    async def _provider_names(self, provider_ids: Iterable[UUID]) -> dict[UUID, str]:
        ids = list(provider_ids)
        if not ids:
            return {}
        providers = await self._providers.find((in_("id", ids),))
        return {p.id: p.name for p in providers}

    async def _by_provider(self, claims: list[Claim]) -> list[ClaimsByProvider]:
        tallies: dict[UUID, _Tally] = {}
        for claim in claims:
            tallies.setdefault(claim.provider_id, _Tally()).add(claim.total_amount)
        names = await self._provider_names(tallies)
        # Claims whose provider no longer exists are left out.
        return [
            ClaimsByProvider(
                provider_id=provider_id,
                provider_name=names[provider_id],
                count=tally.count,
                amount=tally.amount,
            )
            for provider_id, tally in tallies.items()
            if provider_id in names
        ]

    @beartype
    async def claims_analytics(
        self, insurance_company_id: UUID, period: Period
    ) -> ClaimsAnalytics:
        claims = await self._claims_in(insurance_company_id, period)
        logger.debug(
            "Claims analytics for %s %s..%s over %d claims",
            insurance_company_id,
            period.start_date,
            period.end_date,
            len(claims),
        )

        by_status = {status: _Tally() for status in ClaimStatus}
        categories: dict[str, _Tally] = {}
        for claim in claims:
            by_status[claim.status].add(claim.total_amount)
            categories.setdefault(claim.service_code, _Tally()).add(claim.total_amount)

        top_categories = sorted(
            categories.items(), key=lambda item: item[1].amount, reverse=True
        )[:TOP_N]

        return ClaimsAnalytics(
            claims_by_status=[
                ClaimsByStatus(status=status.value, count=t.count, amount=t.amount)
                for status, t in by_status.items()
            ],
            avg_processing_time=average_processing_days(
                c for c in claims if c.status in DECIDED_CLAIM_STATUSES
            ),
            claims_by_provider=await self._by_provider(claims),
            top_claim_categories=[
                TopClaimCategory(category=code, count=t.count, amount=t.amount)
                for code, t in top_categories
            ],
            period=period,
        )

    @beartype
    async def provider_analytics(
        self, insurance_company_id: UUID, period: Period
    ) -> ProviderAnalytics:
        """Adjudication performance and claim volume per provider."""
        claims = await self._claims_in(insurance_company_id, period)
        by_provider: dict[UUID, list[Claim]] = {}
        for claim in claims:
            by_provider.setdefault(claim.provider_id, []).append(claim)
        names = await self._provider_names(by_provider)

        performance = []
        for provider_id, provider_claims in by_provider.items():
            if provider_id not in names:
                continue
            processed = [c for c in provider_claims if c.status in PROCESSED_CLAIM_STATUSES]
            approved = [c for c in processed if c.status in EXPENSED_CLAIM_STATUSES]
            performance.append(
                ProviderPerformance(
                    provider_id=provider_id,
                    provider_name=names[provider_id],
                    claims_processed=len(processed),
                    avg_processing_time=average_processing_days(processed),
                    approval_rate=rate(len(approved), len(processed)),
                )
            )

        top = sorted(await self._by_provider(claims), key=lambda p: p.amount, reverse=True)
        return ProviderAnalytics(
            provider_performance=performance,
            top_providers=[
                TopProvider(
                    provider_id=p.provider_id,
                    provider_name=p.provider_name,
                    claims_count=p.count,
                    claims_amount=p.amount,
                )
                for p in top[:TOP_N]
            ],
            period=period,
        )

    @beartype
    async def pending_claims(self, insurance_company_id: UUID) -> int:
        return await self._claims.count(
            (
                eq("insurance_company_id", insurance_company_id),
                eq("status", ClaimStatus.PENDING),
            )
        )
