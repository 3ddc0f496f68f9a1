"""Unit tests for enrollment and retention figures."""

from datetime import date
from uuid import UUID

import pytest

from healthplan_admin.models.policy_contract import ContractStatus
from healthplan_admin.repositories import Repositories
from healthplan_admin.schemas.analytics import Period
from healthplan_admin.services.analytics.enrollment import EnrollmentAggregator
from tests.fixtures.factories import add_company, add_contract

JUNE = Period(start_date=date(2025, 6, 1), end_date=date(2025, 6, 30))


def contract_dates(start: date, end: date) -> dict[str, date]:
    return {"start_date": start, "end_date": end}


class TestEnrollmentStats:
    """Test new, canceled and base enrollment counts."""

    @pytest.mark.asyncio
    async def test_counts_and_growth(self, repos: Repositories, company_id: UUID) -> None:
        # Base: two ACTIVE contracts that started before the window
        for _ in range(2):
            await add_contract(
                repos, company_id, **contract_dates(date(2025, 1, 1), date(2025, 12, 31))
            )
        # New: ACTIVE contracts starting on both window edges
        await add_contract(
            repos, company_id, **contract_dates(date(2025, 6, 1), date(2026, 5, 31))
        )
        await add_contract(
            repos, company_id, **contract_dates(date(2025, 6, 30), date(2026, 6, 29))
        )
        # Canceled in the window
        await add_contract(
            repos,
            company_id,
            status=ContractStatus.CANCELED,
            **contract_dates(date(2025, 1, 1), date(2025, 6, 15)),
        )
        # Outside the window or another status
        await add_contract(
            repos, company_id, **contract_dates(date(2025, 7, 1), date(2026, 6, 30))
        )
        await add_contract(
            repos,
            company_id,
            status=ContractStatus.PENDING,
            **contract_dates(date(2025, 6, 10), date(2026, 6, 9)),
        )

        stats = await EnrollmentAggregator(repos.policy_contracts).enrollment_stats(
            company_id, JUNE
        )

        assert stats.new_enrollments == 2
        assert stats.canceled_enrollments == 1
        assert stats.net_change == 1
        assert stats.total_at_start == 2
        assert stats.growth_rate == 50.0

    @pytest.mark.asyncio
    async def test_growth_is_zero_without_base(
        self, repos: Repositories, company_id: UUID
    ) -> None:
        await add_contract(
            repos, company_id, **contract_dates(date(2025, 6, 5), date(2026, 6, 4))
        )
        stats = await EnrollmentAggregator(repos.policy_contracts).enrollment_stats(
            company_id, JUNE
        )
        assert stats.total_at_start == 0
        assert stats.net_change == 1
        assert stats.growth_rate == 0.0

    @pytest.mark.asyncio
    async def test_other_companies_are_not_counted(
        self, repos: Repositories, company_id: UUID
    ) -> None:
        other = await add_company(repos)
        await add_contract(
            repos, other.id, **contract_dates(date(2025, 6, 5), date(2026, 6, 4))
        )
        stats = await EnrollmentAggregator(repos.policy_contracts).enrollment_stats(
            company_id, JUNE
        )
        assert stats.new_enrollments == 0


class TestRetentionRate:
    """Test the share of ending contracts that were renewed."""

    @pytest.mark.asyncio
    async def test_zero_when_nothing_ends(
        self, repos: Repositories, company_id: UUID
    ) -> None:
        aggregator = EnrollmentAggregator(repos.policy_contracts)
        assert await aggregator.retention_rate(company_id, JUNE) == 0.0

    @pytest.mark.asyncio
    async def test_renewed_share_of_eligible(
        self, repos: Repositories, company_id: UUID
    ) -> None:
        ending = contract_dates(date(2024, 6, 20), date(2025, 6, 19))
        await add_contract(repos, company_id, status=ContractStatus.RENEWED, **ending)
        await add_contract(repos, company_id, status=ContractStatus.EXPIRED, **ending)
        await add_contract(repos, company_id, status=ContractStatus.ACTIVE, **ending)
        await add_contract(repos, company_id, status=ContractStatus.RENEWED, **ending)
        # Canceled contracts are not eligible for renewal
        await add_contract(repos, company_id, status=ContractStatus.CANCELED, **ending)

        aggregator = EnrollmentAggregator(repos.policy_contracts)
        assert await aggregator.retention_rate(company_id, JUNE) == 50.0


def test_requires_repository() -> None:
    with pytest.raises(ValueError, match="Policy contract repository required"):
        EnrollmentAggregator(None)  # type: ignore[arg-type]
