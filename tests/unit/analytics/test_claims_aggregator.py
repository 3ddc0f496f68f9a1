"""Unit tests for claim and provider analytics."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from healthplan_admin.models.claim import ClaimStatus
from healthplan_admin.repositories import Repositories
from healthplan_admin.schemas.analytics import Period
from healthplan_admin.services.analytics.claims import ClaimsAggregator, processing_days
from tests.fixtures.factories import add_claim, add_contract, add_provider

JUNE = Period(start_date=date(2025, 6, 1), end_date=date(2025, 6, 30))
SUBMITTED = datetime(2025, 6, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def aggregator(repos: Repositories) -> ClaimsAggregator:
    return ClaimsAggregator(repos.claims, repos.providers)


def decided_after(days: float) -> dict[str, datetime]:
    return {"created_at": SUBMITTED, "updated_at": SUBMITTED + timedelta(days=days)}


class TestProcessingDays:
    @pytest.mark.asyncio
    async def test_partial_days_round_up(
        self, repos: Repositories, company_id: UUID
    ) -> None:
        contract = await add_contract(repos, company_id)
        provider = await add_provider(repos, company_id)
        claim = await add_claim(repos, contract, provider.id, **decided_after(1.25))
        assert processing_days(claim) == 2

        same_moment = await add_claim(repos, contract, provider.id, **decided_after(0))
        assert processing_days(same_moment) == 0


class TestClaimsAnalytics:
    @pytest.mark.asyncio
    async def test_breakdowns(
        self, repos: Repositories, company_id: UUID, aggregator: ClaimsAggregator
    ) -> None:
        contract = await add_contract(repos, company_id)
        clinic = await add_provider(repos, company_id, name="City Clinic")
        lab = await add_provider(repos, company_id, name="Lab One")

        await add_claim(
            repos,
            contract,
            clinic.id,
            status=ClaimStatus.APPROVED,
            total_amount=Decimal("200.00"),
            **decided_after(2),
        )
        await add_claim(
            repos,
            contract,
            clinic.id,
            status=ClaimStatus.DENIED,
            total_amount=Decimal("50.00"),
            denial_reason="Not covered",
            **decided_after(4),
        )
        await add_claim(
            repos,
            contract,
            lab.id,
            service_code="LAB",
            total_amount=Decimal("500.00"),
            **decided_after(10),
        )
        # Created before the window
        await add_claim(
            repos,
            contract,
            lab.id,
            created_at=datetime(2025, 5, 31, 23, 59, tzinfo=timezone.utc),
        )

        analytics = await aggregator.claims_analytics(company_id, JUNE)

        by_status = {s.status: s for s in analytics.claims_by_status}
        assert set(by_status) == {s.value for s in ClaimStatus}
        assert by_status["APPROVED"].count == 1
        assert by_status["DENIED"].amount == Decimal("50.00")
        assert by_status["SUBMITTED"].count == 1
        assert by_status["PAID"].count == 0

        # Only decided claims count towards processing time: (2 + 4) / 2
        assert analytics.avg_processing_time == 3.0

        by_provider = {p.provider_name: p for p in analytics.claims_by_provider}
        assert by_provider["City Clinic"].count == 2
        assert by_provider["City Clinic"].amount == Decimal("250.00")
        assert by_provider["Lab One"].count == 1

        assert [c.category for c in analytics.top_claim_categories] == ["LAB", "CONSULT"]

    @pytest.mark.asyncio
    async def test_empty_window(
        self, company_id: UUID, aggregator: ClaimsAggregator
    ) -> None:
        analytics = await aggregator.claims_analytics(company_id, JUNE)
        assert all(s.count == 0 for s in analytics.claims_by_status)
        assert analytics.avg_processing_time == 0.0
        assert analytics.claims_by_provider == []
        assert analytics.top_claim_categories == []

    @pytest.mark.asyncio
    async def test_pending_claims(
        self, repos: Repositories, company_id: UUID, aggregator: ClaimsAggregator
    ) -> None:
        contract = await add_contract(repos, company_id)
        provider = await add_provider(repos, company_id)
        await add_claim(repos, contract, provider.id, status=ClaimStatus.PENDING)
        await add_claim(repos, contract, provider.id, status=ClaimStatus.PENDING)
        await add_claim(repos, contract, provider.id, status=ClaimStatus.SUBMITTED)
        assert await aggregator.pending_claims(company_id) == 2


class TestProviderAnalytics:
    @pytest.mark.asyncio
    async def test_performance_and_top_providers(
        self, repos: Repositories, company_id: UUID, aggregator: ClaimsAggregator
    ) -> None:
        contract = await add_contract(repos, company_id)
        clinic = await add_provider(repos, company_id, name="City Clinic")
        lab = await add_provider(repos, company_id, name="Lab One")

        await add_claim(
            repos,
            contract,
            clinic.id,
            status=ClaimStatus.PAID,
            total_amount=Decimal("100.00"),
            **decided_after(1),
        )
        await add_claim(
            repos,
            contract,
            clinic.id,
            status=ClaimStatus.DENIED,
            denial_reason="Duplicate",
            total_amount=Decimal("100.00"),
            **decided_after(3),
        )
        await add_claim(
            repos, contract, clinic.id, total_amount=Decimal("100.00"), **decided_after(9)
        )
        await add_claim(
            repos, contract, lab.id, total_amount=Decimal("900.00"), **decided_after(1)
        )

        analytics = await aggregator.provider_analytics(company_id, JUNE)

        performance = {p.provider_name: p for p in analytics.provider_performance}
        assert performance["City Clinic"].claims_processed == 2
        assert performance["City Clinic"].approval_rate == 50.0
        assert performance["City Clinic"].avg_processing_time == 2.0
        assert performance["Lab One"].claims_processed == 0
        assert performance["Lab One"].approval_rate == 0.0

        assert [t.provider_name for t in analytics.top_providers] == ["Lab One", "City Clinic"]
        assert analytics.top_providers[1].claims_count == 3
        assert analytics.top_providers[1].claims_amount == Decimal("300.00")
