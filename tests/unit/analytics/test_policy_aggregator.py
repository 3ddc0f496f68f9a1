"""Unit tests for per policy type distribution, renewal and profitability."""

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from healthplan_admin.models.billing import InvoiceStatus, InvoiceType
from healthplan_admin.models.claim import ClaimStatus
from healthplan_admin.models.policy_contract import ContractStatus
from healthplan_admin.repositories import Repositories
from healthplan_admin.schemas.analytics import Period
from healthplan_admin.services.analytics.policies import PolicyAggregator
from tests.fixtures.factories import add_claim, add_contract, add_invoice, add_provider

JUNE = Period(start_date=date(2025, 6, 1), end_date=date(2025, 6, 30))
ENDING_IN_JUNE = {"start_date": date(2024, 6, 15), "end_date": date(2025, 6, 14)}


@pytest.fixture
def aggregator(repos: Repositories) -> PolicyAggregator:
    return PolicyAggregator(repos.policy_contracts, repos.invoices, repos.claims)


class TestDistribution:
    @pytest.mark.asyncio
    async def test_only_active_contracts_count(
        self, repos: Repositories, company_id: UUID, aggregator: PolicyAggregator
    ) -> None:
        for status in (
            ContractStatus.ACTIVE,
            ContractStatus.ACTIVE,
            ContractStatus.EXPIRED,
            ContractStatus.CANCELED,
        ):
            await add_contract(repos, company_id, policy_type="Health", status=status)

        entries = await aggregator.distribution(company_id)

        assert [e.model_dump() for e in entries] == [
            {"policy_type": "Health", "count": 2, "percentage": 100.0}
        ]

    @pytest.mark.asyncio
    async def test_types_without_active_contracts_are_omitted(
        self, repos: Repositories, company_id: UUID, aggregator: PolicyAggregator
    ) -> None:
        await add_contract(repos, company_id, policy_type="Health")
        await add_contract(repos, company_id, policy_type="Dental")
        await add_contract(repos, company_id, policy_type="Dental")
        await add_contract(
            repos, company_id, policy_type="Vision", status=ContractStatus.EXPIRED
        )

        entries = await aggregator.distribution(company_id)

        assert [(e.policy_type, e.count) for e in entries] == [("Dental", 2), ("Health", 1)]
        assert sum(e.percentage for e in entries) == pytest.approx(100)

    @pytest.mark.asyncio
    async def test_empty_company(
        self, company_id: UUID, aggregator: PolicyAggregator
    ) -> None:
        assert await aggregator.distribution(company_id) == []


class TestRenewalRates:
    @pytest.mark.asyncio
    async def test_every_type_ever_sold_is_listed(
        self, repos: Repositories, company_id: UUID, aggregator: PolicyAggregator
    ) -> None:
        # Health: everything ending in the window was renewed
        await add_contract(
            repos, company_id, status=ContractStatus.RENEWED, **ENDING_IN_JUNE
        )
        await add_contract(
            repos, company_id, status=ContractStatus.RENEWED, **ENDING_IN_JUNE
        )
        # Dental: sold, but nothing ends in the window
        await add_contract(repos, company_id, policy_type="Dental")
        # Vision: ended in the window without renewal
        await add_contract(
            repos,
            company_id,
            policy_type="Vision",
            status=ContractStatus.EXPIRED,
            **ENDING_IN_JUNE,
        )

        entries = {e.policy_type: e for e in await aggregator.renewal_rates(company_id, JUNE)}

        assert list(entries) == ["Dental", "Health", "Vision"]
        assert entries["Health"].eligible_count == entries["Health"].renewed_count == 2
        assert entries["Health"].renewal_rate == 100.0
        assert entries["Dental"].eligible_count == 0
        assert entries["Dental"].renewal_rate == 0.0
        assert entries["Vision"].renewal_rate == 0.0


class TestProfitability:
    @pytest.mark.asyncio
    async def test_premiums_against_incurred_claims(
        self, repos: Repositories, company_id: UUID, aggregator: PolicyAggregator
    ) -> None:
        health = await add_contract(repos, company_id, policy_type="Health")
        dental = await add_contract(repos, company_id, policy_type="Dental")
        provider = await add_provider(repos, company_id)

        await add_invoice(
            repos, company_id, total=Decimal("1000.00"), policy_contract_id=health.id
        )
        await add_invoice(
            repos,
            company_id,
            total=Decimal("500.00"),
            status=InvoiceStatus.PAID,
            policy_contract_id=health.id,
        )
        # Outside the window, wrong type, or not linked to a contract
        await add_invoice(
            repos,
            company_id,
            total=Decimal("999.00"),
            issue_date=date(2025, 5, 31),
            policy_contract_id=health.id,
        )
        await add_invoice(
            repos,
            company_id,
            total=Decimal("999.00"),
            invoice_type=InvoiceType.FEE,
            policy_contract_id=health.id,
        )
        await add_invoice(repos, company_id, total=Decimal("999.00"))

        await add_claim(
            repos,
            health,
            provider.id,
            status=ClaimStatus.APPROVED,
            total_amount=Decimal("400.00"),
            approved_amount=Decimal("300.00"),
        )
        await add_claim(
            repos,
            health,
            provider.id,
            status=ClaimStatus.PAID,
            total_amount=Decimal("100.00"),
            approved_amount=Decimal("100.00"),
            paid_amount=Decimal("100.00"),
        )
        # Not incurred yet, or serviced outside the window
        await add_claim(repos, health, provider.id, status=ClaimStatus.IN_REVIEW)
        await add_claim(
            repos,
            dental,
            provider.id,
            status=ClaimStatus.APPROVED,
            approved_amount=Decimal("80.00"),
            service_date=date(2025, 5, 1),
        )

        entries = {
            e.policy_type: e for e in await aggregator.profitability(company_id, JUNE)
        }

        assert entries["Health"].premium_revenue == Decimal("1500.00")
        assert entries["Health"].claim_expenses == Decimal("400.00")
        assert entries["Health"].profit == Decimal("1100.00")
        assert entries["Health"].profit_margin == pytest.approx(1100 / 1500 * 100)

        assert entries["Dental"].premium_revenue == 0
        assert entries["Dental"].claim_expenses == 0
        assert entries["Dental"].profit_margin == 0.0

    @pytest.mark.asyncio
    async def test_loss_gives_negative_margin(
        self, repos: Repositories, company_id: UUID, aggregator: PolicyAggregator
    ) -> None:
        contract = await add_contract(repos, company_id)
        provider = await add_provider(repos, company_id)
        await add_invoice(
            repos, company_id, total=Decimal("100.00"), policy_contract_id=contract.id
        )
        await add_claim(
            repos,
            contract,
            provider.id,
            status=ClaimStatus.APPROVED,
            total_amount=Decimal("300.00"),
            approved_amount=Decimal("300.00"),
        )

        (entry,) = await aggregator.profitability(company_id, JUNE)
        assert entry.profit == Decimal("-200.00")
        assert entry.profit_margin == -200.0

    @pytest.mark.asyncio
    async def test_other_company_invoices_are_ignored(
        self, repos: Repositories, company_id: UUID, aggregator: PolicyAggregator
    ) -> None:
        contract = await add_contract(repos, company_id)
        await add_invoice(
            repos, uuid4(), total=Decimal("100.00"), policy_contract_id=contract.id
        )
        (entry,) = await aggregator.profitability(company_id, JUNE)
        assert entry.premium_revenue == 0
