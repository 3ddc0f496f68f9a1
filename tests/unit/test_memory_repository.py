"""Unit tests for the in-memory repository."""

from decimal import Decimal
from uuid import uuid4

import pytest

from healthplan_admin.models.policy_contract import ContractStatus
from healthplan_admin.repositories import Repositories
from healthplan_admin.repositories.base import DuplicateRecordError
from healthplan_admin.repositories.filters import asc, desc, eq, in_
from tests.fixtures.factories import add_company, add_contract, add_invoice, add_member


class TestInMemoryRepository:
    """Test reads and writes against the dict-backed repository."""

    @pytest.mark.asyncio
    async def test_insert_and_get(self, repos: Repositories) -> None:
        company = await add_company(repos)
        assert await repos.insurance_companies.get(company.id) == company
        assert await repos.insurance_companies.get(uuid4()) is None

    @pytest.mark.asyncio
    async def test_unique_groups_are_enforced(self, repos: Repositories) -> None:
        await add_company(repos, code="ACME")
        with pytest.raises(DuplicateRecordError) as exc_info:
            await add_company(repos, code="ACME")
        assert exc_info.value.fields == ("code",)

    @pytest.mark.asyncio
    async def test_unique_group_ignores_null_members(self, repos: Repositories) -> None:
        """Two members without a national id do not collide."""
        company = await add_company(repos)
        await add_member(repos, company.id, national_id=None)
        await add_member(repos, company.id, national_id=None)
        assert await repos.members.count() == 2

    @pytest.mark.asyncio
    async def test_find_orders_and_paginates(self, repos: Repositories) -> None:
        company = await add_company(repos)
        for policy_type in ("Dental", "Health", "Vision"):
            await add_contract(repos, company.id, policy_type=policy_type)

        rows = await repos.policy_contracts.find(order_by=(desc("policy_type"),))
        assert [r.policy_type for r in rows] == ["Vision", "Health", "Dental"]

        page = await repos.policy_contracts.find(
            order_by=(asc("policy_type"),), limit=1, offset=1
        )
        assert [r.policy_type for r in page] == ["Health"]

    @pytest.mark.asyncio
    async def test_find_and_count(self, repos: Repositories) -> None:
        company = await add_company(repos)
        for _ in range(3):
            await add_contract(repos, company.id)
        rows, total = await repos.policy_contracts.find_and_count(limit=2)
        assert len(rows) == 2
        assert total == 3

    @pytest.mark.asyncio
    async def test_count_sum_and_distinct(self, repos: Repositories) -> None:
        company = await add_company(repos)
        await add_invoice(repos, company.id, total=Decimal("10.00"))
        await add_invoice(repos, company.id, total=Decimal("15.50"))
        where = (eq("insurance_company_id", company.id),)

        assert await repos.invoices.count(where) == 2
        assert await repos.invoices.sum("total", where) == Decimal("25.50")
        assert await repos.invoices.sum("total", (eq("insurance_company_id", uuid4()),)) == 0
        assert await repos.invoices.distinct("insurance_company_id") == [company.id]

    @pytest.mark.asyncio
    async def test_update_returns_validated_copy(self, repos: Repositories) -> None:
        company = await add_company(repos)
        contract = await add_contract(repos, company.id, status=ContractStatus.PENDING)

        updated = await repos.policy_contracts.update(
            contract.id, {"status": ContractStatus.ACTIVE}
        )
        assert updated is not None
        assert updated.status == ContractStatus.ACTIVE
        assert updated.updated_at >= contract.updated_at
        assert contract.status == ContractStatus.PENDING
        assert await repos.policy_contracts.update(uuid4(), {"status": "ACTIVE"}) is None

    @pytest.mark.asyncio
    async def test_update_rejects_invalid_data(self, repos: Repositories) -> None:
        company = await add_company(repos)
        contract = await add_contract(repos, company.id)
        with pytest.raises(ValueError):
            await repos.policy_contracts.update(
                contract.id, {"end_date": contract.start_date}
            )

    @pytest.mark.asyncio
    async def test_unknown_field_is_rejected(self, repos: Repositories) -> None:
        with pytest.raises(ValueError, match="Unknown policy_contracts field"):
            await repos.policy_contracts.find((eq("no_such_field", 1),))

    @pytest.mark.asyncio
    async def test_delete(self, repos: Repositories) -> None:
        company = await add_company(repos)
        assert await repos.insurance_companies.delete(company.id) is True
        assert await repos.insurance_companies.delete(company.id) is False

    @pytest.mark.asyncio
    async def test_in_filter(self, repos: Repositories) -> None:
        company = await add_company(repos)
        await add_contract(repos, company.id, status=ContractStatus.ACTIVE)
        await add_contract(repos, company.id, status=ContractStatus.RENEWED)
        await add_contract(repos, company.id, status=ContractStatus.CANCELED)
        count = await repos.policy_contracts.count(
            (in_("status", [ContractStatus.ACTIVE, ContractStatus.RENEWED]),)
        )
        assert count == 2
