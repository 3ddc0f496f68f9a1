"""Unit tests for insurance company management."""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from healthplan_admin.core.result_types import Err, Ok
from healthplan_admin.models.insurance_company import (
    InsuranceCompanyCreate,
    InsuranceCompanyUpdate,
)
from healthplan_admin.repositories import Repositories
from healthplan_admin.services.insurance_company_service import InsuranceCompanyService


@pytest.fixture
def service(repos: Repositories) -> InsuranceCompanyService:
    return InsuranceCompanyService(repos.insurance_companies)


def registration(name: str = "Acme Health", code: str = "ACME") -> InsuranceCompanyCreate:
    return InsuranceCompanyCreate(
        name=name,
        code=code,
        email="contact@acmehealth.com",
        phone="+15550100",
        address="1 Main Street",
    )


class TestInsuranceCompanyService:
    @pytest.mark.asyncio
    async def test_create_and_get(self, service: InsuranceCompanyService) -> None:
        created = await service.create(registration())
        assert isinstance(created, Ok)
        assert created.value.is_active is True

        fetched = await service.get(created.value.id)
        assert isinstance(fetched, Ok)
        assert fetched.value == created.value

    @pytest.mark.asyncio
    async def test_name_and_code_are_unique(self, service: InsuranceCompanyService) -> None:
        await service.create(registration())

        result = await service.create(registration(code="OTHER"))
        assert isinstance(result, Err)
        assert result.error == "Insurance company with name Acme Health already exists"

        result = await service.create(registration(name="Other Health"))
        assert isinstance(result, Err)
        assert result.error == "Insurance company with code ACME already exists"

    def test_code_must_be_upper_case(self) -> None:
        with pytest.raises(ValidationError):
            registration(code="acme")

    @pytest.mark.asyncio
    async def test_rename_onto_existing_name(self, service: InsuranceCompanyService) -> None:
        await service.create(registration())
        other = await service.create(registration(name="Beta Care", code="BETA"))
        assert isinstance(other, Ok)

        result = await service.update(other.value.id, InsuranceCompanyUpdate(name="Acme Health"))
        assert isinstance(result, Err)
        assert "already exists" in result.error

        # Keeping its own name is not a conflict
        result = await service.update(
            other.value.id, InsuranceCompanyUpdate(name="Beta Care", phone="+15550999")
        )
        assert isinstance(result, Ok)
        assert result.value.phone == "+15550999"

    @pytest.mark.asyncio
    async def test_deactivate_and_list(self, service: InsuranceCompanyService) -> None:
        first = await service.create(registration())
        await service.create(registration(name="Beta Care", code="BETA"))
        assert isinstance(first, Ok)

        result = await service.deactivate(first.value.id)
        assert isinstance(result, Ok)
        assert result.value.is_active is False

        listed = await service.list_companies(active_only=True)
        assert isinstance(listed, Ok)
        companies, total = listed.value
        assert total == 1
        assert companies[0].code == "BETA"

        listed = await service.list_companies()
        assert isinstance(listed, Ok)
        assert [c.name for c in listed.value[0]] == ["Acme Health", "Beta Care"]

    @pytest.mark.asyncio
    async def test_unknown_company(self, service: InsuranceCompanyService) -> None:
        result = await service.deactivate(uuid4())
        assert isinstance(result, Err)
        assert "not found" in result.error
