"""Unit tests for corporate client onboarding."""

from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from healthplan_admin.core.result_types import Err, Ok
from healthplan_admin.core.security import Security
from healthplan_admin.models.admin import UserType
from healthplan_admin.models.corporate import (
    CorporateAdminCredentials,
    CorporateClientCreate,
    CorporateStatusUpdate,
    CoveragePlan,
    CoveragePlanCreate,
    CoveragePlanUpdate,
    CoverageType,
    ServiceType,
)
from healthplan_admin.repositories import Repositories
from healthplan_admin.repositories.filters import eq
from healthplan_admin.services.auth_service import AuthService
from healthplan_admin.services.corporate_service import CorporateService


@pytest.fixture
def auth(repos: Repositories, security: Security) -> AuthService:
    return AuthService(repos.admin_users, security)


@pytest.fixture
def service(repos: Repositories, auth: AuthService) -> CorporateService:
    return CorporateService(
        repos.corporate_clients,
        repos.coverage_plans,
        repos.insurance_companies,
        repos.admin_users,
        auth,
    )


def onboarding(company_id: UUID, **overrides: object) -> CorporateClientCreate:
    data: dict[str, object] = {
        "insurance_company_id": company_id,
        "name": "Globex Corporation",
        "registration_number": "REG-2231",
        "address": "10 Industrial Park",
        "phone": "+15550123",
        "contact_name": "Hank Scorpio",
        "coverage_plans": [
            CoveragePlanCreate(
                service_type=ServiceType.GENERAL_MEDICAL, coverage_type=CoverageType.FULL
            ),
            CoveragePlanCreate(
                service_type=ServiceType.DENTAL,
                coverage_type=CoverageType.PARTIAL,
                coverage_percentage=Decimal("80"),
            ),
        ],
        "admin_credentials": CorporateAdminCredentials(
            username="globex.hr", password="globex-pass-1", email="hr@globex.com"
        ),
    }
    data.update(overrides)
    return CorporateClientCreate(**data)


class TestCoveragePlanTerms:
    def test_capped_needs_a_cap(self) -> None:
        with pytest.raises(ValueError, match="requires max_amount"):
            CoveragePlanCreate(
                service_type=ServiceType.DENTAL, coverage_type=CoverageType.CAPPED
            )

    def test_full_is_one_hundred_percent(self) -> None:
        with pytest.raises(ValueError, match="coverage_percentage of 100"):
            CoveragePlanCreate(
                service_type=ServiceType.DENTAL,
                coverage_type=CoverageType.FULL,
                coverage_percentage=Decimal("90"),
            )


class TestCreate:
    @pytest.mark.asyncio
    async def test_creates_client_plans_and_admin_login(
        self,
        repos: Repositories,
        service: CorporateService,
        auth: AuthService,
        company_id: UUID,
    ) -> None:
        result = await service.create(onboarding(company_id))

        assert isinstance(result, Ok)
        detail = result.value
        assert detail.client.name == "Globex Corporation"
        assert len(detail.coverage_plans) == 2
        assert all(p.corporate_client_id == detail.client.id for p in detail.coverage_plans)

        admin = await repos.admin_users.find_one((eq("username", "globex.hr"),))
        assert admin is not None
        assert admin.user_type == UserType.CORPORATE_ADMIN
        assert admin.corporate_client_id == detail.client.id
        assert admin.insurance_company_id == company_id
        assert isinstance(await auth.login("globex.hr", "globex-pass-1"), Ok)

    @pytest.mark.asyncio
    async def test_unknown_company(self, service: CorporateService) -> None:
        result = await service.create(onboarding(uuid4()))
        assert isinstance(result, Err)
        assert "not found" in result.error

    @pytest.mark.asyncio
    async def test_duplicates_are_rejected_before_writing(
        self, repos: Repositories, service: CorporateService, company_id: UUID
    ) -> None:
        await service.create(onboarding(company_id))

        same_name = await service.create(
            onboarding(company_id, registration_number="REG-9999")
        )
        assert isinstance(same_name, Err)
        assert "already exists" in same_name.error

        same_login = await service.create(
            onboarding(company_id, name="Initech", registration_number="REG-9999")
        )
        assert isinstance(same_login, Err)
        assert same_login.error == "User globex.hr already exists"

        assert await repos.corporate_clients.count() == 1
        assert await repos.coverage_plans.count() == 2

    @pytest.mark.asyncio
    async def test_failed_admin_login_rolls_back(
        self, repos: Repositories, company_id: UUID
    ) -> None:
        auth = AsyncMock()
        auth.create_user.return_value = Err("User globex.hr already exists")
        service = CorporateService(
            repos.corporate_clients,
            repos.coverage_plans,
            repos.insurance_companies,
            repos.admin_users,
            auth,
        )

        result = await service.create(onboarding(company_id))

        assert isinstance(result, Err)
        assert await repos.corporate_clients.count() == 0
        assert await repos.coverage_plans.count() == 0

    @pytest.mark.asyncio
    async def test_storage_failure_mid_onboarding_rolls_back(
        self,
        repos: Repositories,
        service: CorporateService,
        company_id: UUID,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        store_plan = repos.coverage_plans.insert
        stored: list[CoveragePlan] = []

        async def insert_then_lose_connection(plan: CoveragePlan) -> CoveragePlan:
            if stored:
                raise ConnectionError("connection to the database was lost")
            stored.append(await store_plan(plan))
            return stored[-1]

        monkeypatch.setattr(repos.coverage_plans, "insert", insert_then_lose_connection)

        with pytest.raises(ConnectionError):
            await service.create(onboarding(company_id))

        assert len(stored) == 1
        assert await repos.corporate_clients.count() == 0
        assert await repos.coverage_plans.count() == 0
        assert await repos.admin_users.count() == 0

    @pytest.mark.asyncio
    async def test_login_failure_raising_rolls_back(
        self, repos: Repositories, company_id: UUID
    ) -> None:
        auth = AsyncMock()
        auth.create_user.side_effect = ConnectionError("connection reset")
        service = CorporateService(
            repos.corporate_clients,
            repos.coverage_plans,
            repos.insurance_companies,
            repos.admin_users,
            auth,
        )

        with pytest.raises(ConnectionError):
            await service.create(onboarding(company_id))

        assert await repos.corporate_clients.count() == 0
        assert await repos.coverage_plans.count() == 0


class TestUpdates:
    @pytest.mark.asyncio
    async def test_get_lists_plans_by_service_type(
        self, service: CorporateService, company_id: UUID
    ) -> None:
        created = await service.create(onboarding(company_id))
        assert isinstance(created, Ok)

        result = await service.get(created.value.client.id)
        assert isinstance(result, Ok)
        assert [p.service_type for p in result.value.coverage_plans] == [
            ServiceType.DENTAL,
            ServiceType.GENERAL_MEDICAL,
        ]

    @pytest.mark.asyncio
    async def test_deactivate(self, service: CorporateService, company_id: UUID) -> None:
        created = await service.create(onboarding(company_id))
        assert isinstance(created, Ok)

        result = await service.update_status(
            created.value.client.id,
            CorporateStatusUpdate(is_active=False, reason="Contract ended"),
        )
        assert isinstance(result, Ok)
        assert result.value.is_active is False

    @pytest.mark.asyncio
    async def test_plan_update_is_revalidated(
        self, service: CorporateService, company_id: UUID
    ) -> None:
        created = await service.create(onboarding(company_id))
        assert isinstance(created, Ok)
        client = created.value.client
        dental = next(
            p for p in created.value.coverage_plans if p.service_type == ServiceType.DENTAL
        )

        invalid = await service.update_coverage_plan(
            client.id, dental.id, CoveragePlanUpdate(coverage_type=CoverageType.CAPPED)
        )
        assert isinstance(invalid, Err)
        assert invalid.error.startswith("Invalid coverage plan")

        capped = await service.update_coverage_plan(
            client.id,
            dental.id,
            CoveragePlanUpdate(coverage_type=CoverageType.CAPPED, max_amount=Decimal("500")),
        )
        assert isinstance(capped, Ok)
        assert capped.value.max_amount == Decimal("500")

    @pytest.mark.asyncio
    async def test_plan_of_other_client_is_not_found(
        self, service: CorporateService, company_id: UUID
    ) -> None:
        created = await service.create(onboarding(company_id))
        assert isinstance(created, Ok)
        plan = created.value.coverage_plans[0]

        result = await service.update_coverage_plan(
            uuid4(), plan.id, CoveragePlanUpdate(is_active=False)
        )
        assert isinstance(result, Err)
        assert result.error == f"Coverage plan {plan.id} not found"
