"""Unit tests for claim intake and adjudication."""

from datetime import date, timedelta
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from pydantic import ValidationError

from healthplan_admin.core.result_types import Err, Ok
from healthplan_admin.models.claim import (
    Claim,
    ClaimCreate,
    ClaimStatus,
    ClaimStatusUpdate,
    ClaimType,
)
from healthplan_admin.models.policy_contract import ContractStatus, PolicyContract
from healthplan_admin.models.provider import Provider
from healthplan_admin.repositories import Repositories
from healthplan_admin.services.claim_service import ClaimService, generate_claim_number
from tests.fixtures.factories import add_company, add_contract, add_member, add_provider


@pytest.fixture
def service(repos: Repositories) -> ClaimService:
    return ClaimService(repos.claims, repos.policy_contracts, repos.providers)


@pytest_asyncio.fixture
async def contract(repos: Repositories, company_id: UUID) -> PolicyContract:
    member = await add_member(repos, company_id)
    return await add_contract(repos, company_id, member.id)


@pytest_asyncio.fixture
async def provider(repos: Repositories, company_id: UUID) -> Provider:
    return await add_provider(repos, company_id)


def submission(contract: PolicyContract, provider_id: UUID, **overrides: object) -> ClaimCreate:
    data: dict[str, object] = {
        "insurance_company_id": contract.insurance_company_id,
        "member_id": contract.member_id,
        "policy_contract_id": contract.id,
        "provider_id": provider_id,
        "service_code": "CONSULT",
        "service_date": date(2025, 6, 1),
        "total_amount": Decimal("250.00"),
    }
    data.update(overrides)
    return ClaimCreate(**data)


async def submitted(
    service: ClaimService, contract: PolicyContract, provider: Provider
) -> Claim:
    result = await service.create(submission(contract, provider.id))
    assert isinstance(result, Ok)
    return result.value


@pytest.mark.parametrize(
    ("claim_type", "prefix"),
    [(ClaimType.MEDICAL, "MED"), (ClaimType.PHARMACY, "RX"), (ClaimType.MENTAL_HEALTH, "MH")],
)
def test_claim_number_prefix(claim_type: ClaimType, prefix: str) -> None:
    number = generate_claim_number(claim_type)
    assert number.startswith(prefix)
    assert number[len(prefix):].isdigit()
    assert len(number) == len(prefix) + 14


class TestPayloads:
    def test_future_service_date_is_rejected(self) -> None:
        with pytest.raises(ValidationError, match="cannot be in the future"):
            ClaimCreate(
                insurance_company_id=uuid4(),
                member_id=uuid4(),
                policy_contract_id=uuid4(),
                provider_id=uuid4(),
                service_code="CONSULT",
                service_date=date.today() + timedelta(days=1),
                total_amount=Decimal("10.00"),
            )

    def test_partial_approval_needs_amount(self) -> None:
        with pytest.raises(ValidationError, match="requires approved_amount"):
            ClaimStatusUpdate(status=ClaimStatus.PARTIALLY_APPROVED)

    def test_denial_needs_reason(self) -> None:
        with pytest.raises(ValidationError, match="requires denial_reason"):
            ClaimStatusUpdate(status=ClaimStatus.DENIED)


class TestCreate:
    @pytest.mark.asyncio
    async def test_submit(
        self, service: ClaimService, contract: PolicyContract, provider: Provider
    ) -> None:
        claim = await submitted(service, contract, provider)
        assert claim.status == ClaimStatus.SUBMITTED
        assert claim.claim_number.startswith("MED")
        assert claim.approved_amount == Decimal("0")

    @pytest.mark.asyncio
    async def test_member_must_hold_the_contract(
        self, service: ClaimService, contract: PolicyContract, provider: Provider
    ) -> None:
        result = await service.create(submission(contract, provider.id, member_id=uuid4()))
        assert isinstance(result, Err)
        assert "does not cover" in result.error

    @pytest.mark.asyncio
    async def test_contract_must_be_active(
        self,
        repos: Repositories,
        service: ClaimService,
        company_id: UUID,
        provider: Provider,
    ) -> None:
        pending = await add_contract(repos, company_id, status=ContractStatus.PENDING)
        result = await service.create(submission(pending, provider.id))
        assert isinstance(result, Err)
        assert "not ACTIVE" in result.error

    @pytest.mark.asyncio
    async def test_provider_of_other_company_is_not_found(
        self, repos: Repositories, service: ClaimService, contract: PolicyContract
    ) -> None:
        outsider = await add_provider(repos, (await add_company(repos)).id)
        result = await service.create(submission(contract, outsider.id))
        assert isinstance(result, Err)
        assert result.error == f"Provider {outsider.id} not found"


class TestAdjudication:
    @pytest.mark.asyncio
    async def test_approve_then_pay(
        self, service: ClaimService, contract: PolicyContract, provider: Provider
    ) -> None:
        claim = await submitted(service, contract, provider)

        result = await service.update_status(
            claim.id, ClaimStatusUpdate(status=ClaimStatus.IN_REVIEW)
        )
        assert isinstance(result, Ok)

        result = await service.update_status(
            claim.id, ClaimStatusUpdate(status=ClaimStatus.APPROVED)
        )
        assert isinstance(result, Ok)
        assert result.value.approved_amount == Decimal("250.00")

        result = await service.update_status(
            claim.id, ClaimStatusUpdate(status=ClaimStatus.PAID)
        )
        assert isinstance(result, Ok)
        assert result.value.paid_amount == Decimal("250.00")

    @pytest.mark.asyncio
    async def test_partial_approval_cannot_exceed_total(
        self, service: ClaimService, contract: PolicyContract, provider: Provider
    ) -> None:
        claim = await submitted(service, contract, provider)
        await service.update_status(claim.id, ClaimStatusUpdate(status=ClaimStatus.PENDING))

        result = await service.update_status(
            claim.id,
            ClaimStatusUpdate(
                status=ClaimStatus.PARTIALLY_APPROVED, approved_amount=Decimal("300.00")
            ),
        )
        assert isinstance(result, Err)
        assert result.error.startswith("Invalid approved amount")

        result = await service.update_status(
            claim.id,
            ClaimStatusUpdate(
                status=ClaimStatus.PARTIALLY_APPROVED, approved_amount=Decimal("100.00")
            ),
        )
        assert isinstance(result, Ok)
        assert result.value.approved_amount == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_denial_clears_approved_amount(
        self, service: ClaimService, contract: PolicyContract, provider: Provider
    ) -> None:
        claim = await submitted(service, contract, provider)
        result = await service.update_status(
            claim.id,
            ClaimStatusUpdate(status=ClaimStatus.DENIED, denial_reason="Not covered"),
        )
        assert isinstance(result, Ok)
        assert result.value.denial_reason == "Not covered"
        assert result.value.approved_amount == Decimal("0")

    @pytest.mark.asyncio
    async def test_invalid_transition(
        self, service: ClaimService, contract: PolicyContract, provider: Provider
    ) -> None:
        claim = await submitted(service, contract, provider)
        result = await service.update_status(
            claim.id, ClaimStatusUpdate(status=ClaimStatus.PAID)
        )
        assert isinstance(result, Err)
        assert result.error == (
            "Invalid status transition from SUBMITTED to PAID. "
            "Valid transitions are: DENIED, IN_REVIEW, PENDING"
        )

    @pytest.mark.asyncio
    async def test_void_is_terminal(
        self,
        repos: Repositories,
        service: ClaimService,
        contract: PolicyContract,
        provider: Provider,
    ) -> None:
        claim = await submitted(service, contract, provider)
        await repos.claims.update(claim.id, {"status": ClaimStatus.VOID})
        result = await service.update_status(
            claim.id, ClaimStatusUpdate(status=ClaimStatus.IN_REVIEW)
        )
        assert isinstance(result, Err)
        assert result.error.endswith("Valid transitions are: none")


class TestList:
    @pytest.mark.asyncio
    async def test_filters(
        self,
        service: ClaimService,
        contract: PolicyContract,
        provider: Provider,
        company_id: UUID,
    ) -> None:
        first = await submitted(service, contract, provider)
        await submitted(service, contract, provider)
        await service.update_status(first.id, ClaimStatusUpdate(status=ClaimStatus.PENDING))

        result = await service.list_claims(company_id, status=ClaimStatus.PENDING)
        assert isinstance(result, Ok)
        claims, total = result.value
        assert total == 1
        assert claims[0].id == first.id

        result = await service.list_claims(company_id, provider_id=uuid4())
        assert isinstance(result, Ok)
        assert result.value == ([], 0)
