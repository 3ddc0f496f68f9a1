# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Policy contract endpoints: enrollment, status changes, cancel and renew."""

from typing import Annotated
from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response, status

from ...core.result_types import Err
from ...models.policy_contract import (
    ContractCancellation,
    ContractStatus,
    ContractStatusUpdate,
    PolicyContract,
    PolicyContractCreate,
)
from ...schemas.common import ListResponse
from ...services.policy_contract_service import PolicyContractService
from ..dependencies import (
    CompanyStaffDep,
    Pagination,
    ensure_company_access,
    get_policy_contract_service,
    owned_by_company,
)
from ..response_patterns import ErrorResponse, handle_result, paginated

router = APIRouter()

ServiceDep = Annotated[PolicyContractService, Depends(get_policy_contract_service)]


@router.post("/", status_code=status.HTTP_201_CREATED)
@beartype
async def create_policy_contract(
    contract_data: PolicyContractCreate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> PolicyContract | ErrorResponse:
    """Enroll a member; the contract starts PENDING."""
    ensure_company_access(current_user, contract_data.insurance_company_id)
    result = await service.create(contract_data)
    return handle_result(result, response, status.HTTP_201_CREATED)


@router.get("/")
@beartype
async def list_policy_contracts(
    response: Response,
    insurance_company_id: Annotated[UUID, Query(alias="insuranceCompanyId")],
    pagination: Pagination,
    service: ServiceDep,
    current_user: CompanyStaffDep,
    contract_status: Annotated[ContractStatus | None, Query(alias="status")] = None,
    member_id: Annotated[UUID | None, Query(alias="memberId")] = None,
) -> ListResponse[PolicyContract] | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.list_contracts(
        insurance_company_id,
        status=contract_status,
        member_id=member_id,
        limit=pagination.limit,
        offset=pagination.skip,
    )
    return handle_result(
        paginated(result, PolicyContract, pagination.skip, pagination.limit), response
    )


@router.get("/{contract_id}")
@beartype
async def get_policy_contract(
    contract_id: UUID,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> PolicyContract | ErrorResponse:
    result = owned_by_company(current_user, await service.get(contract_id))
    return handle_result(result, response)


@router.patch("/{contract_id}/status")
@beartype
async def update_policy_contract_status(
    contract_id: UUID,
    status_update: ContractStatusUpdate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> PolicyContract | ErrorResponse:
    existing = owned_by_company(current_user, await service.get(contract_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.update_status(contract_id, status_update.status)
    return handle_result(result, response)


@router.post("/{contract_id}/cancel")
@beartype
async def cancel_policy_contract(
    contract_id: UUID,
    cancellation: ContractCancellation,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> PolicyContract | ErrorResponse:
    existing = owned_by_company(current_user, await service.get(contract_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    return handle_result(await service.cancel(contract_id, cancellation), response)


@router.post("/{contract_id}/renew", status_code=status.HTTP_201_CREATED)
@beartype
async def renew_policy_contract(
    contract_id: UUID,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> PolicyContract | ErrorResponse:
    """Renew an ACTIVE contract; returns the new PENDING contract."""
    existing = owned_by_company(current_user, await service.get(contract_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    return handle_result(
        await service.renew(contract_id), response, status.HTTP_201_CREATED
    )
