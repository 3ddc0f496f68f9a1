# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Claim endpoints: submission, lookup and adjudication."""

from typing import Annotated
from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response, status

from ...core.result_types import Err
from ...models.claim import Claim, ClaimCreate, ClaimStatus, ClaimStatusUpdate
from ...schemas.common import ListResponse
from ...services.claim_service import ClaimService
from ..dependencies import (
    CompanyStaffDep,
    Pagination,
    ensure_company_access,
    get_claim_service,
    owned_by_company,
)
from ..response_patterns import ErrorResponse, handle_result, paginated

router = APIRouter()

ServiceDep = Annotated[ClaimService, Depends(get_claim_service)]


@router.post("/", status_code=status.HTTP_201_CREATED)
@beartype
async def create_claim(
    claim_data: ClaimCreate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> Claim | ErrorResponse:
    """Submit a claim against an ACTIVE policy contract."""
    ensure_company_access(current_user, claim_data.insurance_company_id)
    result = await service.create(claim_data)
    return handle_result(result, response, status.HTTP_201_CREATED)


@router.get("/")
@beartype
async def list_claims(
    response: Response,
    insurance_company_id: Annotated[UUID, Query(alias="insuranceCompanyId")],
    pagination: Pagination,
    service: ServiceDep,
    current_user: CompanyStaffDep,
    claim_status: Annotated[ClaimStatus | None, Query(alias="status")] = None,
    member_id: Annotated[UUID | None, Query(alias="memberId")] = None,
    provider_id: Annotated[UUID | None, Query(alias="providerId")] = None,
) -> ListResponse[Claim] | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.list_claims(
        insurance_company_id,
        status=claim_status,
        member_id=member_id,
        provider_id=provider_id,
        limit=pagination.limit,
        offset=pagination.skip,
    )
    return handle_result(
        paginated(result, Claim, pagination.skip, pagination.limit), response
    )


@router.get("/{claim_id}")
@beartype
async def get_claim(
    claim_id: UUID,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> Claim | ErrorResponse:
    result = owned_by_company(current_user, await service.get(claim_id))
    return handle_result(result, response)


@router.patch("/{claim_id}/status")
@beartype
async def update_claim_status(
    claim_id: UUID,
    decision: ClaimStatusUpdate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> Claim | ErrorResponse:
    existing = owned_by_company(current_user, await service.get(claim_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    return handle_result(await service.update_status(claim_id, decision), response)
