# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Member endpoints."""

from typing import Annotated
from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response, status

from ...core.result_types import Err
from ...models.member import Member, MemberCreate, MemberUpdate
from ...schemas.common import ListResponse
from ...services.member_service import MemberService
from ..dependencies import (
    CompanyStaffDep,
    Pagination,
    ensure_company_access,
    get_member_service,
    owned_by_company,
)
from ..response_patterns import ErrorResponse, handle_result, paginated

router = APIRouter()

ServiceDep = Annotated[MemberService, Depends(get_member_service)]


@router.post("/", status_code=status.HTTP_201_CREATED)
@beartype
async def create_member(
    member_data: MemberCreate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> Member | ErrorResponse:
    ensure_company_access(current_user, member_data.insurance_company_id)
    result = await service.create(member_data)
    return handle_result(result, response, status.HTTP_201_CREATED)


@router.get("/")
@beartype
async def list_members(
    response: Response,
    insurance_company_id: Annotated[UUID, Query(alias="insuranceCompanyId")],
    pagination: Pagination,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> ListResponse[Member] | ErrorResponse:
    """Members of a company ordered by last name."""
    ensure_company_access(current_user, insurance_company_id)
    result = await service.list_members(
        insurance_company_id, limit=pagination.limit, offset=pagination.skip
    )
    return handle_result(
        paginated(result, Member, pagination.skip, pagination.limit), response
    )


@router.get("/{member_id}")
@beartype
async def get_member(
    member_id: UUID,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> Member | ErrorResponse:
    result = owned_by_company(current_user, await service.get(member_id))
    return handle_result(result, response)


@router.patch("/{member_id}")
@beartype
async def update_member(
    member_id: UUID,
    update_data: MemberUpdate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> Member | ErrorResponse:
    existing = owned_by_company(current_user, await service.get(member_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    return handle_result(await service.update(member_id, update_data), response)
