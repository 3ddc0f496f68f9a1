# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Insurance company (tenant) management endpoints."""

from operator import attrgetter
from typing import Annotated
from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Response, status

from ...models.insurance_company import (
    InsuranceCompany,
    InsuranceCompanyCreate,
    InsuranceCompanyUpdate,
)
from ...schemas.common import ListResponse
from ...services.insurance_company_service import InsuranceCompanyService
from ..dependencies import (
    AdminUserDep,
    CompanyStaffDep,
    Pagination,
    get_insurance_company_service,
    owned_by_company,
)
from ..response_patterns import ErrorResponse, handle_result, paginated

router = APIRouter()

ServiceDep = Annotated[InsuranceCompanyService, Depends(get_insurance_company_service)]


@router.post("/", status_code=status.HTTP_201_CREATED)
@beartype
async def create_insurance_company(
    company_data: InsuranceCompanyCreate,
    response: Response,
    service: ServiceDep,
    _admin: AdminUserDep,
) -> InsuranceCompany | ErrorResponse:
    result = await service.create(company_data)
    return handle_result(result, response, status.HTTP_201_CREATED)


@router.get("/")
@beartype
async def list_insurance_companies(
    response: Response,
    pagination: Pagination,
    service: ServiceDep,
    _admin: AdminUserDep,
    active_only: bool = False,
) -> ListResponse[InsuranceCompany] | ErrorResponse:
    result = await service.list_companies(
        active_only=active_only, limit=pagination.limit, offset=pagination.skip
    )
    return handle_result(
        paginated(result, InsuranceCompany, pagination.skip, pagination.limit), response
    )


@router.get("/{company_id}")
@beartype
async def get_insurance_company(
    company_id: UUID,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> InsuranceCompany | ErrorResponse:
    """A company; INSURANCE_ADMIN accounts may read their own."""
    result = owned_by_company(current_user, await service.get(company_id), attrgetter("id"))
    return handle_result(result, response)


@router.patch("/{company_id}")
@beartype
async def update_insurance_company(
    company_id: UUID,
    update_data: InsuranceCompanyUpdate,
    response: Response,
    service: ServiceDep,
    _admin: AdminUserDep,
) -> InsuranceCompany | ErrorResponse:
    result = await service.update(company_id, update_data)
    return handle_result(result, response)


@router.post("/{company_id}/deactivate")
@beartype
async def deactivate_insurance_company(
    company_id: UUID,
    response: Response,
    service: ServiceDep,
    _admin: AdminUserDep,
) -> InsuranceCompany | ErrorResponse:
    result = await service.deactivate(company_id)
    return handle_result(result, response)
