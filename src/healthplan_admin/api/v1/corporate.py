# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Corporate client endpoints: onboarding, status and coverage plans."""

from operator import attrgetter
from typing import Annotated
from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response, status

from ...core.result_types import Err
from ...models.corporate import (
    CorporateClient,
    CorporateClientCreate,
    CorporateClientDetail,
    CorporateStatusUpdate,
    CoveragePlan,
    CoveragePlanUpdate,
)
from ...schemas.common import ListResponse
from ...services.corporate_service import CorporateService
from ..dependencies import (
    CompanyStaffDep,
    Pagination,
    ensure_company_access,
    get_corporate_service,
    owned_by_company,
)
from ..response_patterns import ErrorResponse, handle_result, paginated

router = APIRouter()

ServiceDep = Annotated[CorporateService, Depends(get_corporate_service)]
_client_company = attrgetter("client.insurance_company_id")


@router.post("/", status_code=status.HTTP_201_CREATED)
@beartype
async def create_corporate_client(
    client_data: CorporateClientCreate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> CorporateClientDetail | ErrorResponse:
    """Onboard an employer with its coverage plans and admin login."""
    ensure_company_access(current_user, client_data.insurance_company_id)
    result = await service.create(client_data)
    return handle_result(result, response, status.HTTP_201_CREATED)


@router.get("/")
@beartype
async def list_corporate_clients(
    response: Response,
    insurance_company_id: Annotated[UUID, Query(alias="insuranceCompanyId")],
    pagination: Pagination,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> ListResponse[CorporateClient] | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.list_clients(
        insurance_company_id, limit=pagination.limit, offset=pagination.skip
    )
    return handle_result(
        paginated(result, CorporateClient, pagination.skip, pagination.limit), response
    )


@router.get("/{client_id}")
@beartype
async def get_corporate_client(
    client_id: UUID,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> CorporateClientDetail | ErrorResponse:
    result = owned_by_company(current_user, await service.get(client_id), _client_company)
    return handle_result(result, response)


@router.patch("/{client_id}/status")
@beartype
async def update_corporate_client_status(
    client_id: UUID,
    status_update: CorporateStatusUpdate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> CorporateClient | ErrorResponse:
    existing = owned_by_company(current_user, await service.get(client_id), _client_company)
    if isinstance(existing, Err):
        return handle_result(existing, response)
    return handle_result(await service.update_status(client_id, status_update), response)


@router.patch("/{client_id}/coverage-plans/{plan_id}")
@beartype
async def update_coverage_plan(
    client_id: UUID,
    plan_id: UUID,
    plan_update: CoveragePlanUpdate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> CoveragePlan | ErrorResponse:
    existing = owned_by_company(current_user, await service.get(client_id), _client_company)
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.update_coverage_plan(client_id, plan_id, plan_update)
    return handle_result(result, response)
