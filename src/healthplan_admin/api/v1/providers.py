# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Provider network endpoints."""

from typing import Annotated
from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response, status

from ...core.result_types import Err
from ...models.provider import Provider, ProviderCreate, ProviderStatusUpdate
from ...schemas.common import ListResponse
from ...services.provider_service import ProviderService
from ..dependencies import (
    CompanyStaffDep,
    Pagination,
    ensure_company_access,
    get_provider_service,
    owned_by_company,
)
from ..response_patterns import ErrorResponse, handle_result, paginated

router = APIRouter()

ServiceDep = Annotated[ProviderService, Depends(get_provider_service)]


@router.post("/", status_code=status.HTTP_201_CREATED)
@beartype
async def create_provider(
    provider_data: ProviderCreate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> Provider | ErrorResponse:
    ensure_company_access(current_user, provider_data.insurance_company_id)
    result = await service.create(provider_data)
    return handle_result(result, response, status.HTTP_201_CREATED)


@router.get("/")
@beartype
async def list_providers(
    response: Response,
    insurance_company_id: Annotated[UUID, Query(alias="insuranceCompanyId")],
    pagination: Pagination,
    service: ServiceDep,
    current_user: CompanyStaffDep,
    active_only: Annotated[bool, Query(alias="activeOnly")] = False,
) -> ListResponse[Provider] | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.list_providers(
        insurance_company_id,
        active_only=active_only,
        limit=pagination.limit,
        offset=pagination.skip,
    )
    return handle_result(
        paginated(result, Provider, pagination.skip, pagination.limit), response
    )


@router.get("/{provider_id}")
@beartype
async def get_provider(
    provider_id: UUID,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> Provider | ErrorResponse:
    result = owned_by_company(current_user, await service.get(provider_id))
    return handle_result(result, response)


@router.patch("/{provider_id}/status")
@beartype
async def update_provider_status(
    provider_id: UUID,
    status_update: ProviderStatusUpdate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> Provider | ErrorResponse:
    """Activate or deactivate a provider."""
    existing = owned_by_company(current_user, await service.get(provider_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.set_active(provider_id, status_update.is_active)
    return handle_result(result, response)
