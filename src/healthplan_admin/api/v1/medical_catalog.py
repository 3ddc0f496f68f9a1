# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Medical catalog endpoints for categories, services and items."""

from typing import Annotated
from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response, status

from ...core.result_types import Err
from ...models.medical_catalog import (
    MedicalCategory,
    MedicalCategoryCreate,
    MedicalCategoryUpdate,
    MedicalItem,
    MedicalItemCreate,
    MedicalItemUpdate,
    MedicalService,
    MedicalServiceCreate,
    MedicalServiceUpdate,
)
from ...schemas.common import ListResponse
from ...services.medical_catalog_service import MedicalCatalogService
from ..dependencies import (
    CompanyStaffDep,
    Pagination,
    ensure_company_access,
    get_medical_catalog_service,
    owned_by_company,
)
from ..response_patterns import ErrorResponse, handle_result, paginated

router = APIRouter()

ServiceDep = Annotated[MedicalCatalogService, Depends(get_medical_catalog_service)]
CompanyId = Annotated[UUID, Query(alias="insuranceCompanyId")]
CategoryFilter = Annotated[UUID | None, Query(alias="categoryId")]
ActiveOnly = Annotated[bool, Query(alias="activeOnly")]


# Categories


@router.post("/categories", status_code=status.HTTP_201_CREATED)
@beartype
async def create_category(
    category_data: MedicalCategoryCreate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> MedicalCategory | ErrorResponse:
    ensure_company_access(current_user, category_data.insurance_company_id)
    result = await service.create_category(category_data)
    return handle_result(result, response, status.HTTP_201_CREATED)


@router.get("/categories")
@beartype
async def list_categories(
    response: Response,
    insurance_company_id: CompanyId,
    pagination: Pagination,
    service: ServiceDep,
    current_user: CompanyStaffDep,
    active_only: ActiveOnly = False,
) -> ListResponse[MedicalCategory] | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.list_categories(
        insurance_company_id,
        active_only=active_only,
        limit=pagination.limit,
        offset=pagination.skip,
    )
    return handle_result(
        paginated(result, MedicalCategory, pagination.skip, pagination.limit), response
    )


@router.get("/categories/{category_id}")
@beartype
async def get_category(
    category_id: UUID,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> MedicalCategory | ErrorResponse:
    result = owned_by_company(current_user, await service.get_category(category_id))
    return handle_result(result, response)


@router.patch("/categories/{category_id}")
@beartype
async def update_category(
    category_id: UUID,
    update_data: MedicalCategoryUpdate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> MedicalCategory | ErrorResponse:
    existing = owned_by_company(current_user, await service.get_category(category_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    return handle_result(await service.update_category(category_id, update_data), response)


# Services


@router.post("/services", status_code=status.HTTP_201_CREATED)
@beartype
async def create_service(
    service_data: MedicalServiceCreate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> MedicalService | ErrorResponse:
    ensure_company_access(current_user, service_data.insurance_company_id)
    result = await service.create_service(service_data)
    return handle_result(result, response, status.HTTP_201_CREATED)


@router.get("/services")
@beartype
async def list_services(
    response: Response,
    insurance_company_id: CompanyId,
    pagination: Pagination,
    service: ServiceDep,
    current_user: CompanyStaffDep,
    category_id: CategoryFilter = None,
    active_only: ActiveOnly = False,
) -> ListResponse[MedicalService] | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.list_services(
        insurance_company_id,
        category_id=category_id,
        active_only=active_only,
        limit=pagination.limit,
        offset=pagination.skip,
    )
    return handle_result(
        paginated(result, MedicalService, pagination.skip, pagination.limit), response
    )


@router.get("/services/{service_id}")
@beartype
async def get_service(
    service_id: UUID,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> MedicalService | ErrorResponse:
    result = owned_by_company(current_user, await service.get_service(service_id))
    return handle_result(result, response)


@router.patch("/services/{service_id}")
@beartype
async def update_service(
    service_id: UUID,
    update_data: MedicalServiceUpdate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> MedicalService | ErrorResponse:
    existing = owned_by_company(current_user, await service.get_service(service_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    return handle_result(await service.update_service(service_id, update_data), response)


# Items


@router.post("/items", status_code=status.HTTP_201_CREATED)
@beartype
async def create_item(
    item_data: MedicalItemCreate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> MedicalItem | ErrorResponse:
    ensure_company_access(current_user, item_data.insurance_company_id)
    result = await service.create_item(item_data)
    return handle_result(result, response, status.HTTP_201_CREATED)


@router.get("/items")
@beartype
async def list_items(
    response: Response,
    insurance_company_id: CompanyId,
    pagination: Pagination,
    service: ServiceDep,
    current_user: CompanyStaffDep,
    category_id: CategoryFilter = None,
    active_only: ActiveOnly = False,
) -> ListResponse[MedicalItem] | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.list_items(
        insurance_company_id,
        category_id=category_id,
        active_only=active_only,
        limit=pagination.limit,
        offset=pagination.skip,
    )
    return handle_result(
        paginated(result, MedicalItem, pagination.skip, pagination.limit), response
    )


@router.get("/items/{item_id}")
@beartype
async def get_item(
    item_id: UUID,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> MedicalItem | ErrorResponse:
    result = owned_by_company(current_user, await service.get_item(item_id))
    return handle_result(result, response)


@router.patch("/items/{item_id}")
@beartype
async def update_item(
    item_id: UUID,
    update_data: MedicalItemUpdate,
    response: Response,
    service: ServiceDep,
    current_user: CompanyStaffDep,
) -> MedicalItem | ErrorResponse:
    existing = owned_by_company(current_user, await service.get_item(item_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    return handle_result(await service.update_item(item_id, update_data), response)
