# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Policy product catalogue and premium quote endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response, status

from ...core.result_types import Err
from ...models.policy_product import (
    PolicyProduct,
    PolicyProductCreate,
    PolicyProductUpdate,
    PolicyType,
    ProductStatus,
    ProductStatusUpdate,
)
from ...schemas.common import ListResponse
from ...schemas.premium import PremiumQuote, PremiumQuoteRequest
from ...services.policy_product_service import PolicyProductService
from ..dependencies import (
    CompanyStaffDep,
    Pagination,
    ensure_company_access,
    get_policy_product_service,
    owned_by_company,
)
from ..response_patterns import ErrorResponse, handle_result, paginated

router = APIRouter()

PolicyProductServiceDep = Annotated[
    PolicyProductService, Depends(get_policy_product_service)
]
CompanyId = Annotated[UUID, Query(alias="insuranceCompanyId")]


@router.post("/", status_code=status.HTTP_201_CREATED)
@beartype
async def create_product(
    product_data: PolicyProductCreate,
    response: Response,
    service: PolicyProductServiceDep,
    current_user: CompanyStaffDep,
) -> PolicyProduct | ErrorResponse:
    """Add a DRAFT product to the company's catalogue."""
    ensure_company_access(current_user, product_data.insurance_company_id)
    result = await service.create(product_data)
    return handle_result(result, response, status.HTTP_201_CREATED)


@router.get("/")
@beartype
async def list_products(
    response: Response,
    insurance_company_id: CompanyId,
    pagination: Pagination,
    service: PolicyProductServiceDep,
    current_user: CompanyStaffDep,
    product_status: Annotated[ProductStatus | None, Query(alias="status")] = None,
    policy_type: Annotated[PolicyType | None, Query(alias="type")] = None,
    available_on: Annotated[date | None, Query(alias="availableOn")] = None,
) -> ListResponse[PolicyProduct] | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.list_products(
        insurance_company_id,
        status=product_status,
        policy_type=policy_type,
        available_on=available_on,
        limit=pagination.limit,
        offset=pagination.skip,
    )
    return handle_result(
        paginated(result, PolicyProduct, pagination.skip, pagination.limit), response
    )


@router.get("/{product_id}")
@beartype
async def get_product(
    product_id: UUID,
    response: Response,
    service: PolicyProductServiceDep,
    current_user: CompanyStaffDep,
) -> PolicyProduct | ErrorResponse:
    result = owned_by_company(current_user, await service.get(product_id))
    return handle_result(result, response)


@router.patch("/{product_id}")
@beartype
async def update_product(
    product_id: UUID,
    update_data: PolicyProductUpdate,
    response: Response,
    service: PolicyProductServiceDep,
    current_user: CompanyStaffDep,
) -> PolicyProduct | ErrorResponse:
    """Edit a DRAFT product."""
    existing = owned_by_company(current_user, await service.get(product_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.update(product_id, update_data)
    return handle_result(result, response)


@router.patch("/{product_id}/status")
@beartype
async def update_product_status(
    product_id: UUID,
    status_update: ProductStatusUpdate,
    response: Response,
    service: PolicyProductServiceDep,
    current_user: CompanyStaffDep,
) -> PolicyProduct | ErrorResponse:
    existing = owned_by_company(current_user, await service.get(product_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.update_status(product_id, status_update.status)
    return handle_result(result, response)


@router.post("/{product_id}/quote")
@beartype
async def quote_premium(
    product_id: UUID,
    request: PremiumQuoteRequest,
    response: Response,
    service: PolicyProductServiceDep,
    current_user: CompanyStaffDep,
) -> PremiumQuote | ErrorResponse:
    """Price a policyholder and dependents under an ACTIVE product."""
    existing = owned_by_company(current_user, await service.get(product_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.quote(product_id, request)
    return handle_result(result, response)
