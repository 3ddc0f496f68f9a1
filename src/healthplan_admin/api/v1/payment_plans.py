# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Installment payment plan endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response, status

from ...core.result_types import Err
from ...models.payment_plan import (
    InstallmentPayment,
    PaymentPlan,
    PaymentPlanCreate,
    PaymentPlanStatus,
    PaymentPlanStatusUpdate,
)
from ...schemas.common import ListResponse
from ...services.billing_service import InvoiceService
from ...services.payment_plan_service import PaymentPlanService
from ..dependencies import (
    CompanyStaffDep,
    Pagination,
    ensure_company_access,
    get_invoice_service,
    get_payment_plan_service,
    owned_by_company,
)
from ..response_patterns import ErrorResponse, handle_result, paginated

router = APIRouter()

PaymentPlanServiceDep = Annotated[PaymentPlanService, Depends(get_payment_plan_service)]
InvoiceServiceDep = Annotated[InvoiceService, Depends(get_invoice_service)]
CompanyId = Annotated[UUID, Query(alias="insuranceCompanyId")]


@router.post("/", status_code=status.HTTP_201_CREATED)
@beartype
async def create_plan(
    plan_data: PaymentPlanCreate,
    response: Response,
    service: PaymentPlanServiceDep,
    invoices: InvoiceServiceDep,
    current_user: CompanyStaffDep,
) -> PaymentPlan | ErrorResponse:
    """Spread an invoice's balance over installments."""
    invoice = owned_by_company(current_user, await invoices.get(plan_data.invoice_id))
    if isinstance(invoice, Err):
        return handle_result(invoice, response)
    result = await service.create(plan_data)
    return handle_result(result, response, status.HTTP_201_CREATED)


@router.get("/")
@beartype
async def list_plans(
    response: Response,
    insurance_company_id: CompanyId,
    pagination: Pagination,
    service: PaymentPlanServiceDep,
    current_user: CompanyStaffDep,
    plan_status: Annotated[PaymentPlanStatus | None, Query(alias="status")] = None,
    invoice_id: Annotated[UUID | None, Query(alias="invoiceId")] = None,
) -> ListResponse[PaymentPlan] | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.list_plans(
        insurance_company_id,
        status=plan_status,
        invoice_id=invoice_id,
        limit=pagination.limit,
        offset=pagination.skip,
    )
    return handle_result(
        paginated(result, PaymentPlan, pagination.skip, pagination.limit), response
    )


@router.post("/check-overdue")
@beartype
async def check_overdue(
    response: Response,
    insurance_company_id: CompanyId,
    service: PaymentPlanServiceDep,
    current_user: CompanyStaffDep,
    as_of: Annotated[date | None, Query(alias="asOf")] = None,
) -> list[PaymentPlan] | ErrorResponse:
    """Default plans whose installment is unpaid past the grace period."""
    ensure_company_access(current_user, insurance_company_id)
    result = await service.mark_overdue(insurance_company_id, as_of)
    return handle_result(result, response)


@router.get("/{plan_id}")
@beartype
async def get_plan(
    plan_id: UUID,
    response: Response,
    service: PaymentPlanServiceDep,
    current_user: CompanyStaffDep,
) -> PaymentPlan | ErrorResponse:
    result = owned_by_company(current_user, await service.get(plan_id))
    return handle_result(result, response)


@router.patch("/{plan_id}/status")
@beartype
async def update_plan_status(
    plan_id: UUID,
    status_update: PaymentPlanStatusUpdate,
    response: Response,
    service: PaymentPlanServiceDep,
    current_user: CompanyStaffDep,
) -> PaymentPlan | ErrorResponse:
    existing = owned_by_company(current_user, await service.get(plan_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.update_status(plan_id, status_update.status)
    return handle_result(result, response)


@router.post("/{plan_id}/payments")
@beartype
async def record_installment(
    plan_id: UUID,
    payment: InstallmentPayment,
    response: Response,
    service: PaymentPlanServiceDep,
    current_user: CompanyStaffDep,
) -> PaymentPlan | ErrorResponse:
    """Collect money under a plan; it is credited to the invoice at once."""
    existing = owned_by_company(current_user, await service.get(plan_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.record_payment(plan_id, payment)
    return handle_result(result, response)


@router.delete("/{plan_id}")
@beartype
async def delete_plan(
    plan_id: UUID,
    response: Response,
    service: PaymentPlanServiceDep,
    current_user: CompanyStaffDep,
) -> PaymentPlan | ErrorResponse:
    """Remove a plan nothing has been paid under; returns the removed plan."""
    existing = owned_by_company(current_user, await service.get(plan_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.delete(plan_id)
    return handle_result(result, response)
