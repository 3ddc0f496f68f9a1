# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Billing endpoints: invoices and the payments settling them."""

from typing import Annotated
from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response, status

from ...core.result_types import Err
from ...models.billing import (
    Invoice,
    InvoiceCreate,
    InvoiceStatus,
    InvoiceStatusUpdate,
    InvoiceType,
    Payment,
    PaymentCreate,
    PaymentStatus,
    PaymentStatusUpdate,
)
from ...schemas.common import ListResponse
from ...services.billing_service import InvoiceService, PaymentService
from ..dependencies import (
    CompanyStaffDep,
    Pagination,
    ensure_company_access,
    get_invoice_service,
    get_payment_service,
    owned_by_company,
)
from ..response_patterns import ErrorResponse, handle_result, paginated

invoices_router = APIRouter()
payments_router = APIRouter()

InvoiceServiceDep = Annotated[InvoiceService, Depends(get_invoice_service)]
PaymentServiceDep = Annotated[PaymentService, Depends(get_payment_service)]
CompanyId = Annotated[UUID, Query(alias="insuranceCompanyId")]


@invoices_router.post("/", status_code=status.HTTP_201_CREATED)
@beartype
async def create_invoice(
    invoice_data: InvoiceCreate,
    response: Response,
    service: InvoiceServiceDep,
    current_user: CompanyStaffDep,
) -> Invoice | ErrorResponse:
    """Issue a draft invoice owing its full total."""
    ensure_company_access(current_user, invoice_data.insurance_company_id)
    result = await service.create(invoice_data)
    return handle_result(result, response, status.HTTP_201_CREATED)


@invoices_router.get("/")
@beartype
async def list_invoices(
    response: Response,
    insurance_company_id: CompanyId,
    pagination: Pagination,
    service: InvoiceServiceDep,
    current_user: CompanyStaffDep,
    invoice_status: Annotated[InvoiceStatus | None, Query(alias="status")] = None,
    invoice_type: Annotated[InvoiceType | None, Query(alias="type")] = None,
) -> ListResponse[Invoice] | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.list_invoices(
        insurance_company_id,
        status=invoice_status,
        invoice_type=invoice_type,
        limit=pagination.limit,
        offset=pagination.skip,
    )
    return handle_result(
        paginated(result, Invoice, pagination.skip, pagination.limit), response
    )


@invoices_router.get("/{invoice_id}")
@beartype
async def get_invoice(
    invoice_id: UUID,
    response: Response,
    service: InvoiceServiceDep,
    current_user: CompanyStaffDep,
) -> Invoice | ErrorResponse:
    result = owned_by_company(current_user, await service.get(invoice_id))
    return handle_result(result, response)


@invoices_router.patch("/{invoice_id}/status")
@beartype
async def update_invoice_status(
    invoice_id: UUID,
    status_update: InvoiceStatusUpdate,
    response: Response,
    service: InvoiceServiceDep,
    current_user: CompanyStaffDep,
) -> Invoice | ErrorResponse:
    existing = owned_by_company(current_user, await service.get(invoice_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.update_status(invoice_id, status_update.status)
    return handle_result(result, response)


@payments_router.post("/", status_code=status.HTTP_201_CREATED)
@beartype
async def create_payment(
    payment_data: PaymentCreate,
    response: Response,
    service: PaymentServiceDep,
    invoices: InvoiceServiceDep,
    current_user: CompanyStaffDep,
) -> Payment | ErrorResponse:
    """Record a PENDING payment against an invoice."""
    invoice = owned_by_company(current_user, await invoices.get(payment_data.invoice_id))
    if isinstance(invoice, Err):
        return handle_result(invoice, response)
    result = await service.create(payment_data)
    return handle_result(result, response, status.HTTP_201_CREATED)


@payments_router.get("/")
@beartype
async def list_payments(
    response: Response,
    insurance_company_id: CompanyId,
    pagination: Pagination,
    service: PaymentServiceDep,
    current_user: CompanyStaffDep,
    invoice_id: Annotated[UUID | None, Query(alias="invoiceId")] = None,
    payment_status: Annotated[PaymentStatus | None, Query(alias="status")] = None,
) -> ListResponse[Payment] | ErrorResponse:
    ensure_company_access(current_user, insurance_company_id)
    result = await service.list_payments(
        insurance_company_id,
        invoice_id=invoice_id,
        status=payment_status,
        limit=pagination.limit,
        offset=pagination.skip,
    )
    return handle_result(
        paginated(result, Payment, pagination.skip, pagination.limit), response
    )


@payments_router.get("/{payment_id}")
@beartype
async def get_payment(
    payment_id: UUID,
    response: Response,
    service: PaymentServiceDep,
    current_user: CompanyStaffDep,
) -> Payment | ErrorResponse:
    result = owned_by_company(current_user, await service.get(payment_id))
    return handle_result(result, response)


@payments_router.patch("/{payment_id}/status")
@beartype
async def update_payment_status(
    payment_id: UUID,
    status_update: PaymentStatusUpdate,
    response: Response,
    service: PaymentServiceDep,
    current_user: CompanyStaffDep,
) -> Payment | ErrorResponse:
    """Complete, fail or refund a payment; the invoice balance follows."""
    existing = owned_by_company(current_user, await service.get(payment_id))
    if isinstance(existing, Err):
        return handle_result(existing, response)
    result = await service.update_status(payment_id, status_update.status)
    return handle_result(result, response)
