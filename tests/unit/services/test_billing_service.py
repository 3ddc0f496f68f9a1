"""Unit tests for invoicing and payment settlement."""

import re
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from pydantic import ValidationError

from healthplan_admin.core.result_types import Err, Ok
from healthplan_admin.models.base import utc_now
from healthplan_admin.models.billing import (
    Invoice,
    InvoiceCreate,
    InvoiceStatus,
    InvoiceType,
    Payment,
    PaymentCreate,
    PaymentMethod,
    PaymentStatus,
)
from healthplan_admin.repositories import Repositories
from healthplan_admin.services.billing_service import (
    InvoiceService,
    PaymentService,
    format_invoice_number,
    generate_transaction_id,
)
from tests.fixtures.factories import add_company, add_contract, add_invoice


@pytest.fixture
def invoices(repos: Repositories) -> InvoiceService:
    return InvoiceService(repos.invoices, repos.policy_contracts)


@pytest.fixture
def payments(repos: Repositories) -> PaymentService:
    return PaymentService(repos.payments, repos.invoices)


def premium_bill(company_id: UUID, **overrides: object) -> InvoiceCreate:
    data: dict[str, object] = {
        "insurance_company_id": company_id,
        "type": InvoiceType.PREMIUM,
        "issue_date": date(2025, 6, 1),
        "due_date": date(2025, 7, 1),
        "subtotal": Decimal("100.00"),
        "tax": Decimal("10.00"),
        "discount": Decimal("5.00"),
    }
    data.update(overrides)
    return InvoiceCreate(**data)


def cash(invoice: Invoice, amount: str) -> PaymentCreate:
    return PaymentCreate(
        invoice_id=invoice.id,
        amount=Decimal(amount),
        method=PaymentMethod.CASH,
        payment_date=date(2025, 6, 10),
    )


async def completed(service: PaymentService, invoice: Invoice, amount: str) -> Payment:
    result = await service.create(cash(invoice, amount))
    assert isinstance(result, Ok)
    result = await service.update_status(result.value.id, PaymentStatus.COMPLETED)
    assert isinstance(result, Ok)
    return result.value


def test_invoice_number_format() -> None:
    assert format_invoice_number(InvoiceType.CLAIM, date(2025, 3, 9), 7) == "C2503-0007"


def test_transaction_id_format() -> None:
    assert re.fullmatch(r"TXN-\d{8}-[0-9a-f]{8}", generate_transaction_id())


class TestInvoicePayload:
    def test_due_date_cannot_precede_issue_date(self, company_id: UUID) -> None:
        with pytest.raises(ValidationError, match="due_date cannot be before issue_date"):
            premium_bill(company_id, due_date=date(2025, 5, 31))

    def test_discount_cannot_exceed_bill(self, company_id: UUID) -> None:
        with pytest.raises(ValidationError, match="discount cannot exceed"):
            premium_bill(company_id, discount=Decimal("111.00"))


class TestInvoiceService:
    @pytest.mark.asyncio
    async def test_create_computes_totals_and_numbers(
        self, invoices: InvoiceService, company_id: UUID
    ) -> None:
        first = await invoices.create(premium_bill(company_id))
        second = await invoices.create(premium_bill(company_id))

        assert isinstance(first, Ok)
        assert isinstance(second, Ok)
        invoice = first.value
        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.total == Decimal("105.00")
        assert invoice.amount_due == Decimal("105.00")
        assert invoice.amount_paid == Decimal("0")
        assert re.fullmatch(r"P\d{4}-0001", invoice.invoice_number)
        assert second.value.invoice_number.endswith("-0002")

    @pytest.mark.asyncio
    async def test_numbering_continues_after_highest_existing_number(
        self, repos: Repositories, invoices: InvoiceService, company_id: UUID
    ) -> None:
        today = utc_now().date()
        # Hand-numbered invoices leave a gap at 0001-0004
        for invoice_type, sequence in ((InvoiceType.PREMIUM, 5), (InvoiceType.CLAIM, 9)):
            await add_invoice(
                repos,
                company_id,
                invoice_type=invoice_type,
                invoice_number=format_invoice_number(invoice_type, today, sequence),
            )

        result = await invoices.create(premium_bill(company_id))

        assert isinstance(result, Ok)
        assert result.value.invoice_number == format_invoice_number(
            InvoiceType.PREMIUM, today, 6
        )

    @pytest.mark.asyncio
    async def test_taken_number_moves_to_the_next_one(
        self,
        repos: Repositories,
        invoices: InvoiceService,
        company_id: UUID,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        today = utc_now().date()
        taken = format_invoice_number(InvoiceType.PREMIUM, today, 1)
        await add_invoice(repos, company_id, invoice_number=taken)

        # Another writer issued 0001 after the sequence was read
        async def stale_sequence(invoice_type: InvoiceType, day: date) -> int:
            return 0

        monkeypatch.setattr(invoices, "_last_sequence", stale_sequence)

        result = await invoices.create(premium_bill(company_id))

        assert isinstance(result, Ok)
        assert result.value.invoice_number == format_invoice_number(
            InvoiceType.PREMIUM, today, 2
        )

    @pytest.mark.asyncio
    async def test_contract_of_other_company_is_not_found(
        self, repos: Repositories, invoices: InvoiceService, company_id: UUID
    ) -> None:
        foreign = await add_contract(repos, (await add_company(repos)).id)
        result = await invoices.create(
            premium_bill(company_id, policy_contract_id=foreign.id)
        )
        assert isinstance(result, Err)
        assert "not found" in result.error

    @pytest.mark.asyncio
    async def test_marking_paid_settles_in_full(
        self, invoices: InvoiceService, company_id: UUID
    ) -> None:
        created = await invoices.create(premium_bill(company_id))
        assert isinstance(created, Ok)

        result = await invoices.update_status(created.value.id, InvoiceStatus.PAID)
        assert isinstance(result, Ok)
        paid = result.value
        assert paid.amount_paid == paid.total
        assert paid.amount_due == Decimal("0")
        assert paid.paid_date is not None

    @pytest.mark.asyncio
    async def test_list_filters(
        self, repos: Repositories, invoices: InvoiceService, company_id: UUID
    ) -> None:
        await add_invoice(repos, company_id)
        await add_invoice(repos, company_id, invoice_type=InvoiceType.CLAIM)
        await add_invoice(repos, company_id, status=InvoiceStatus.PAID)

        result = await invoices.list_invoices(company_id, invoice_type=InvoiceType.PREMIUM)
        assert isinstance(result, Ok)
        assert result.value[1] == 2

        result = await invoices.list_invoices(
            company_id, status=InvoiceStatus.PAID, invoice_type=InvoiceType.PREMIUM
        )
        assert isinstance(result, Ok)
        assert result.value[1] == 1

    @pytest.mark.asyncio
    async def test_unknown_invoice(self, invoices: InvoiceService) -> None:
        result = await invoices.get(uuid4())
        assert isinstance(result, Err)
        assert "not found" in result.error


class TestPaymentService:
    @pytest.mark.asyncio
    async def test_payment_starts_pending_and_leaves_invoice_alone(
        self, repos: Repositories, payments: PaymentService, company_id: UUID
    ) -> None:
        invoice = await add_invoice(repos, company_id, total=Decimal("105.00"))
        result = await payments.create(cash(invoice, "40.00"))

        assert isinstance(result, Ok)
        payment = result.value
        assert payment.status == PaymentStatus.PENDING
        assert payment.insurance_company_id == company_id
        assert payment.transaction_id.startswith("TXN-")
        assert await repos.invoices.get(invoice.id) == invoice

    @pytest.mark.asyncio
    async def test_completed_payments_settle_the_invoice(
        self, repos: Repositories, payments: PaymentService, company_id: UUID
    ) -> None:
        invoice = await add_invoice(repos, company_id, total=Decimal("105.00"))

        await completed(payments, invoice, "40.00")
        partly = await repos.invoices.get(invoice.id)
        assert partly is not None
        assert partly.status == InvoiceStatus.PARTIALLY_PAID
        assert partly.amount_paid == Decimal("40.00")
        assert partly.amount_due == Decimal("65.00")

        await completed(payments, invoice, "65.00")
        settled = await repos.invoices.get(invoice.id)
        assert settled is not None
        assert settled.status == InvoiceStatus.PAID
        assert settled.amount_due == Decimal("0")
        assert settled.paid_date is not None

    @pytest.mark.asyncio
    async def test_refund_puts_money_back_on_the_bill(
        self, repos: Repositories, payments: PaymentService, company_id: UUID
    ) -> None:
        invoice = await add_invoice(repos, company_id, total=Decimal("105.00"))
        first = await completed(payments, invoice, "40.00")
        await completed(payments, invoice, "65.00")

        result = await payments.update_status(first.id, PaymentStatus.REFUNDED)
        assert isinstance(result, Ok)
        assert result.value.refund_date is not None

        reopened = await repos.invoices.get(invoice.id)
        assert reopened is not None
        assert reopened.status == InvoiceStatus.PARTIALLY_PAID
        assert reopened.amount_paid == Decimal("65.00")
        assert reopened.amount_due == Decimal("40.00")

        again = await payments.update_status(first.id, PaymentStatus.REFUNDED)
        assert isinstance(again, Err)
        assert "is refunded" in again.error

    @pytest.mark.asyncio
    async def test_full_refund_reopens_invoice(
        self, repos: Repositories, payments: PaymentService, company_id: UUID
    ) -> None:
        invoice = await add_invoice(repos, company_id, total=Decimal("50.00"))
        payment = await completed(payments, invoice, "50.00")
        await payments.update_status(payment.id, PaymentStatus.REFUNDED)

        reopened = await repos.invoices.get(invoice.id)
        assert reopened is not None
        assert reopened.status == InvoiceStatus.PENDING
        assert reopened.paid_date is None
        assert reopened.amount_due == Decimal("50.00")

    @pytest.mark.asyncio
    async def test_overpayment_is_rejected(
        self, repos: Repositories, payments: PaymentService, company_id: UUID
    ) -> None:
        invoice = await add_invoice(repos, company_id, total=Decimal("50.00"))
        result = await payments.create(cash(invoice, "50.01"))
        assert isinstance(result, Err)
        assert "cannot exceed the amount due" in result.error

    @pytest.mark.asyncio
    async def test_closed_invoice_takes_no_payments(
        self, repos: Repositories, payments: PaymentService, company_id: UUID
    ) -> None:
        invoice = await add_invoice(repos, company_id, status=InvoiceStatus.CANCELLED)
        result = await payments.create(cash(invoice, "10.00"))
        assert isinstance(result, Err)
        assert result.error.startswith("Invalid payment")

    @pytest.mark.asyncio
    async def test_status_rules(
        self, repos: Repositories, payments: PaymentService, company_id: UUID
    ) -> None:
        invoice = await add_invoice(repos, company_id, total=Decimal("100.00"))
        created = await payments.create(cash(invoice, "10.00"))
        assert isinstance(created, Ok)
        pending = created.value

        result = await payments.update_status(pending.id, PaymentStatus.REFUNDED)
        assert isinstance(result, Err)
        assert "only COMPLETED" in result.error

        done = await completed(payments, invoice, "20.00")
        result = await payments.update_status(done.id, PaymentStatus.FAILED)
        assert isinstance(result, Err)
        assert "can only be refunded" in result.error

        result = await payments.update_status(pending.id, PaymentStatus.FAILED)
        assert isinstance(result, Ok)
        assert result.value.status == PaymentStatus.FAILED

    @pytest.mark.asyncio
    async def test_list_by_invoice(
        self, repos: Repositories, payments: PaymentService, company_id: UUID
    ) -> None:
        invoice = await add_invoice(repos, company_id)
        other = await add_invoice(repos, company_id)
        await payments.create(cash(invoice, "10.00"))
        await payments.create(cash(other, "10.00"))

        result = await payments.list_payments(company_id, invoice_id=invoice.id)
        assert isinstance(result, Ok)
        rows, total = result.value
        assert total == 1
        assert rows[0].invoice_id == invoice.id
