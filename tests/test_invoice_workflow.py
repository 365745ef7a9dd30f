"""Tests for the invoice workflow and payment reconciliation."""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from bizops_workflow.errors import (
    Forbidden,
    IntegrityViolation,
    InvalidPayload,
    InvalidTransition,
)
from bizops_workflow.models import Invoice, InvoiceItem, InvoiceStatus
from bizops_workflow.services import InvoiceWorkflow
from tests.conftest import build_invoice


@pytest.fixture
def workflow(settings) -> InvoiceWorkflow:
    return InvoiceWorkflow(settings=settings)


class TestRecordPayment:
    """Test payment collection."""

    def test_payment_exceeding_balance(self, workflow, invoice, admin, now):
        """Paying more than the balance is refused."""
        result = workflow.apply(invoice, "record_payment", admin, {"amount": 1200}, now=now)

        assert isinstance(result.error, InvalidPayload)
        assert result.error.field == "amount"
        assert result.error.reason == "exceeds remaining balance"

    def test_partial_then_full(self, workflow, invoice, admin, now):
        partial = workflow.apply(
            invoice, "record_payment", admin, {"amount": "400"}, now=now
        ).unwrap()

        assert partial.status == InvoiceStatus.PARTIALLY_PAID
        assert partial.paid_amount == Decimal("400")
        assert partial.paid_at is None

        paid = workflow.apply(
            partial, "record_payment", admin, {"amount": "600"}, now=now
        ).unwrap()

        assert paid.status == InvoiceStatus.PAID
        assert paid.paid_amount == Decimal("1000")
        assert paid.paid_at == now

    def test_several_instalments(self, workflow, invoice, admin, now):
        current = invoice
        for amount in ("100", "200", "300"):
            current = workflow.apply(
                current, "record_payment", admin, {"amount": amount}, now=now
            ).unwrap()

        assert current.status == InvoiceStatus.PARTIALLY_PAID
        assert current.paid_amount == Decimal("600")

    def test_full_payment_in_one_go(self, workflow, invoice, admin, now):
        result = workflow.apply(invoice, "record_payment", admin, {"amount": "1000"}, now=now)

        assert result.entity.status == InvoiceStatus.PAID

    def test_rounded_balance_settles_fractional_total(self, workflow, admin, now):
        items = (InvoiceItem.build("Retainer", Decimal("1"), Decimal("333.33")),)
        invoice = build_invoice(items=items, tax_rate=Decimal("7.5"))
        # 333.33 * 1.075 = 358.32975

        result = workflow.apply(invoice, "record_payment", admin, {"amount": "358.33"}, now=now)

        assert result.entity.status == InvoiceStatus.PAID
        assert result.entity.paid_amount == result.entity.total_amount

    def test_settles_invoice_with_cent_rounded_totals(self, workflow, admin, now):
        """Totals stored at cents still settle to the exact recomputed total."""
        items = (InvoiceItem.build("Retainer", Decimal("1"), Decimal("333.33")),)
        invoice = build_invoice(
            items=items,
            tax_rate=Decimal("7.5"),
            tax_amount=Decimal("25.00"),
            total_amount=Decimal("358.33"),
        )

        paid = workflow.apply(
            invoice, "record_payment", admin, {"amount": "358.33"}, now=now
        ).unwrap()

        assert paid.status == InvoiceStatus.PAID
        assert paid.total_amount == Decimal("358.32975")
        assert paid.paid_amount == paid.total_amount

    def test_instalments_on_cent_rounded_totals(self, workflow, admin, now):
        items = (InvoiceItem.build("Retainer", Decimal("1"), Decimal("333.33")),)
        invoice = build_invoice(
            items=items,
            tax_rate=Decimal("7.5"),
            tax_amount=Decimal("25.00"),
            total_amount=Decimal("358.33"),
        )

        partial = workflow.apply(
            invoice, "record_payment", admin, {"amount": "200"}, now=now
        ).unwrap()
        paid = workflow.apply(
            partial, "record_payment", admin, {"amount": "158.33"}, now=now
        ).unwrap()

        assert partial.paid_amount <= partial.total_amount
        assert paid.status == InvoiceStatus.PAID
        assert paid.paid_amount == paid.total_amount

    @pytest.mark.parametrize("amount", [0, -10])
    def test_amount_must_be_positive(self, workflow, invoice, admin, now, amount):
        result = workflow.apply(invoice, "record_payment", admin, {"amount": amount}, now=now)

        assert result.error.field == "amount"
        assert result.error.reason == "must be positive"

    def test_draft_cannot_take_payment(self, workflow, invoice, admin, now):
        draft = replace(invoice, status=InvoiceStatus.DRAFT)

        result = workflow.apply(draft, "record_payment", admin, {"amount": 10}, now=now)

        assert isinstance(result.error, InvalidTransition)

    @pytest.mark.parametrize("role", ["employee", "hr", "coordinator", "project_coordinator"])
    def test_payment_roles(self, workflow, invoice, actor, role, now):
        result = workflow.apply(invoice, "record_payment", actor(role), {"amount": 10}, now=now)

        assert isinstance(result.error, Forbidden)


class TestIssueCancelEdit:
    """Test issuing, cancelling and editing."""

    def test_issue_draft(self, workflow, invoice, actor, now):
        draft = replace(invoice, status=InvoiceStatus.DRAFT)

        result = workflow.apply(draft, "issue", actor("general_manager"), now=now)

        assert result.entity.status == InvoiceStatus.PENDING

    def test_issue_requires_items(self, workflow, admin, now):
        draft = build_invoice(items=(), status=InvoiceStatus.DRAFT)

        result = workflow.apply(draft, "issue", admin, now=now)

        assert result.error.field == "items"

    def test_issue_checks_dates(self, workflow, invoice, admin, now):
        draft = replace(invoice, status=InvoiceStatus.DRAFT)

        result = workflow.apply(draft, "issue", admin, {"due_date": "2024-03-01"}, now=now)

        assert result.error.field == "due_date"
        assert result.error.reason == "must be after date_issued"

    def test_cancel_partially_paid(self, workflow, invoice, admin, now):
        partial = replace(
            invoice, paid_amount=Decimal("100"), status=InvoiceStatus.PARTIALLY_PAID
        )

        result = workflow.apply(partial, "cancel", admin, now=now)

        assert result.entity.status == InvoiceStatus.CANCELLED

    def test_cannot_cancel_paid(self, workflow, invoice, admin, now):
        paid = replace(invoice, paid_amount=Decimal("1000"), status=InvoiceStatus.PAID)

        result = workflow.apply(paid, "cancel", admin, now=now)

        assert isinstance(result.error, InvalidTransition)

    def test_edit_recomputes_totals(self, workflow, invoice, admin, now):
        payload = {
            "items": [
                {"description": "Design", "quantity": "2", "unit_price": "250"},
                {"description": "Hosting", "quantity": "1", "unit_price": "100"},
            ],
            "tax_rate": "10",
        }

        result = workflow.apply(invoice, "edit", admin, payload, now=now)

        updated = result.entity
        assert [item.total for item in updated.items] == [Decimal("500"), Decimal("100")]
        assert updated.subtotal == Decimal("600")
        assert updated.tax_amount == Decimal("60")
        assert updated.total_amount == Decimal("660")

    def test_edit_rejects_bad_item(self, workflow, invoice, admin, now):
        payload = {"items": [{"description": "Design", "quantity": "0", "unit_price": "10"}]}

        result = workflow.apply(invoice, "edit", admin, payload, now=now)

        assert result.error.field == "items.0.quantity"

    def test_cannot_edit_partially_paid(self, workflow, invoice, admin, now):
        partial = replace(
            invoice, paid_amount=Decimal("100"), status=InvoiceStatus.PARTIALLY_PAID
        )

        result = workflow.apply(partial, "edit", admin, {"tax_rate": "5"}, now=now)

        assert isinstance(result.error, InvalidTransition)


class TestIntegrity:
    """Test detection of inconsistent stored totals."""

    def test_stored_total_mismatch(self, workflow, invoice, admin, now, caplog):
        tampered = replace(invoice, total_amount=Decimal("999"))

        with caplog.at_level("ERROR"):
            result = workflow.apply(tampered, "record_payment", admin, {"amount": 1}, now=now)

        assert isinstance(result.error, IntegrityViolation)
        assert result.error.entity_id == "INV-1"
        assert "total_amount" in result.error.detail
        assert "INV-1" in caplog.text

    def test_item_total_mismatch(self, workflow, invoice, admin, now):
        item = replace(invoice.items[0], total=Decimal("1"))

        result = workflow.apply(replace(invoice, items=(item,)), "cancel", admin, now=now)

        assert isinstance(result.error, IntegrityViolation)

    def test_overpaid_invoice(self, workflow, invoice, admin, now):
        overpaid = replace(
            invoice, paid_amount=Decimal("1500"), status=InvoiceStatus.PARTIALLY_PAID
        )

        result = workflow.apply(overpaid, "cancel", admin, now=now)

        assert isinstance(result.error, IntegrityViolation)


class TestCreateAndView:
    """Test creation and derived view."""

    def test_create_computes_totals(self, workflow, now):
        draft = Invoice(
            id="INV-9",
            client_id="CL-1",
            project_id="PRJ-1",
            items=(InvoiceItem.build("Audit", Decimal("4"), Decimal("250")),),
            tax_rate=Decimal("18"),
            date_issued=date(2024, 3, 1),
            due_date=date(2024, 3, 31),
        )

        result = workflow.create(draft, now=now)

        assert result.entity.subtotal == Decimal("1000")
        assert result.entity.tax_amount == Decimal("180")
        assert result.entity.total_amount == Decimal("1180")
        assert result.entity.created_at == now

    def test_create_checks_dates(self, workflow, invoice, now):
        draft = replace(invoice, status=InvoiceStatus.DRAFT, due_date=date(2024, 3, 1))

        result = workflow.create(draft, now=now)

        assert result.error.field == "due_date"

    def test_view_overdue(self, workflow, invoice):
        partial = replace(
            invoice, paid_amount=Decimal("250"), status=InvoiceStatus.PARTIALLY_PAID
        )

        view = workflow.view(partial, datetime(2024, 4, 5, 12, 0))

        assert view.display_status == "overdue"
        assert view.remaining_amount == Decimal("750")
        assert view.payment_progress == Decimal("25")
        assert view.is_overdue is True
        assert view.days_overdue == 6

    def test_view_paid_past_due(self, workflow, invoice):
        """A fully paid invoice past its due date is not overdue."""
        paid = replace(
            invoice,
            paid_amount=Decimal("1000"),
            status=InvoiceStatus.PAID,
            due_date=date(2024, 1, 31),
            date_issued=date(2024, 1, 1),
        )

        view = workflow.view(paid, datetime(2024, 4, 5))

        assert view.is_overdue is False
        assert view.days_overdue == 0
        assert view.display_status == "paid"
        assert view.payment_progress == 100

    def test_allowed_actions(self, workflow, invoice, admin, owner):
        assert workflow.allowed_actions(invoice, admin) == ["record_payment", "cancel", "edit"]
        assert workflow.allowed_actions(invoice, owner) == []
