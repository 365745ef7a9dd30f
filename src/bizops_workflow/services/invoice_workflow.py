"""Invoice workflow with payment reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from bizops_workflow.calculators.reconciliation import (
    display_status,
    invoice_totals,
    item_total,
    overdue_status,
    payment_progress,
    remaining_amount,
    round_money,
)
from bizops_workflow.errors import IntegrityViolation, InvalidPayload
from bizops_workflow.models.base import Actor, EntityKind
from bizops_workflow.models.invoice import (
    Invoice,
    InvoiceAction,
    InvoiceItem,
    InvoiceStatus,
    PaymentOutcome,
)
from bizops_workflow.schemas import (
    EmptyPayload,
    InvoiceEditPayload,
    IssueInvoicePayload,
    RecordPaymentPayload,
    parse_payload,
)
from bizops_workflow.services.state_machine import InvoiceStateMachine
from bizops_workflow.services.workflow import WorkflowService


@dataclass(frozen=True)
class InvoiceView:
    """An invoice together with figures derived at a point in time."""

    invoice: Invoice
    display_status: str
    remaining_amount: Decimal
    payment_progress: Decimal
    is_overdue: bool
    days_overdue: int


class InvoiceWorkflow(WorkflowService[Invoice]):
    """Issuing, payment collection, cancellation and edits of invoices.

    Stored totals are checked against the items before every action and
    recomputed after it. A payment equal to the remaining balance settles
    the invoice; a smaller one leaves it partially paid.
    """

    KIND = EntityKind.INVOICE
    ACTIONS = InvoiceAction
    STATUSES = InvoiceStatus
    INITIAL_STATUS = InvoiceStatus.DRAFT

    def build_machine(self) -> InvoiceStateMachine:
        return InvoiceStateMachine()

    def view(self, invoice: Invoice, now: datetime) -> InvoiceView:
        """Derive remaining balance, progress and overdue figures."""
        overdue = overdue_status(invoice.due_date, invoice.status, now)
        return InvoiceView(
            invoice=invoice,
            display_status=display_status(invoice, now),
            remaining_amount=remaining_amount(invoice.paid_amount, invoice.total_amount),
            payment_progress=payment_progress(invoice.paid_amount, invoice.total_amount),
            is_overdue=overdue.is_overdue,
            days_overdue=overdue.days_overdue,
        )

    # ------------------------------------------------------------------
    # Invariants
    # ------------------------------------------------------------------

    def validate(self, entity: Invoice, **context: Any) -> None:
        for index, item in enumerate(entity.items):
            if item.quantity <= 0:
                raise InvalidPayload(f"items.{index}.quantity", "must be positive")
            if item.unit_price < 0:
                raise InvalidPayload(f"items.{index}.unit_price", "must not be negative")
        if entity.tax_rate < 0:
            raise InvalidPayload("tax_rate", "must not be negative")
        if entity.paid_amount != 0:
            raise InvalidPayload("paid_amount", "must be zero for a new invoice")
        self._check_dates(entity)

    def check_integrity(self, entity: Invoice) -> None:
        quantum = self.settings.money_quantum

        def differs(stored: Decimal, expected: Decimal) -> bool:
            return round_money(stored, quantum) != round_money(expected, quantum)

        for index, item in enumerate(entity.items):
            if differs(item.total, item_total(item.quantity, item.unit_price)):
                raise IntegrityViolation(
                    entity.id, f"item {index} total {item.total} != quantity * unit_price"
                )

        totals = invoice_totals(entity.items, entity.tax_rate)
        if differs(entity.subtotal, totals.subtotal):
            raise IntegrityViolation(
                entity.id, f"subtotal {entity.subtotal} != {totals.subtotal}"
            )
        if differs(entity.tax_amount, totals.tax_amount):
            raise IntegrityViolation(
                entity.id, f"tax_amount {entity.tax_amount} != {totals.tax_amount}"
            )
        if differs(entity.total_amount, totals.total):
            raise IntegrityViolation(
                entity.id, f"total_amount {entity.total_amount} != {totals.total}"
            )
        if entity.paid_amount < 0 or entity.paid_amount > entity.total_amount:
            raise IntegrityViolation(
                entity.id,
                f"paid_amount {entity.paid_amount} outside 0..{entity.total_amount}",
            )

    def reconcile(self, entity: Invoice) -> Invoice:
        items = tuple(
            replace(item, total=item_total(item.quantity, item.unit_price))
            for item in entity.items
        )
        totals = invoice_totals(items, entity.tax_rate)
        return replace(
            entity,
            items=items,
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total_amount=totals.total,
        )

    @staticmethod
    def _check_dates(entity: Invoice) -> None:
        if not entity.date_issued < entity.due_date:
            raise InvalidPayload("due_date", "must be after date_issued")

    # ------------------------------------------------------------------
    # Action handlers
    # ------------------------------------------------------------------

    def _issue(
        self, entity: Invoice, actor: Actor, payload: dict | None, now: datetime
    ) -> Invoice:
        data = parse_payload(IssueInvoicePayload, payload)
        updated = replace(entity, **data.model_dump(exclude_unset=True, exclude_none=True))
        if not updated.items:
            raise InvalidPayload("items", "required")
        self._check_dates(updated)
        return replace(updated, status=self.next_status(entity, InvoiceAction.ISSUE.value))

    def _record_payment(
        self, entity: Invoice, actor: Actor, payload: dict | None, now: datetime
    ) -> Invoice:
        data = parse_payload(RecordPaymentPayload, payload)
        # Stored totals may be rounded; settle against the recomputed total
        total = invoice_totals(entity.items, entity.tax_rate).total
        remaining = remaining_amount(entity.paid_amount, total)
        # Totals with tax can carry sub-unit fractions; the rounded balance settles them
        remaining_due = round_money(remaining, self.settings.money_quantum)
        if data.amount > max(remaining, remaining_due):
            raise InvalidPayload("amount", "exceeds remaining balance")

        settled = data.amount >= min(remaining, remaining_due)
        paid = total if settled else entity.paid_amount + data.amount
        outcome = PaymentOutcome.FULL if settled else PaymentOutcome.PARTIAL
        return replace(
            entity,
            status=self.next_status(entity, InvoiceAction.RECORD_PAYMENT.value, outcome),
            paid_amount=paid,
            paid_at=now if settled else entity.paid_at,
        )

    def _cancel(
        self, entity: Invoice, actor: Actor, payload: dict | None, now: datetime
    ) -> Invoice:
        parse_payload(EmptyPayload, payload)
        return replace(entity, status=self.next_status(entity, InvoiceAction.CANCEL.value))

    def _edit(
        self, entity: Invoice, actor: Actor, payload: dict | None, now: datetime
    ) -> Invoice:
        data = parse_payload(InvoiceEditPayload, payload)
        changes = data.model_dump(exclude_unset=True, exclude_none=True, exclude={"items"})
        if data.items is not None:
            changes["items"] = tuple(
                InvoiceItem.build(
                    item.description,
                    item.quantity,
                    item.unit_price,
                    id=item.id,
                    category=item.category,
                )
                for item in data.items
            )
        updated = replace(entity, **changes)
        self._check_dates(updated)
        return updated
