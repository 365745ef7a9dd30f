"""Invoice snapshot and line items."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar

from bizops_workflow.models.base import Entity, EntityKind


class InvoiceStatus(str, Enum):
    """Invoice status values.

    ``OVERDUE`` is a display overlay produced by the reconciliation
    calculator; it is never stored by a transition.
    """

    DRAFT = "draft"
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class InvoiceAction(str, Enum):
    """Actions accepted by the invoice workflow."""

    ISSUE = "issue"
    RECORD_PAYMENT = "record_payment"
    CANCEL = "cancel"
    EDIT = "edit"


class PaymentOutcome(str, Enum):
    """Whether a payment settles the invoice or leaves a balance."""

    PARTIAL = "partial"
    FULL = "full"


@dataclass(frozen=True)
class InvoiceItem:
    """A billed line: ``total`` must equal ``quantity * unit_price``."""

    description: str
    quantity: Decimal
    unit_price: Decimal
    total: Decimal
    id: str | None = None
    category: str | None = None

    @classmethod
    def build(
        cls,
        description: str,
        quantity: Decimal,
        unit_price: Decimal,
        **kwargs,
    ) -> InvoiceItem:
        """Create an item with its total computed from quantity and price."""
        return cls(
            description=description,
            quantity=quantity,
            unit_price=unit_price,
            total=quantity * unit_price,
            **kwargs,
        )


@dataclass(frozen=True, kw_only=True)
class Invoice(Entity):
    """A client invoice.

    ``subtotal``, ``tax_amount`` and ``total_amount`` are stored but always
    recomputed from ``items`` and ``tax_rate`` when either changes.
    """

    KIND: ClassVar[EntityKind] = EntityKind.INVOICE

    client_id: str
    project_id: str
    items: tuple[InvoiceItem, ...]
    tax_rate: Decimal  # percent
    date_issued: date
    due_date: date
    subtotal: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    status: InvoiceStatus = InvoiceStatus.DRAFT
    notes: str | None = None
    terms: str | None = None
    paid_at: datetime | None = None
