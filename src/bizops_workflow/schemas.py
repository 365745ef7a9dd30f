"""Pydantic schemas for workflow action payloads."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bizops_workflow.errors import InvalidPayload
from bizops_workflow.models.task import TaskPriority

P = TypeVar("P", bound=BaseModel)

# pydantic error type -> reason shown next to the offending input
_REASONS = {
    "missing": "required",
    "string_too_short": "required",
    "too_short": "required",
    "greater_than": "must be positive",
    "greater_than_equal": "must not be negative",
    "extra_forbidden": "cannot be changed",
}


class PayloadBase(BaseModel):
    """Base payload schema: trimmed strings, no unknown fields."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


def parse_payload(schema: type[P], payload: dict[str, Any] | None) -> P:
    """Validate a raw payload, raising InvalidPayload for the first problem."""
    try:
        return schema.model_validate(payload or {})
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "payload"
        reason = _REASONS.get(first["type"], "invalid")
        raise InvalidPayload(field, reason) from exc


# ============================================================================
# Shared
# ============================================================================


class EmptyPayload(PayloadBase):
    """Actions that take no supporting data."""


class CommentPayload(PayloadBase):
    """Approval or rejection with optional comments."""

    comments: str | None = None


# ============================================================================
# Leave requests
# ============================================================================


class LeaveEditPayload(PayloadBase):
    """Field changes to a leave request still under approval."""

    leave_type: str | None = Field(default=None, min_length=1)
    start_date: date | None = None
    end_date: date | None = None
    reason: str | None = Field(default=None, min_length=1)
    attachments: tuple[str, ...] | None = None


# ============================================================================
# Work submissions
# ============================================================================


class ReviewPayload(PayloadBase):
    """Approval or revision request with optional feedback."""

    feedback: str | None = None


class RejectSubmissionPayload(PayloadBase):
    """Rejection of a work submission; a reason is mandatory."""

    rejection_reason: str = Field(min_length=1)
    feedback: str | None = None


class SubmissionEditPayload(PayloadBase):
    """Changes an employee makes to their own submission."""

    title: str | None = None
    description: str | None = Field(default=None, min_length=1)
    time_spent: Decimal | None = Field(default=None, ge=0)
    attachments: tuple[str, ...] | None = None


# ============================================================================
# Invoices
# ============================================================================


class InvoiceItemPayload(PayloadBase):
    """One invoice line as entered."""

    description: str = Field(min_length=1)
    quantity: Decimal = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    id: str | None = None
    category: str | None = None


class InvoiceEditPayload(PayloadBase):
    """Changes to an unpaid invoice; totals are recomputed afterwards."""

    items: list[InvoiceItemPayload] | None = None
    tax_rate: Decimal | None = Field(default=None, ge=0)
    date_issued: date | None = None
    due_date: date | None = None
    notes: str | None = None
    terms: str | None = None


class IssueInvoicePayload(PayloadBase):
    """Issue a draft, optionally restamping its dates."""

    date_issued: date | None = None
    due_date: date | None = None


class RecordPaymentPayload(PayloadBase):
    """A payment received against an invoice."""

    amount: Decimal = Field(gt=0)


# ============================================================================
# Tasks
# ============================================================================


class TaskEditPayload(PayloadBase):
    """Editable task fields; type, parent and project are fixed at creation."""

    title: str | None = Field(default=None, min_length=1)
    priority: TaskPriority | None = None
    assigned_employee_id: str | None = Field(default=None, min_length=1)
    due_date: date | None = None
    start_date: date | None = None
    category: str | None = None
    description: str | None = None
