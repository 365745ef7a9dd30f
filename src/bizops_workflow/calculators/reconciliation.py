"""Reconciliation calculator.

Pure, deterministic functions deriving financial and time figures from
authoritative entity fields. Every time-sensitive function takes ``now``
explicitly; nothing here reads the clock.

Money is handled as ``Decimal`` throughout. Rounding happens only in the
presentation helpers (``round_money``, ``SalaryBreakdown.rounded``).
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from bizops_workflow.calculators.types import (
    InvoiceSummary,
    InvoiceTotals,
    OverdueStatus,
    SalaryBreakdown,
    SubmissionSummary,
    TaskSummary,
    Tenure,
)
from bizops_workflow.config import get_settings
from bizops_workflow.models.base import enum_value
from bizops_workflow.models.invoice import Invoice, InvoiceItem, InvoiceStatus
from bizops_workflow.models.task import Task, TaskStatus
from bizops_workflow.models.work_submission import WorkSubmission

HUNDRED = Decimal("100")
ONE_DAY = timedelta(days=1)

# Statuses that can never be overdue
SETTLED_STATUSES = frozenset({InvoiceStatus.PAID.value, InvoiceStatus.CANCELLED.value})
CLOSED_TASK_STATUSES = frozenset({TaskStatus.COMPLETED.value, TaskStatus.REJECTED.value})


def _as_datetime(value: date | datetime, reference: datetime) -> datetime:
    """Promote a date to midnight, matching the timezone of ``reference``."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min, tzinfo=reference.tzinfo)


def _to_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(amount: Decimal, quantum: Decimal = Decimal("0.01")) -> Decimal:
    """Round a money amount half-up to the given quantum."""
    return amount.quantize(quantum, rounding=ROUND_HALF_UP)


def item_total(quantity: Decimal, unit_price: Decimal) -> Decimal:
    return _to_decimal(quantity) * _to_decimal(unit_price)


def invoice_totals(items: Sequence[InvoiceItem], tax_rate: Decimal) -> InvoiceTotals:
    """Compute subtotal, tax amount and total for invoice items.

    subtotal = sum of item totals
    tax_amount = subtotal * tax_rate / 100
    total = subtotal + tax_amount
    """
    subtotal = sum((_to_decimal(item.total) for item in items), Decimal("0"))
    tax_amount = subtotal * _to_decimal(tax_rate) / HUNDRED
    return InvoiceTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        total=subtotal + tax_amount,
    )


def remaining_amount(paid_amount: Decimal, total: Decimal) -> Decimal:
    return _to_decimal(total) - _to_decimal(paid_amount)


def payment_progress(paid_amount: Decimal, total: Decimal) -> Decimal:
    """Percentage of ``total`` already paid, clamped to [0, 100].

    Returns 0 when the total is zero.
    """
    total = _to_decimal(total)
    if total == 0:
        return Decimal("0")
    percent = _to_decimal(paid_amount) / total * HUNDRED
    return max(Decimal("0"), min(HUNDRED, percent))


def overdue_status(
    due_date: date | datetime,
    status: str,
    now: datetime,
    settled: Iterable[str] = SETTLED_STATUSES,
) -> OverdueStatus:
    """Whether something is past due and by how many (started) days.

    Items in a ``settled`` status (paid or cancelled invoices by default)
    are never overdue. A due date without a time component is treated as
    midnight at the start of that day.
    """
    due = _as_datetime(due_date, now)
    if enum_value(status) in settled or not now > due:
        return OverdueStatus(is_overdue=False, days_overdue=0)

    days = math.ceil((now - due) / ONE_DAY)
    return OverdueStatus(is_overdue=True, days_overdue=days)


def timeline_progress(
    start_date: date | datetime,
    end_date: date | datetime,
    now: datetime,
) -> int:
    """Elapsed share of a start/end window as a whole percentage."""
    start = _as_datetime(start_date, now)
    end = _as_datetime(end_date, now)

    if now < start:
        return 0
    if now > end:
        return 100
    if end == start:
        return 100

    elapsed = Decimal(str((now - start).total_seconds()))
    span = Decimal(str((end - start).total_seconds()))
    percent = elapsed / span * HUNDRED
    return int(percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def salary_breakdown(annual: Decimal, hours_per_week: int | None = None) -> SalaryBreakdown:
    """Split an annual salary into monthly, weekly, daily and hourly figures.

    The hourly rate assumes ``hours_per_week`` working hours, taken from
    ``WORKFLOW_HOURS_PER_WEEK`` when not given.
    """
    if hours_per_week is None:
        hours_per_week = get_settings().hours_per_week
    annual = _to_decimal(annual)
    weekly = annual / 52
    return SalaryBreakdown(
        annual=annual,
        monthly=annual / 12,
        weekly=weekly,
        daily=annual / 365,
        hourly=weekly / hours_per_week,
    )


def leave_days(start_date: date, end_date: date) -> int:
    """Inclusive count of calendar days between two dates."""
    return (end_date - start_date).days + 1


def tenure(join_date: date | datetime, now: datetime) -> Tenure:
    """Length of service in years and months (365-day years, 30-day months)."""
    joined = _as_datetime(join_date, now)
    days = max(0, math.ceil((now - joined) / ONE_DAY))
    return Tenure(years=days // 365, months=(days % 365) // 30)


def display_status(invoice: Invoice, now: datetime) -> str:
    """Stored status with ``overdue`` overlaid when the invoice is past due."""
    if overdue_status(invoice.due_date, invoice.status, now).is_overdue:
        return InvoiceStatus.OVERDUE.value
    return enum_value(invoice.status)


def invoice_summary(invoices: Iterable[Invoice], now: datetime) -> InvoiceSummary:
    """Aggregate counts and money figures across invoices."""
    summary = InvoiceSummary()

    for invoice in invoices:
        shown = display_status(invoice, now)
        summary.total_count += 1
        summary.counts_by_status[shown] = summary.counts_by_status.get(shown, 0) + 1
        summary.total_billed += invoice.total_amount
        summary.total_paid += invoice.paid_amount
        if shown == InvoiceStatus.OVERDUE.value:
            summary.overdue_amount += remaining_amount(
                invoice.paid_amount, invoice.total_amount
            )

    return summary


def task_summary(tasks: Iterable[Task], now: datetime) -> TaskSummary:
    """Count tasks per status and those past due while still open."""
    summary = TaskSummary()

    for task in tasks:
        status = enum_value(task.status)
        summary.total_count += 1
        summary.counts_by_status[status] = summary.counts_by_status.get(status, 0) + 1
        if overdue_status(task.due_date, status, now, settled=CLOSED_TASK_STATUSES).is_overdue:
            summary.overdue_count += 1

    return summary


def submission_summary(submissions: Iterable[WorkSubmission]) -> SubmissionSummary:
    summary = SubmissionSummary()

    for submission in submissions:
        status = enum_value(submission.status)
        summary.total_count += 1
        summary.counts_by_status[status] = summary.counts_by_status.get(status, 0) + 1

    return summary
