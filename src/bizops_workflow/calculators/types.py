"""Type definitions for reconciliation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    """Subtotal, tax and grand total for a set of invoice items."""

    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class OverdueStatus:
    is_overdue: bool
    days_overdue: int


@dataclass(frozen=True)
class SalaryBreakdown:
    """Exact salary figures per period. Round only for display."""

    annual: Decimal
    monthly: Decimal
    weekly: Decimal
    daily: Decimal
    hourly: Decimal

    def rounded(self, quantum: Decimal = Decimal("1")) -> SalaryBreakdown:
        """Return a copy with every figure rounded half-up to ``quantum``."""
        return SalaryBreakdown(
            annual=self.annual.quantize(quantum, rounding=ROUND_HALF_UP),
            monthly=self.monthly.quantize(quantum, rounding=ROUND_HALF_UP),
            weekly=self.weekly.quantize(quantum, rounding=ROUND_HALF_UP),
            daily=self.daily.quantize(quantum, rounding=ROUND_HALF_UP),
            hourly=self.hourly.quantize(quantum, rounding=ROUND_HALF_UP),
        )


@dataclass(frozen=True)
class Tenure:
    years: int
    months: int


def _whole_percent(part: Decimal | int, whole: Decimal | int) -> int:
    """Share of ``whole`` as a half-up rounded percentage, 0 when empty."""
    if whole == 0:
        return 0
    rate = Decimal(part) / Decimal(whole) * 100
    return int(rate.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass
class InvoiceSummary:
    """Aggregate figures over a set of invoices."""

    total_count: int = 0
    counts_by_status: dict[str, int] = field(default_factory=dict)
    total_billed: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    overdue_amount: Decimal = Decimal("0")

    @property
    def outstanding(self) -> Decimal:
        """Billed amount not yet collected."""
        return self.total_billed - self.total_paid

    @property
    def collection_rate(self) -> int:
        """Percentage of the billed amount collected, as a whole number."""
        return _whole_percent(self.total_paid, self.total_billed)


@dataclass
class TaskSummary:
    """Counts over a set of tasks."""

    total_count: int = 0
    counts_by_status: dict[str, int] = field(default_factory=dict)
    overdue_count: int = 0

    @property
    def completion_rate(self) -> int:
        return _whole_percent(self.counts_by_status.get("completed", 0), self.total_count)


@dataclass
class SubmissionSummary:
    """Counts over a set of work submissions."""

    total_count: int = 0
    counts_by_status: dict[str, int] = field(default_factory=dict)

    @property
    def approval_rate(self) -> int:
        return _whole_percent(self.counts_by_status.get("approved", 0), self.total_count)
