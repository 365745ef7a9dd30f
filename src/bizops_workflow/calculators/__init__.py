"""Reconciliation calculator for derived financial and time figures."""

from bizops_workflow.calculators.reconciliation import (
    display_status,
    invoice_summary,
    invoice_totals,
    item_total,
    leave_days,
    overdue_status,
    payment_progress,
    remaining_amount,
    round_money,
    salary_breakdown,
    submission_summary,
    task_summary,
    tenure,
    timeline_progress,
)
from bizops_workflow.calculators.types import (
    InvoiceSummary,
    InvoiceTotals,
    OverdueStatus,
    SalaryBreakdown,
    SubmissionSummary,
    TaskSummary,
    Tenure,
)

__all__ = [
    "display_status",
    "invoice_summary",
    "invoice_totals",
    "item_total",
    "leave_days",
    "overdue_status",
    "payment_progress",
    "remaining_amount",
    "round_money",
    "salary_breakdown",
    "submission_summary",
    "task_summary",
    "tenure",
    "timeline_progress",
    "InvoiceSummary",
    "InvoiceTotals",
    "OverdueStatus",
    "SalaryBreakdown",
    "SubmissionSummary",
    "TaskSummary",
    "Tenure",
]
