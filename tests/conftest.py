"""Pytest fixtures for workflow engine tests."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from bizops_workflow.calculators.reconciliation import invoice_totals
from bizops_workflow.config import Settings
from bizops_workflow.models import (
    Actor,
    Invoice,
    InvoiceItem,
    InvoiceStatus,
    LeaveRequest,
    Task,
    TaskType,
    WorkSubmission,
)

# Fixed clock for every time-sensitive test
NOW = datetime(2024, 3, 15, 12, 0, 0)

EMPLOYEE_ID = "EMP-1"
PROJECT_ID = "PRJ-1"


def build_invoice(
    items: tuple[InvoiceItem, ...] | None = None,
    tax_rate: Decimal = Decimal("0"),
    **overrides,
) -> Invoice:
    """Build an invoice whose stored totals agree with its items."""
    if items is None:
        items = (InvoiceItem.build("Consulting", Decimal("10"), Decimal("100")),)
    totals = invoice_totals(items, tax_rate)
    fields = dict(
        id="INV-1",
        client_id="CL-1",
        project_id=PROJECT_ID,
        items=items,
        tax_rate=tax_rate,
        date_issued=date(2024, 3, 1),
        due_date=date(2024, 3, 31),
        subtotal=totals.subtotal,
        tax_amount=totals.tax_amount,
        total_amount=totals.total,
        status=InvoiceStatus.PENDING,
    )
    fields.update(overrides)
    return Invoice(**fields)


@pytest.fixture
def now() -> datetime:
    """The fixed 'current' time."""
    return NOW


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of the environment."""
    return Settings()


@pytest.fixture
def actor():
    """Factory for actors: actor(role, id=None, projects=())."""

    def _make(role: str, id: str | None = None, projects: tuple[str, ...] = ()) -> Actor:
        return Actor(id=id or f"{role.upper()}-1", role=role, project_ids=frozenset(projects))

    return _make


@pytest.fixture
def owner() -> Actor:
    """The employee owning the leave requests, submissions and tasks below."""
    return Actor(id=EMPLOYEE_ID, role="employee")


@pytest.fixture
def admin() -> Actor:
    return Actor(id="ADM-1", role="admin")


@pytest.fixture
def leave_request() -> LeaveRequest:
    """A pending three-day leave request."""
    return LeaveRequest(
        id="LR-1",
        employee_id=EMPLOYEE_ID,
        leave_type="annual",
        start_date=date(2024, 3, 20),
        end_date=date(2024, 3, 22),
        reason="Family trip",
        created_at=datetime(2024, 3, 10, 9, 0),
        updated_at=datetime(2024, 3, 10, 9, 0),
    )


@pytest.fixture
def submission() -> WorkSubmission:
    """A work submission awaiting review."""
    return WorkSubmission(
        id="WS-1",
        employee_id=EMPLOYEE_ID,
        task_id="TSK-1",
        project_id=PROJECT_ID,
        time_spent=Decimal("6"),
        description="Implemented the landing page",
    )


@pytest.fixture
def invoice() -> Invoice:
    """A pending invoice for 1000 with no tax and nothing paid."""
    return build_invoice()


@pytest.fixture
def task() -> Task:
    """A pending main task assigned to the owning employee."""
    return Task(
        id="TSK-1",
        title="Build landing page",
        project_id=PROJECT_ID,
        task_type=TaskType.MAIN,
        assigned_employee_id=EMPLOYEE_ID,
        start_date=date(2024, 3, 1),
        due_date=date(2024, 3, 31),
    )
