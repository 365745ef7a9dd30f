"""Table-driven status state machines with transition validation."""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Mapping

from bizops_workflow.errors import InvalidTransition
from bizops_workflow.models.base import EntityKind, enum_value
from bizops_workflow.models.invoice import InvoiceAction, InvoiceStatus, PaymentOutcome
from bizops_workflow.models.leave import LeaveAction, LeaveStatus
from bizops_workflow.models.task import TaskAction, TaskStatus
from bizops_workflow.models.work_submission import (
    WorkSubmissionAction,
    WorkSubmissionStatus,
)

# (from_status, action, outcome) -> to_status
TransitionTable = Mapping[tuple[str, str, "str | None"], str]


def transition(
    table: TransitionTable,
    current: Any,
    action: Any,
    outcome: Any = None,
) -> str:
    """Look up the next status, raising InvalidTransition if there is none."""
    key = (enum_value(current), enum_value(action), enum_value(outcome))
    try:
        return table[key]
    except KeyError:
        raise InvalidTransition(key[0], key[1]) from None


class StateMachine:
    """Stateless transition engine over one entity kind's table.

    Subclasses declare ``TRANSITIONS`` keyed by ``(status, action, outcome)``.
    ``outcome`` is ``None`` except for actions whose target depends on the
    payload (an invoice payment settles it fully or partially). The machine
    only checks that a transition exists; it never inspects payloads.

    ``edit`` transitions loop back to the same status and mark the statuses
    in which field changes are allowed.
    """

    KIND: ClassVar[EntityKind]
    STATUSES: ClassVar[type[Enum]]
    TRANSITIONS: ClassVar[dict[tuple[Any, Any, Any], Any]] = {}

    def __init__(self, extra: Mapping[tuple[Any, Any, Any], Any] | None = None):
        merged = dict(self.TRANSITIONS)
        merged.update(extra or {})
        self.table: dict[tuple[str, str, str | None], str] = {
            (enum_value(s), enum_value(a), enum_value(o)): enum_value(n)
            for (s, a, o), n in merged.items()
        }

    def can_transition(self, current: Any, action: Any, outcome: Any = None) -> bool:
        """Check if a specific transition exists."""
        key = (enum_value(current), enum_value(action), enum_value(outcome))
        return key in self.table

    def accepts(self, current: Any, action: Any) -> bool:
        """Check if an action is legal in a status for any outcome."""
        current, action = enum_value(current), enum_value(action)
        return any(s == current and a == action for s, a, _ in self.table)

    def validate_action(self, current: Any, action: Any) -> None:
        """Raise InvalidTransition if the action is illegal in this status."""
        if not self.accepts(current, action):
            raise InvalidTransition(enum_value(current), enum_value(action))

    def transition(self, current: Any, action: Any, outcome: Any = None) -> str:
        """Return the next status for an action."""
        return transition(self.table, current, action, outcome)

    def get_allowed_actions(self, current: Any) -> list[str]:
        """Get actions legal in a status, in table order."""
        current = enum_value(current)
        actions: list[str] = []
        for s, a, _ in self.table:
            if s == current and a not in actions:
                actions.append(a)
        return actions

    def is_terminal(self, current: Any) -> bool:
        """Check if no transition leaves this status."""
        current = enum_value(current)
        return not any(s == current for s, _, _ in self.table)

    @property
    def terminal_statuses(self) -> set[str]:
        return {m.value for m in self.STATUSES if self.is_terminal(m.value)}


class LeaveRequestStateMachine(StateMachine):
    """Leave requests: coordinator approval, then HR approval.

    Allowed transitions:
    - pending → coordinator_approved (approve_coordinator)
    - pending → rejected (reject)
    - coordinator_approved → hr_approved (approve_hr)
    - coordinator_approved → rejected (reject)
    - pending, coordinator_approved → cancelled (cancel)

    With HR bypass enabled, pending → hr_approved (approve_hr) is also legal.
    """

    KIND = EntityKind.LEAVE_REQUEST
    STATUSES = LeaveStatus
    TRANSITIONS = {
        (LeaveStatus.PENDING, LeaveAction.APPROVE_COORDINATOR, None): LeaveStatus.COORDINATOR_APPROVED,
        (LeaveStatus.PENDING, LeaveAction.REJECT, None): LeaveStatus.REJECTED,
        (LeaveStatus.PENDING, LeaveAction.CANCEL, None): LeaveStatus.CANCELLED,
        (LeaveStatus.PENDING, LeaveAction.EDIT, None): LeaveStatus.PENDING,
        (LeaveStatus.COORDINATOR_APPROVED, LeaveAction.APPROVE_HR, None): LeaveStatus.HR_APPROVED,
        (LeaveStatus.COORDINATOR_APPROVED, LeaveAction.REJECT, None): LeaveStatus.REJECTED,
        (LeaveStatus.COORDINATOR_APPROVED, LeaveAction.CANCEL, None): LeaveStatus.CANCELLED,
        (LeaveStatus.COORDINATOR_APPROVED, LeaveAction.EDIT, None): LeaveStatus.COORDINATOR_APPROVED,
    }

    HR_BYPASS = {
        (LeaveStatus.PENDING, LeaveAction.APPROVE_HR, None): LeaveStatus.HR_APPROVED,
    }

    def __init__(self, allow_hr_bypass: bool = False):
        super().__init__(self.HR_BYPASS if allow_hr_bypass else None)
        self.allow_hr_bypass = allow_hr_bypass


class WorkSubmissionStateMachine(StateMachine):
    """Work submissions: review with an optional revision loop.

    Allowed transitions:
    - pending_review → approved | rejected | needs_revision
    - needs_revision → pending_review (resubmit)
    """

    KIND = EntityKind.WORK_SUBMISSION
    STATUSES = WorkSubmissionStatus
    TRANSITIONS = {
        (WorkSubmissionStatus.PENDING_REVIEW, WorkSubmissionAction.APPROVE, None): WorkSubmissionStatus.APPROVED,
        (WorkSubmissionStatus.PENDING_REVIEW, WorkSubmissionAction.REJECT, None): WorkSubmissionStatus.REJECTED,
        (WorkSubmissionStatus.PENDING_REVIEW, WorkSubmissionAction.REQUEST_REVISION, None): WorkSubmissionStatus.NEEDS_REVISION,
        (WorkSubmissionStatus.PENDING_REVIEW, WorkSubmissionAction.EDIT, None): WorkSubmissionStatus.PENDING_REVIEW,
        (WorkSubmissionStatus.NEEDS_REVISION, WorkSubmissionAction.RESUBMIT, None): WorkSubmissionStatus.PENDING_REVIEW,
        (WorkSubmissionStatus.NEEDS_REVISION, WorkSubmissionAction.EDIT, None): WorkSubmissionStatus.NEEDS_REVISION,
    }


class InvoiceStateMachine(StateMachine):
    """Invoices: issue, collect payments, or cancel.

    Allowed transitions:
    - draft → pending (issue)
    - pending, partially_paid → partially_paid (record_payment, partial)
    - pending, partially_paid → paid (record_payment, full)
    - draft, pending, partially_paid → cancelled (cancel)

    ``overdue`` never appears here; it is a display overlay.
    """

    KIND = EntityKind.INVOICE
    STATUSES = InvoiceStatus
    TRANSITIONS = {
        (InvoiceStatus.DRAFT, InvoiceAction.ISSUE, None): InvoiceStatus.PENDING,
        (InvoiceStatus.DRAFT, InvoiceAction.CANCEL, None): InvoiceStatus.CANCELLED,
        (InvoiceStatus.DRAFT, InvoiceAction.EDIT, None): InvoiceStatus.DRAFT,
        (InvoiceStatus.PENDING, InvoiceAction.RECORD_PAYMENT, PaymentOutcome.PARTIAL): InvoiceStatus.PARTIALLY_PAID,
        (InvoiceStatus.PENDING, InvoiceAction.RECORD_PAYMENT, PaymentOutcome.FULL): InvoiceStatus.PAID,
        (InvoiceStatus.PENDING, InvoiceAction.CANCEL, None): InvoiceStatus.CANCELLED,
        (InvoiceStatus.PENDING, InvoiceAction.EDIT, None): InvoiceStatus.PENDING,
        (InvoiceStatus.PARTIALLY_PAID, InvoiceAction.RECORD_PAYMENT, PaymentOutcome.PARTIAL): InvoiceStatus.PARTIALLY_PAID,
        (InvoiceStatus.PARTIALLY_PAID, InvoiceAction.RECORD_PAYMENT, PaymentOutcome.FULL): InvoiceStatus.PAID,
        (InvoiceStatus.PARTIALLY_PAID, InvoiceAction.CANCEL, None): InvoiceStatus.CANCELLED,
    }

    @property
    def terminal_statuses(self) -> set[str]:
        # overdue is an overlay, not a stored status
        return super().terminal_statuses - {InvoiceStatus.OVERDUE.value}


class TaskStateMachine(StateMachine):
    """Tasks: start, then complete or reject.

    Allowed transitions:
    - pending → in_progress (start)
    - in_progress → completed (complete)
    - pending, in_progress → rejected (reject)
    """

    KIND = EntityKind.TASK
    STATUSES = TaskStatus
    TRANSITIONS = {
        (TaskStatus.PENDING, TaskAction.START, None): TaskStatus.IN_PROGRESS,
        (TaskStatus.PENDING, TaskAction.REJECT, None): TaskStatus.REJECTED,
        (TaskStatus.PENDING, TaskAction.EDIT, None): TaskStatus.PENDING,
        (TaskStatus.IN_PROGRESS, TaskAction.COMPLETE, None): TaskStatus.COMPLETED,
        (TaskStatus.IN_PROGRESS, TaskAction.REJECT, None): TaskStatus.REJECTED,
        (TaskStatus.IN_PROGRESS, TaskAction.EDIT, None): TaskStatus.IN_PROGRESS,
    }
