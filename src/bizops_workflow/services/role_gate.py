"""Role-based permission table for workflow actions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bizops_workflow.models.base import EntityKind, Role, enum_value
from bizops_workflow.models.invoice import InvoiceAction
from bizops_workflow.models.leave import LeaveAction, LeaveStatus
from bizops_workflow.models.task import TaskAction
from bizops_workflow.models.work_submission import WorkSubmissionAction


@dataclass(frozen=True)
class Permission:
    """Who may perform one action.

    ``roles`` may always act. ``owner`` admits the owning employee whatever
    their role, and ``project_coordinator`` admits a project coordinator
    assigned to the entity's project. Both of those need the entity instance,
    so the workflow service resolves them.
    """

    roles: frozenset[str]
    owner: bool = False
    project_coordinator: bool = False


def _roles(*roles: Role) -> frozenset[str]:
    return frozenset(r.value for r in roles)


APPROVERS = _roles(Role.COORDINATOR, Role.ADMIN, Role.GENERAL_MANAGER)
HR_APPROVERS = _roles(Role.HR, Role.ADMIN)
REVIEWERS = _roles(Role.PROJECT_COORDINATOR, Role.ADMIN, Role.GENERAL_MANAGER)
MANAGERS = _roles(Role.ADMIN, Role.GENERAL_MANAGER)
ADMINS = _roles(Role.ADMIN)

# (kind, action, from_status or None for any status) -> Permission
RULES: dict[tuple[str, str, str | None], Permission] = {
    # Leave requests
    (EntityKind.LEAVE_REQUEST.value, LeaveAction.APPROVE_COORDINATOR.value, None): Permission(APPROVERS),
    (EntityKind.LEAVE_REQUEST.value, LeaveAction.REJECT.value, LeaveStatus.PENDING.value): Permission(APPROVERS),
    (EntityKind.LEAVE_REQUEST.value, LeaveAction.REJECT.value, LeaveStatus.COORDINATOR_APPROVED.value): Permission(HR_APPROVERS),
    (EntityKind.LEAVE_REQUEST.value, LeaveAction.REJECT.value, None): Permission(APPROVERS | HR_APPROVERS),
    (EntityKind.LEAVE_REQUEST.value, LeaveAction.APPROVE_HR.value, None): Permission(HR_APPROVERS),
    (EntityKind.LEAVE_REQUEST.value, LeaveAction.CANCEL.value, None): Permission(ADMINS, owner=True),
    (EntityKind.LEAVE_REQUEST.value, LeaveAction.EDIT.value, None): Permission(ADMINS, owner=True),
    # Work submissions
    (EntityKind.WORK_SUBMISSION.value, WorkSubmissionAction.APPROVE.value, None): Permission(REVIEWERS),
    (EntityKind.WORK_SUBMISSION.value, WorkSubmissionAction.REJECT.value, None): Permission(REVIEWERS),
    (EntityKind.WORK_SUBMISSION.value, WorkSubmissionAction.REQUEST_REVISION.value, None): Permission(REVIEWERS),
    (EntityKind.WORK_SUBMISSION.value, WorkSubmissionAction.RESUBMIT.value, None): Permission(frozenset(), owner=True),
    (EntityKind.WORK_SUBMISSION.value, WorkSubmissionAction.EDIT.value, None): Permission(ADMINS, owner=True),
    # Invoices
    (EntityKind.INVOICE.value, InvoiceAction.ISSUE.value, None): Permission(MANAGERS),
    (EntityKind.INVOICE.value, InvoiceAction.RECORD_PAYMENT.value, None): Permission(MANAGERS),
    (EntityKind.INVOICE.value, InvoiceAction.CANCEL.value, None): Permission(MANAGERS),
    (EntityKind.INVOICE.value, InvoiceAction.EDIT.value, None): Permission(MANAGERS),
    # Tasks
    (EntityKind.TASK.value, TaskAction.EDIT.value, None): Permission(MANAGERS, project_coordinator=True),
    (EntityKind.TASK.value, TaskAction.START.value, None): Permission(MANAGERS, owner=True, project_coordinator=True),
    (EntityKind.TASK.value, TaskAction.COMPLETE.value, None): Permission(MANAGERS, owner=True, project_coordinator=True),
    (EntityKind.TASK.value, TaskAction.REJECT.value, None): Permission(MANAGERS, project_coordinator=True),
}


class RoleGate:
    """Pure lookup of whether a role may attempt an action.

    A status-specific rule takes precedence over the any-status rule for the
    same action. No entity instance is consulted here.
    """

    def __init__(self, rules: dict[tuple[str, str, str | None], Permission] | None = None):
        self.rules = RULES if rules is None else rules

    def rule(self, kind: Any, action: Any, from_state: Any = None) -> Permission | None:
        """Get the permission governing an action, or None if unknown."""
        kind, action, state = enum_value(kind), enum_value(action), enum_value(from_state)
        if state is not None and (kind, action, state) in self.rules:
            return self.rules[(kind, action, state)]
        return self.rules.get((kind, action, None))

    def allowed(self, actor_role: Any, kind: Any, action: Any, from_state: Any = None) -> bool:
        """Check if a role may attempt an action, ownership permitting."""
        permission = self.rule(kind, action, from_state)
        if permission is None:
            return False
        role = enum_value(actor_role)
        if role in permission.roles or permission.owner:
            return True
        return permission.project_coordinator and role == Role.PROJECT_COORDINATOR.value

    def privileged(self, actor_role: Any, kind: Any, action: Any, from_state: Any = None) -> bool:
        """Check if a role may act without any ownership or assignment check."""
        permission = self.rule(kind, action, from_state)
        return permission is not None and enum_value(actor_role) in permission.roles
