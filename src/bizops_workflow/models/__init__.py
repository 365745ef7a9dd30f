"""Workflow entity snapshots."""

from bizops_workflow.models.base import (
    Actor,
    ApprovalRecord,
    Entity,
    EntityKind,
    Role,
)
from bizops_workflow.models.invoice import (
    Invoice,
    InvoiceAction,
    InvoiceItem,
    InvoiceStatus,
    PaymentOutcome,
)
from bizops_workflow.models.leave import LeaveAction, LeaveRequest, LeaveStatus
from bizops_workflow.models.task import (
    Task,
    TaskAction,
    TaskPriority,
    TaskStatus,
    TaskType,
)
from bizops_workflow.models.work_submission import (
    WorkSubmission,
    WorkSubmissionAction,
    WorkSubmissionStatus,
)

__all__ = [
    "Actor",
    "ApprovalRecord",
    "Entity",
    "EntityKind",
    "Role",
    "Invoice",
    "InvoiceAction",
    "InvoiceItem",
    "InvoiceStatus",
    "PaymentOutcome",
    "LeaveAction",
    "LeaveRequest",
    "LeaveStatus",
    "Task",
    "TaskAction",
    "TaskPriority",
    "TaskStatus",
    "TaskType",
    "WorkSubmission",
    "WorkSubmissionAction",
    "WorkSubmissionStatus",
]
