"""Workflow and reconciliation engine for business-operations records.

Leave requests, work submissions, invoices and tasks each move through a
role-gated status workflow. Services take an entity snapshot, an actor, an
action and its payload, and return a new snapshot or a typed error.
"""

from bizops_workflow.config import Settings, get_settings
from bizops_workflow.errors import (
    Forbidden,
    IntegrityViolation,
    InvalidPayload,
    InvalidTransition,
    WorkflowError,
    WorkflowResult,
)
from bizops_workflow.services import (
    InvoiceWorkflow,
    LeaveRequestWorkflow,
    RoleGate,
    StateMachine,
    TaskWorkflow,
    WorkSubmissionWorkflow,
)

__version__ = "1.0.0"

__all__ = [
    "Settings",
    "get_settings",
    "Forbidden",
    "IntegrityViolation",
    "InvalidPayload",
    "InvalidTransition",
    "WorkflowError",
    "WorkflowResult",
    "InvoiceWorkflow",
    "LeaveRequestWorkflow",
    "RoleGate",
    "StateMachine",
    "TaskWorkflow",
    "WorkSubmissionWorkflow",
]
