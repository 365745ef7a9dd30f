"""Workflow services."""

from bizops_workflow.services.invoice_workflow import InvoiceView, InvoiceWorkflow
from bizops_workflow.services.leave_workflow import LeaveRequestWorkflow
from bizops_workflow.services.role_gate import Permission, RoleGate
from bizops_workflow.services.state_machine import (
    InvoiceStateMachine,
    LeaveRequestStateMachine,
    StateMachine,
    TaskStateMachine,
    WorkSubmissionStateMachine,
    transition,
)
from bizops_workflow.services.task_workflow import TaskView, TaskWorkflow
from bizops_workflow.services.work_submission_workflow import WorkSubmissionWorkflow
from bizops_workflow.services.workflow import WorkflowService

__all__ = [
    "InvoiceView",
    "InvoiceWorkflow",
    "LeaveRequestWorkflow",
    "Permission",
    "RoleGate",
    "InvoiceStateMachine",
    "LeaveRequestStateMachine",
    "StateMachine",
    "TaskStateMachine",
    "WorkSubmissionStateMachine",
    "transition",
    "TaskView",
    "TaskWorkflow",
    "WorkSubmissionWorkflow",
    "WorkflowService",
]
