"""Work submission snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar

from bizops_workflow.models.base import Entity, EntityKind


class WorkSubmissionStatus(str, Enum):
    """Work submission status values."""

    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    NEEDS_REVISION = "needs_revision"


class WorkSubmissionAction(str, Enum):
    """Actions accepted by the work submission workflow."""

    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_REVISION = "request_revision"
    RESUBMIT = "resubmit"
    EDIT = "edit"


@dataclass(frozen=True, kw_only=True)
class WorkSubmission(Entity):
    """Hours of work an employee submits against a task for review."""

    KIND: ClassVar[EntityKind] = EntityKind.WORK_SUBMISSION

    employee_id: str
    task_id: str
    project_id: str
    time_spent: Decimal  # hours
    description: str
    title: str | None = None
    status: WorkSubmissionStatus = WorkSubmissionStatus.PENDING_REVIEW
    feedback: str | None = None
    rejection_reason: str | None = None
    reviewed_by: str | None = None
    reviewer_role: str | None = None
    reviewed_at: datetime | None = None
    attachments: tuple[str, ...] = ()
