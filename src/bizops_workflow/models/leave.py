"""Leave request snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import ClassVar

from bizops_workflow.models.base import ApprovalRecord, Entity, EntityKind


class LeaveStatus(str, Enum):
    """Leave request status values."""

    PENDING = "pending"
    COORDINATOR_APPROVED = "coordinator_approved"
    HR_APPROVED = "hr_approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class LeaveAction(str, Enum):
    """Actions accepted by the leave request workflow."""

    APPROVE_COORDINATOR = "approve_coordinator"
    APPROVE_HR = "approve_hr"
    REJECT = "reject"
    CANCEL = "cancel"
    EDIT = "edit"


@dataclass(frozen=True, kw_only=True)
class LeaveRequest(Entity):
    """A request for leave, approved first by a coordinator and then HR."""

    KIND: ClassVar[EntityKind] = EntityKind.LEAVE_REQUEST

    employee_id: str
    leave_type: str
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus = LeaveStatus.PENDING
    coordinator_approval: ApprovalRecord | None = None
    hr_approval: ApprovalRecord | None = None
    attachments: tuple[str, ...] = ()

    @property
    def total_days(self) -> int:
        """Inclusive number of calendar days covered by the request."""
        return (self.end_date - self.start_date).days + 1
