"""Leave request workflow: coordinator approval followed by HR approval."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any

from bizops_workflow.errors import IntegrityViolation, InvalidPayload
from bizops_workflow.models.base import Actor, ApprovalRecord, EntityKind, enum_value
from bizops_workflow.models.leave import LeaveAction, LeaveRequest, LeaveStatus
from bizops_workflow.schemas import (
    CommentPayload,
    EmptyPayload,
    LeaveEditPayload,
    parse_payload,
)
from bizops_workflow.services.state_machine import LeaveRequestStateMachine
from bizops_workflow.services.workflow import WorkflowService


class LeaveRequestWorkflow(WorkflowService[LeaveRequest]):
    """Approvals, rejections, cancellation and edits of leave requests.

    Coordinator approval is required before HR approval unless the
    ``allow_hr_bypass`` setting is on. Approval records are attached once
    and never rewritten.
    """

    KIND = EntityKind.LEAVE_REQUEST
    ACTIONS = LeaveAction
    STATUSES = LeaveStatus
    INITIAL_STATUS = LeaveStatus.PENDING

    def build_machine(self) -> LeaveRequestStateMachine:
        return LeaveRequestStateMachine(allow_hr_bypass=self.settings.allow_hr_bypass)

    def owner_id(self, entity: LeaveRequest) -> str | None:
        return entity.employee_id

    def validate(self, entity: LeaveRequest, **context: Any) -> None:
        if not entity.reason or not entity.reason.strip():
            raise InvalidPayload("reason", "required")
        if not entity.leave_type:
            raise InvalidPayload("leave_type", "required")
        self._check_dates(entity)

    def check_integrity(self, entity: LeaveRequest) -> None:
        if entity.start_date > entity.end_date:
            raise IntegrityViolation(entity.id, "start_date is after end_date")
        if entity.hr_approval is None or self.settings.allow_hr_bypass:
            return
        coordinator = entity.coordinator_approval
        if coordinator is None or not coordinator.approved:
            raise IntegrityViolation(
                entity.id, "hr_approval recorded without coordinator approval"
            )

    @staticmethod
    def _check_dates(entity: LeaveRequest) -> None:
        if entity.start_date > entity.end_date:
            raise InvalidPayload("end_date", "must not be before start_date")

    # ------------------------------------------------------------------
    # Action handlers
    # ------------------------------------------------------------------

    def _approve_coordinator(
        self, entity: LeaveRequest, actor: Actor, payload: dict | None, now: datetime
    ) -> LeaveRequest:
        data = parse_payload(CommentPayload, payload)
        return replace(
            entity,
            status=self.next_status(entity, LeaveAction.APPROVE_COORDINATOR.value),
            coordinator_approval=ApprovalRecord(
                approved_by=actor.id,
                approved_at=now,
                approved=True,
                comments=data.comments,
            ),
        )

    def _approve_hr(
        self, entity: LeaveRequest, actor: Actor, payload: dict | None, now: datetime
    ) -> LeaveRequest:
        data = parse_payload(CommentPayload, payload)
        return replace(
            entity,
            status=self.next_status(entity, LeaveAction.APPROVE_HR.value),
            hr_approval=ApprovalRecord(
                approved_by=actor.id,
                approved_at=now,
                approved=True,
                comments=data.comments,
            ),
        )

    def _reject(
        self, entity: LeaveRequest, actor: Actor, payload: dict | None, now: datetime
    ) -> LeaveRequest:
        data = parse_payload(CommentPayload, payload)
        record = ApprovalRecord(
            approved_by=actor.id,
            approved_at=now,
            approved=False,
            comments=data.comments,
        )
        status = self.next_status(entity, LeaveAction.REJECT.value)
        # The stage that was awaiting a decision carries the rejection
        if enum_value(entity.status) == LeaveStatus.PENDING.value:
            return replace(entity, status=status, coordinator_approval=record)
        return replace(entity, status=status, hr_approval=record)

    def _cancel(
        self, entity: LeaveRequest, actor: Actor, payload: dict | None, now: datetime
    ) -> LeaveRequest:
        parse_payload(EmptyPayload, payload)
        return replace(entity, status=self.next_status(entity, LeaveAction.CANCEL.value))

    def _edit(
        self, entity: LeaveRequest, actor: Actor, payload: dict | None, now: datetime
    ) -> LeaveRequest:
        data = parse_payload(LeaveEditPayload, payload)
        updated = replace(entity, **data.model_dump(exclude_unset=True, exclude_none=True))
        self._check_dates(updated)
        return updated
