"""Work submission review workflow."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any

from bizops_workflow.errors import IntegrityViolation, InvalidPayload
from bizops_workflow.models.base import Actor, EntityKind, enum_value
from bizops_workflow.models.work_submission import (
    WorkSubmission,
    WorkSubmissionAction,
    WorkSubmissionStatus,
)
from bizops_workflow.schemas import (
    RejectSubmissionPayload,
    ReviewPayload,
    SubmissionEditPayload,
    parse_payload,
)
from bizops_workflow.services.state_machine import WorkSubmissionStateMachine
from bizops_workflow.services.workflow import WorkflowService


class WorkSubmissionWorkflow(WorkflowService[WorkSubmission]):
    """Review of submitted work by project coordinators and managers."""

    KIND = EntityKind.WORK_SUBMISSION
    ACTIONS = WorkSubmissionAction
    STATUSES = WorkSubmissionStatus
    INITIAL_STATUS = WorkSubmissionStatus.PENDING_REVIEW

    def build_machine(self) -> WorkSubmissionStateMachine:
        return WorkSubmissionStateMachine()

    def owner_id(self, entity: WorkSubmission) -> str | None:
        return entity.employee_id

    def validate(self, entity: WorkSubmission, **context: Any) -> None:
        if entity.time_spent < 0:
            raise InvalidPayload("time_spent", "must not be negative")
        if not entity.description or not entity.description.strip():
            raise InvalidPayload("description", "required")

    def check_integrity(self, entity: WorkSubmission) -> None:
        if entity.time_spent < 0:
            raise IntegrityViolation(entity.id, "time_spent is negative")
        rejected = enum_value(entity.status) == WorkSubmissionStatus.REJECTED.value
        if rejected and not entity.rejection_reason:
            raise IntegrityViolation(entity.id, "rejected without a rejection_reason")

    def _reviewed(
        self, entity: WorkSubmission, action: str, actor: Actor, now: datetime, **changes: Any
    ) -> WorkSubmission:
        return replace(
            entity,
            status=self.next_status(entity, action),
            reviewed_by=actor.id,
            reviewer_role=actor.role_value,
            reviewed_at=now,
            **changes,
        )

    # ------------------------------------------------------------------
    # Action handlers
    # ------------------------------------------------------------------

    def _approve(
        self, entity: WorkSubmission, actor: Actor, payload: dict | None, now: datetime
    ) -> WorkSubmission:
        data = parse_payload(ReviewPayload, payload)
        return self._reviewed(
            entity,
            WorkSubmissionAction.APPROVE.value,
            actor,
            now,
            **data.model_dump(exclude_none=True),
        )

    def _reject(
        self, entity: WorkSubmission, actor: Actor, payload: dict | None, now: datetime
    ) -> WorkSubmission:
        data = parse_payload(RejectSubmissionPayload, payload)
        return self._reviewed(
            entity,
            WorkSubmissionAction.REJECT.value,
            actor,
            now,
            **data.model_dump(exclude_none=True),
        )

    def _request_revision(
        self, entity: WorkSubmission, actor: Actor, payload: dict | None, now: datetime
    ) -> WorkSubmission:
        data = parse_payload(ReviewPayload, payload)
        return self._reviewed(
            entity,
            WorkSubmissionAction.REQUEST_REVISION.value,
            actor,
            now,
            **data.model_dump(exclude_none=True),
        )

    def _resubmit(
        self, entity: WorkSubmission, actor: Actor, payload: dict | None, now: datetime
    ) -> WorkSubmission:
        data = parse_payload(SubmissionEditPayload, payload)
        return replace(
            entity,
            status=self.next_status(entity, WorkSubmissionAction.RESUBMIT.value),
            reviewed_by=None,
            reviewer_role=None,
            reviewed_at=None,
            **data.model_dump(exclude_unset=True, exclude_none=True),
        )

    def _edit(
        self, entity: WorkSubmission, actor: Actor, payload: dict | None, now: datetime
    ) -> WorkSubmission:
        data = parse_payload(SubmissionEditPayload, payload)
        return replace(entity, **data.model_dump(exclude_unset=True, exclude_none=True))

