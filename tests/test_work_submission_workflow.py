"""Tests for the work submission review workflow."""

from dataclasses import replace
from decimal import Decimal

import pytest

from bizops_workflow.errors import (
    Forbidden,
    IntegrityViolation,
    InvalidPayload,
    InvalidTransition,
)
from bizops_workflow.models import WorkSubmissionStatus
from bizops_workflow.services import WorkSubmissionWorkflow


@pytest.fixture
def workflow(settings) -> WorkSubmissionWorkflow:
    return WorkSubmissionWorkflow(settings=settings)


@pytest.fixture
def reviewer(actor):
    return actor("project_coordinator")


class TestReview:
    """Test reviewer decisions."""

    def test_approve_records_reviewer(self, workflow, submission, reviewer, now):
        result = workflow.apply(
            submission, "approve", reviewer, {"feedback": "Nice work"}, now=now
        )

        updated = result.entity
        assert updated.status == WorkSubmissionStatus.APPROVED
        assert updated.reviewed_by == reviewer.id
        assert updated.reviewer_role == "project_coordinator"
        assert updated.reviewed_at == now
        assert updated.feedback == "Nice work"

    def test_review_without_feedback_keeps_earlier_feedback(
        self, workflow, submission, reviewer, now
    ):
        """Feedback is only replaced when the reviewer gives new feedback."""
        reviewed = replace(submission, feedback="Check the footer")

        approved = workflow.apply(reviewed, "approve", reviewer, now=now).unwrap()
        revised = workflow.apply(reviewed, "request_revision", reviewer, {}, now=now).unwrap()

        assert approved.feedback == "Check the footer"
        assert revised.feedback == "Check the footer"

    def test_reject_without_feedback_keeps_earlier_feedback(
        self, workflow, submission, reviewer, now
    ):
        reviewed = replace(submission, feedback="Check the footer")

        rejected = workflow.apply(
            reviewed, "reject", reviewer, {"rejection_reason": "Out of scope"}, now=now
        ).unwrap()

        assert rejected.rejection_reason == "Out of scope"
        assert rejected.feedback == "Check the footer"

    def test_reject_requires_reason(self, workflow, submission, reviewer, now):
        """An empty rejection reason is refused."""
        result = workflow.apply(
            submission, "reject", reviewer, {"rejection_reason": ""}, now=now
        )

        assert isinstance(result.error, InvalidPayload)
        assert result.error.field == "rejection_reason"
        assert result.error.reason == "required"

    def test_reject_without_payload(self, workflow, submission, reviewer, now):
        result = workflow.apply(submission, "reject", reviewer, now=now)

        assert result.error.field == "rejection_reason"
        assert result.error.reason == "required"

    def test_reject_with_reason(self, workflow, submission, reviewer, now):
        result = workflow.apply(
            submission, "reject", reviewer, {"rejection_reason": "Out of scope"}, now=now
        )

        assert result.entity.status == WorkSubmissionStatus.REJECTED
        assert result.entity.rejection_reason == "Out of scope"

    @pytest.mark.parametrize("role", ["employee", "hr", "coordinator"])
    def test_review_roles(self, workflow, submission, actor, role, now):
        result = workflow.apply(submission, "approve", actor(role), now=now)

        assert isinstance(result.error, Forbidden)

    def test_approved_is_terminal(self, workflow, submission, reviewer, now):
        approved = workflow.apply(submission, "approve", reviewer, now=now).unwrap()

        result = workflow.apply(approved, "request_revision", reviewer, now=now)

        assert isinstance(result.error, InvalidTransition)
        assert result.error.from_state == "approved"


class TestRevisionLoop:
    """Test revision requests and resubmission."""

    def test_resubmit_after_revision(self, workflow, submission, reviewer, owner, now):
        revised = workflow.apply(
            submission, "request_revision", reviewer, {"feedback": "Add tests"}, now=now
        ).unwrap()
        assert revised.status == WorkSubmissionStatus.NEEDS_REVISION

        result = workflow.apply(revised, "resubmit", owner, {"time_spent": "6.5"}, now=now)

        updated = result.entity
        assert updated.status == WorkSubmissionStatus.PENDING_REVIEW
        assert updated.time_spent == Decimal("6.5")
        assert updated.reviewed_by is None
        assert updated.reviewed_at is None
        assert updated.feedback == "Add tests"

    def test_only_owner_resubmits(self, workflow, submission, admin, now):
        revised = replace(submission, status=WorkSubmissionStatus.NEEDS_REVISION)

        result = workflow.apply(revised, "resubmit", admin, now=now)

        assert isinstance(result.error, Forbidden)

    def test_resubmit_rejects_negative_hours(self, workflow, submission, owner, now):
        revised = replace(submission, status=WorkSubmissionStatus.NEEDS_REVISION)

        result = workflow.apply(revised, "resubmit", owner, {"time_spent": -1}, now=now)

        assert result.error.field == "time_spent"
        assert result.error.reason == "must not be negative"


class TestEditAndCreate:
    """Test owner edits, creation and integrity."""

    def test_owner_edits_pending(self, workflow, submission, owner, now):
        result = workflow.apply(
            submission, "edit", owner, {"description": "Landing page and footer"}, now=now
        )

        assert result.entity.description == "Landing page and footer"
        assert result.entity.status == WorkSubmissionStatus.PENDING_REVIEW

    def test_other_employee_cannot_edit(self, workflow, submission, actor, now):
        result = workflow.apply(
            submission, "edit", actor("employee", id="EMP-9"), {"title": "x"}, now=now
        )

        assert isinstance(result.error, Forbidden)

    def test_create_rejects_negative_hours(self, workflow, submission, now):
        result = workflow.create(replace(submission, time_spent=Decimal("-2")), now=now)

        assert result.error.field == "time_spent"

    def test_rejected_without_reason_is_violation(self, workflow, submission):
        corrupt = replace(submission, status=WorkSubmissionStatus.REJECTED)

        with pytest.raises(IntegrityViolation) as exc_info:
            workflow.check_integrity(corrupt)

        assert exc_info.value.entity_id == "WS-1"
