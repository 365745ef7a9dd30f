"""Workflow error taxonomy and the result wrapper returned by services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class WorkflowError(Exception):
    """Base class for all recoverable workflow errors."""

    code = "workflow_error"


class Forbidden(WorkflowError):
    """Raised when the actor lacks the role or ownership for an action."""

    code = "forbidden"

    def __init__(self, actor_role: str, action: str, reason: str | None = None):
        self.actor_role = actor_role
        self.action = action
        self.reason = reason
        msg = f"Role '{actor_role}' is not authorized to {action}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class InvalidTransition(WorkflowError):
    """Raised when an action is not legal from the current status."""

    code = "invalid_transition"

    def __init__(self, from_state: str, action: str):
        self.from_state = from_state
        self.action = action
        super().__init__(
            f"Cannot {action} in current state '{from_state}'"
        )


class InvalidPayload(WorkflowError):
    """Raised when supporting data is missing or out of range."""

    code = "invalid_payload"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class IntegrityViolation(WorkflowError):
    """Raised when stored fields disagree with recomputed values."""

    code = "integrity_violation"

    def __init__(self, entity_id: Any, detail: str):
        self.entity_id = entity_id
        self.detail = detail
        super().__init__(f"Integrity violation on {entity_id}: {detail}")


@dataclass(frozen=True)
class WorkflowResult(Generic[T]):
    """Outcome of a workflow operation: a new snapshot or an error."""

    entity: T | None = None
    error: WorkflowError | None = None

    @property
    def ok(self) -> bool:
        """Whether the operation succeeded."""
        return self.error is None

    def unwrap(self) -> T:
        """Return the entity, raising the captured error if there is one."""
        if self.error is not None:
            raise self.error
        if self.entity is None:
            raise ValueError("WorkflowResult holds neither an entity nor an error")
        return self.entity
