"""Shared entity base, actors and approval records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar


class EntityKind(str, Enum):
    """Kinds of entity governed by a workflow."""

    LEAVE_REQUEST = "LeaveRequest"
    WORK_SUBMISSION = "WorkSubmission"
    INVOICE = "Invoice"
    TASK = "Task"


class Role(str, Enum):
    """Actor roles known to the role gate."""

    EMPLOYEE = "employee"
    COORDINATOR = "coordinator"
    PROJECT_COORDINATOR = "project_coordinator"
    HR = "hr"
    ADMIN = "admin"
    GENERAL_MANAGER = "general_manager"


def enum_value(value: Any) -> Any:
    """Return the plain value of an enum member, or the value unchanged.

    Status and action enums mix in ``str`` but hash by member name, so table
    lookups are always done on plain values.
    """
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class Actor:
    """The identity performing an action.

    ``project_ids`` lists the projects a project coordinator is assigned to;
    it is ignored for every other role.
    """

    id: str
    role: str
    project_ids: frozenset[str] = field(default_factory=frozenset)

    @property
    def role_value(self) -> str:
        return enum_value(self.role)

    def coordinates(self, project_id: str | None) -> bool:
        """Check whether this actor coordinates the given project."""
        return (
            self.role_value == Role.PROJECT_COORDINATOR.value
            and project_id is not None
            and project_id in self.project_ids
        )


@dataclass(frozen=True)
class ApprovalRecord:
    """An approval decision, attached once and never rewritten."""

    approved_by: str
    approved_at: datetime
    approved: bool
    comments: str | None = None


@dataclass(frozen=True, kw_only=True)
class Entity:
    """Fields shared by every workflow entity snapshot."""

    KIND: ClassVar[EntityKind]

    id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def kind(self) -> EntityKind:
        return self.KIND
