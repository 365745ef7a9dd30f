"""Task snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import ClassVar

from bizops_workflow.models.base import Entity, EntityKind


class TaskType(str, Enum):
    """Main tasks group sub tasks; the type never changes."""

    MAIN = "main"
    SUB = "sub"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    """Task status values."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"


class TaskAction(str, Enum):
    """Actions accepted by the task workflow."""

    START = "start"
    COMPLETE = "complete"
    REJECT = "reject"
    EDIT = "edit"


@dataclass(frozen=True, kw_only=True)
class Task(Entity):
    """A unit of project work assigned to one employee."""

    KIND: ClassVar[EntityKind] = EntityKind.TASK

    title: str
    project_id: str
    task_type: TaskType
    assigned_employee_id: str
    due_date: date
    parent_task_id: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    start_date: date | None = None
    category: str | None = None
    description: str | None = None
    completed_at: datetime | None = None
