"""Task workflow and main/sub task structure rules."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from bizops_workflow.calculators.reconciliation import (
    CLOSED_TASK_STATUSES,
    overdue_status,
    timeline_progress,
)
from bizops_workflow.calculators.types import OverdueStatus
from bizops_workflow.errors import IntegrityViolation, InvalidPayload
from bizops_workflow.models.base import Actor, EntityKind, enum_value
from bizops_workflow.models.task import Task, TaskAction, TaskStatus, TaskType
from bizops_workflow.schemas import EmptyPayload, TaskEditPayload, parse_payload
from bizops_workflow.services.state_machine import TaskStateMachine
from bizops_workflow.services.workflow import WorkflowService


@dataclass(frozen=True)
class TaskView:
    task: Task
    overdue: OverdueStatus
    timeline_progress: int | None  # None without a start date


class TaskWorkflow(WorkflowService[Task]):
    """Progress of tasks through start, completion or rejection.

    A task's type is fixed at creation. Sub tasks must name a main task as
    their parent; main tasks must not have a parent.
    """

    KIND = EntityKind.TASK
    ACTIONS = TaskAction
    STATUSES = TaskStatus
    INITIAL_STATUS = TaskStatus.PENDING

    def build_machine(self) -> TaskStateMachine:
        return TaskStateMachine()

    def owner_id(self, entity: Task) -> str | None:
        return entity.assigned_employee_id

    def view(self, task: Task, now: datetime) -> TaskView:
        """Derive deadline figures for a task."""
        progress = None
        if task.start_date is not None:
            progress = timeline_progress(task.start_date, task.due_date, now)
        return TaskView(
            task=task,
            overdue=overdue_status(task.due_date, task.status, now, settled=CLOSED_TASK_STATUSES),
            timeline_progress=progress,
        )

    def validate(self, entity: Task, parent: Task | None = None, **context: Any) -> None:
        """Check creation rules; ``parent`` is the snapshot of ``parent_task_id``."""
        if not entity.title or not entity.title.strip():
            raise InvalidPayload("title", "required")
        task_type = enum_value(entity.task_type)

        if task_type == TaskType.SUB.value:
            if not entity.parent_task_id:
                raise InvalidPayload("parent_task_id", "required for sub tasks")
            if (
                parent is None
                or parent.id != entity.parent_task_id
                or enum_value(parent.task_type) != TaskType.MAIN.value
            ):
                raise InvalidPayload("parent_task_id", "must reference a main task")
        elif task_type == TaskType.MAIN.value:
            if entity.parent_task_id:
                raise InvalidPayload("parent_task_id", "not allowed for main tasks")
        else:
            raise InvalidPayload("task_type", "invalid")

        self._check_dates(entity)

    def check_integrity(self, entity: Task) -> None:
        is_sub = enum_value(entity.task_type) == TaskType.SUB.value
        if is_sub != bool(entity.parent_task_id):
            raise IntegrityViolation(entity.id, "parent_task_id does not match task_type")

    @staticmethod
    def _check_dates(entity: Task) -> None:
        if entity.start_date is not None and entity.start_date > entity.due_date:
            raise InvalidPayload("due_date", "must not be before start_date")

    # ------------------------------------------------------------------
    # Action handlers
    # ------------------------------------------------------------------

    def _start(self, entity: Task, actor: Actor, payload: dict | None, now: datetime) -> Task:
        parse_payload(EmptyPayload, payload)
        return replace(entity, status=self.next_status(entity, TaskAction.START.value))

    def _complete(self, entity: Task, actor: Actor, payload: dict | None, now: datetime) -> Task:
        parse_payload(EmptyPayload, payload)
        return replace(
            entity,
            status=self.next_status(entity, TaskAction.COMPLETE.value),
            completed_at=now,
        )

    def _reject(self, entity: Task, actor: Actor, payload: dict | None, now: datetime) -> Task:
        parse_payload(EmptyPayload, payload)
        return replace(entity, status=self.next_status(entity, TaskAction.REJECT.value))

    def _edit(self, entity: Task, actor: Actor, payload: dict | None, now: datetime) -> Task:
        data = parse_payload(TaskEditPayload, payload)
        updated = replace(entity, **data.model_dump(exclude_unset=True, exclude_none=True))
        self._check_dates(updated)
        return updated
