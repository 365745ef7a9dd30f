"""Base workflow service binding the role gate, state machine and calculator."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

from bizops_workflow.config import Settings, get_settings
from bizops_workflow.errors import (
    Forbidden,
    IntegrityViolation,
    InvalidPayload,
    InvalidTransition,
    WorkflowError,
    WorkflowResult,
)
from bizops_workflow.models.base import Actor, Entity, EntityKind, enum_value
from bizops_workflow.services.role_gate import RoleGate
from bizops_workflow.services.state_machine import StateMachine

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)


class WorkflowService(Generic[E]):
    """Applies actions to one entity kind.

    ``apply`` pipeline (stable order):
    1) Role gate
    2) Ownership / project assignment
    3) State machine legality
    4) Integrity of stored derived fields
    5) Payload validation and field mutation (per-action handler)
    6) Recompute derived fields

    Every step raises a WorkflowError subclass; ``apply`` and ``create``
    return them inside a WorkflowResult and never raise. Handlers are
    methods named ``_<action>`` taking ``(entity, actor, payload, now)``.
    """

    KIND: ClassVar[EntityKind]
    ACTIONS: ClassVar[type[Enum]]
    STATUSES: ClassVar[type[Enum]]
    INITIAL_STATUS: ClassVar[Enum]

    def __init__(
        self,
        settings: Settings | None = None,
        gate: RoleGate | None = None,
    ):
        self.settings = settings or get_settings()
        self.gate = gate or RoleGate()
        self.machine = self.build_machine()

    def build_machine(self) -> StateMachine:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    def apply(
        self,
        entity: E,
        action: Any,
        actor: Actor,
        payload: dict[str, Any] | None = None,
        *,
        now: datetime,
    ) -> WorkflowResult[E]:
        """Apply an action, returning the new snapshot or the error."""
        try:
            return WorkflowResult(entity=self._apply(entity, action, actor, payload, now))
        except WorkflowError as exc:
            return self._failure(entity, exc)

    def create(self, entity: E, *, now: datetime, **context: Any) -> WorkflowResult[E]:
        """Validate a freshly submitted entity and stamp its timestamps."""
        try:
            if enum_value(entity.status) != self.INITIAL_STATUS.value:
                raise InvalidPayload(
                    "status", f"must start as {self.INITIAL_STATUS.value}"
                )
            self.validate(entity, **context)
            created = self.reconcile(entity)
            created = replace(
                created,
                created_at=entity.created_at or now,
                updated_at=now,
            )
            return WorkflowResult(entity=created)
        except WorkflowError as exc:
            return self._failure(entity, exc)

    def allowed_actions(self, entity: E, actor: Actor) -> list[str]:
        """Actions the actor could apply to the entity in its current status."""
        actions: list[str] = []
        for action in self.machine.get_allowed_actions(entity.status):
            try:
                self.authorize(entity, action, actor)
            except Forbidden:
                continue
            actions.append(action)
        return actions

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _apply(
        self,
        entity: E,
        action: Any,
        actor: Actor,
        payload: dict[str, Any] | None,
        now: datetime,
    ) -> E:
        action = self._coerce_action(entity, action)
        self.authorize(entity, action, actor)
        self.machine.validate_action(entity.status, action)
        self.check_integrity(entity)

        handler = getattr(self, f"_{action}")
        updated = handler(entity, actor, payload, now)
        return self.reconcile(replace(updated, updated_at=now))

    def _coerce_action(self, entity: E, action: Any) -> str:
        value = enum_value(action)
        try:
            return self.ACTIONS(value).value
        except ValueError:
            raise InvalidTransition(enum_value(entity.status), str(value)) from None

    def authorize(self, entity: E, action: str, actor: Actor) -> None:
        """Raise Forbidden unless the actor may perform the action."""
        role = actor.role_value
        state = enum_value(entity.status)

        if not self.gate.allowed(role, self.KIND, action, state):
            raise Forbidden(role, action)
        if self.gate.privileged(role, self.KIND, action, state):
            return

        permission = self.gate.rule(self.KIND, action, state)
        if permission.owner and self.owner_id(entity) == actor.id:
            return
        if permission.project_coordinator and actor.coordinates(
            getattr(entity, "project_id", None)
        ):
            return
        raise Forbidden(role, action, "actor is not the owner or assigned coordinator")

    def owner_id(self, entity: E) -> str | None:
        """Identity of the employee who owns the entity, if any."""
        return None

    def check_integrity(self, entity: E) -> None:
        """Raise IntegrityViolation if stored fields are inconsistent."""

    def validate(self, entity: E, **context: Any) -> None:
        """Raise InvalidPayload if creation invariants do not hold."""

    def reconcile(self, entity: E) -> E:
        """Recompute stored derived fields."""
        return entity

    def next_status(self, entity: E, action: str, outcome: Any = None) -> Enum:
        """Next status as a member of this workflow's status enum."""
        return self.STATUSES(self.machine.transition(entity.status, action, outcome))

    def _failure(self, entity: E, exc: WorkflowError) -> WorkflowResult[E]:
        if isinstance(exc, IntegrityViolation):
            logger.error(
                "Integrity violation on %s %s: %s",
                self.KIND.value,
                exc.entity_id,
                exc.detail,
            )
        return WorkflowResult(error=exc)
