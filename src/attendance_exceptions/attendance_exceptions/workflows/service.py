from __future__ import annotations

import logging
from collections import Counter
from typing import Optional, Sequence

from ..common.validators import optional_text, require_max_length, require_non_empty
from ..core.actor import Actor
from ..core.enums import ApproverType
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import Capability
from ..employees.repository import EmployeeRepository
from .model import NewWorkflowStep, Workflow
from .repository import WorkflowRepository

logger = logging.getLogger(__name__)


class WorkflowService:
    """Use case: administer approval workflows and assign them to employees."""

    def __init__(self, workflows: WorkflowRepository, employees: EmployeeRepository):
        self._workflows = workflows
        self._employees = employees

    def _validate_steps(self, steps: Sequence[NewWorkflowStep]) -> None:
        if not steps:
            raise ValidationError("A workflow needs at least one step")

        for s in steps:
            if int(s.step_order) <= 0:
                raise ValidationError(f"Step order must be a positive integer (got {s.step_order})")

        duplicates = sorted(order for order, n in Counter(int(s.step_order) for s in steps).items() if n > 1)
        if duplicates:
            raise ValidationError(f"Duplicate step orders found: {', '.join(str(d) for d in duplicates)}")

        for s in steps:
            if s.approver_type == ApproverType.DOCTOR:
                if s.approver_employee_id is not None:
                    raise ValidationError(f"Doctor step {s.step_order} must not name an approver employee")
                continue
            if s.approver_employee_id is None:
                raise ValidationError(
                    f"Approver employee is required for step {s.step_order} (approver type: {s.approver_type.value})"
                )
            if not self._employees.exists(int(s.approver_employee_id)):
                raise ValidationError(
                    f"Approver employee with ID {s.approver_employee_id} does not exist for step {s.step_order}"
                )

    def get_workflow(self, workflow_id: int) -> Workflow:
        workflow = self._workflows.get_by_id(int(workflow_id))
        if workflow is None:
            raise NotFoundError(f"Workflow {workflow_id} not found")
        return workflow

    def list_active(self) -> Sequence[Workflow]:
        return self._workflows.list_active()

    def create_workflow(
        self,
        *,
        actor: Actor,
        name: str,
        description: Optional[str],
        steps: Sequence[NewWorkflowStep],
    ) -> int:
        actor.require(Capability.WORKFLOWS_CREATE)

        name = require_non_empty(name, "Workflow name")
        description = require_max_length(optional_text(description, "Description"), "Description", 1000)
        self._validate_steps(steps)

        workflow_id = self._workflows.create(name=name, description=description, steps=list(steps))
        logger.info("User %s created workflow %s with %d steps", actor.user_id, workflow_id, len(steps))
        return workflow_id

    def update_workflow(
        self,
        *,
        actor: Actor,
        workflow_id: int,
        name: str,
        description: Optional[str],
        steps: Sequence[NewWorkflowStep],
    ) -> None:
        actor.require(Capability.WORKFLOWS_EDIT)

        name = require_non_empty(name, "Workflow name")
        description = require_max_length(optional_text(description, "Description"), "Description", 1000)
        self._validate_steps(steps)

        if not self._workflows.replace(
            workflow_id=int(workflow_id), name=name, description=description, steps=list(steps)
        ):
            raise NotFoundError(f"Workflow {workflow_id} not found")
        logger.info("User %s replaced the steps of workflow %s", actor.user_id, workflow_id)

    def activate(self, *, actor: Actor, workflow_id: int) -> None:
        self._set_active(actor, workflow_id, True)

    def deactivate(self, *, actor: Actor, workflow_id: int) -> None:
        self._set_active(actor, workflow_id, False)

    def _set_active(self, actor: Actor, workflow_id: int, is_active: bool) -> None:
        actor.require(Capability.WORKFLOWS_EDIT)
        self.get_workflow(workflow_id)
        self._workflows.set_active(workflow_id=int(workflow_id), is_active=is_active)
        logger.info("User %s set workflow %s active=%s", actor.user_id, workflow_id, is_active)

    def assign_to_employee(self, *, actor: Actor, employee_id: int, workflow_id: Optional[int]) -> None:
        """Assign (or clear, with ``workflow_id=None``) an employee's workflow."""
        actor.require(Capability.WORKFLOWS_MANAGE_STEPS)

        if self._employees.get_by_id(int(employee_id)) is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        if workflow_id is not None:
            workflow = self.get_workflow(workflow_id)
            if not workflow.is_active:
                raise ValidationError(f"Workflow {workflow_id} is inactive")

        self._employees.assign_workflow(employee_id=int(employee_id), workflow_id=workflow_id)
        logger.info("User %s assigned workflow %s to employee %s", actor.user_id, workflow_id, employee_id)
