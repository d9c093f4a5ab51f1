from __future__ import annotations

from typing import Optional

from ...core.actor import Actor
from ...employees.model import Employee
from ...requests.model import ExceptionRequest
from ...workflows.model import WorkflowStep
from .base import ApproverStrategy


class AssignedApproverStrategy(ApproverStrategy):
    """Only the employee named on the step. No capability can stand in for it."""

    def can_act(self, *, actor: Actor, actor_employee: Optional[Employee], step: WorkflowStep) -> bool:
        if actor_employee is None or step.approver_employee_id is None:
            return False
        return actor_employee.employee_id == step.approver_employee_id

    def is_actionable(
        self,
        *,
        actor: Actor,
        actor_employee: Optional[Employee],
        step: WorkflowStep,
        request: ExceptionRequest,
    ) -> bool:
        return (
            self.can_act(actor=actor, actor_employee=actor_employee, step=step)
            and request.current_step_order == step.step_order
        )
