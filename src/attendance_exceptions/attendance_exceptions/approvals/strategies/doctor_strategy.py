from __future__ import annotations

from typing import Optional

from ...core.actor import Actor
from ...core.enums import ExceptionRequestType
from ...core.permissions import Capability
from ...employees.model import Employee
from ...requests.model import ExceptionRequest
from ...workflows.model import WorkflowStep
from .base import ApproverStrategy


class DoctorApproverStrategy(ApproverStrategy):
    """Any holder of the doctor capability; an employee record is optional."""

    def can_act(self, *, actor: Actor, actor_employee: Optional[Employee], step: WorkflowStep) -> bool:
        return actor.has(Capability.REQUESTS_APPROVE_AS_DOCTOR)

    def is_actionable(
        self,
        *,
        actor: Actor,
        actor_employee: Optional[Employee],
        step: WorkflowStep,
        request: ExceptionRequest,
    ) -> bool:
        # Doctors only review sick leave.
        return (
            actor.has(Capability.REQUESTS_APPROVE_AS_DOCTOR)
            and request.request_type == ExceptionRequestType.SICK
        )
