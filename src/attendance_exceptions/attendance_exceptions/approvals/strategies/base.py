from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...core.actor import Actor
from ...employees.model import Employee
from ...requests.model import ExceptionRequest
from ...workflows.model import WorkflowStep


class ApproverStrategy(ABC):
    """Strategy Pattern: who may act on a step of a given approver type."""

    @abstractmethod
    def can_act(self, *, actor: Actor, actor_employee: Optional[Employee], step: WorkflowStep) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_actionable(
        self,
        *,
        actor: Actor,
        actor_employee: Optional[Employee],
        step: WorkflowStep,
        request: ExceptionRequest,
    ) -> bool:
        """Should the request show up in the actor's pending-approval list?"""
        raise NotImplementedError

    def approver_identity(self, *, actor_employee: Optional[Employee]) -> Optional[int]:
        return actor_employee.employee_id if actor_employee else None
