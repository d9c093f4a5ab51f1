from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..core.actor import Actor
from ..core.exceptions import InvalidStateError
from ..core.permissions import Capability
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..requests.model import ExceptionRequest
from ..workflows.model import WorkflowStep
from ..workflows.routing import step_at
from .factory import ApproverStrategyFactory

logger = logging.getLogger(__name__)


class ApprovalRoutingService:
    """Decides who may act on a request's current step and who sees it."""

    def __init__(self, employees: EmployeeRepository, strategy_factory: Optional[ApproverStrategyFactory] = None):
        self._employees = employees
        self._factory = strategy_factory or ApproverStrategyFactory()

    def actor_employee(self, actor: Actor) -> Optional[Employee]:
        return self._employees.get_by_user_id(int(actor.user_id))

    @staticmethod
    def current_step(request: ExceptionRequest) -> WorkflowStep:
        step = step_at(request.steps, request.current_step_order)
        if step is None:
            raise InvalidStateError(
                f"Request {request.request_id} points at step {request.current_step_order}, which does not exist"
            )
        return step

    def can_act(self, actor: Actor, request: ExceptionRequest, *, actor_employee: Optional[Employee] = None) -> bool:
        step = self.current_step(request)
        if actor_employee is None:
            actor_employee = self.actor_employee(actor)
        strategy = self._factory.for_type(step.approver_type)
        return strategy.can_act(actor=actor, actor_employee=actor_employee, step=step)

    def approver_identity(self, request: ExceptionRequest, *, actor_employee: Optional[Employee]) -> Optional[int]:
        step = self.current_step(request)
        return self._factory.for_type(step.approver_type).approver_identity(actor_employee=actor_employee)

    def filter_actionable(self, actor: Actor, pending: Sequence[ExceptionRequest]) -> List[ExceptionRequest]:
        if actor.has(Capability.REQUESTS_VIEW_ALL):
            return [r for r in pending if r.is_pending]

        actor_employee = self.actor_employee(actor)
        out: List[ExceptionRequest] = []
        for request in pending:
            if not request.is_pending:
                continue
            step = step_at(request.steps, request.current_step_order)
            if step is None:
                logger.debug("Request %s: no step %s, skipped", request.request_id, request.current_step_order)
                continue
            strategy = self._factory.for_type(step.approver_type)
            if strategy.is_actionable(actor=actor, actor_employee=actor_employee, step=step, request=request):
                out.append(request)

        logger.debug("User %s can act on %d of %d pending requests", actor.user_id, len(out), len(pending))
        return out
