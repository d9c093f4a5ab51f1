"""Status transitions of an exception request.

PENDING -> APPROVED | REJECTED   (approval actions)
PENDING -> CANCELLED             (requester withdraws)

Functions here are pure: they compute the next state and the audit entry
and leave persistence to the caller.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ApprovalAction, ExceptionRequestStatus
from ..core.exceptions import InvalidStateError
from ..workflows.model import WorkflowStep
from ..workflows.routing import next_step
from .model import ApprovalHistoryEntry, ExceptionRequest


@dataclass(frozen=True)
class Transition:
    status: ExceptionRequestStatus
    current_step_order: int
    history: Optional[ApprovalHistoryEntry] = None


def _require_pending(request: ExceptionRequest) -> None:
    if not request.is_pending:
        raise InvalidStateError(f"Request {request.request_id} has already been processed ({request.status.value})")


def apply_action(
    request: ExceptionRequest,
    step: WorkflowStep,
    action: ApprovalAction,
    *,
    approver_employee_id: Optional[int],
    notes: Optional[str],
    now: datetime,
) -> Transition:
    _require_pending(request)
    if step.step_order != request.current_step_order:
        raise InvalidStateError(
            f"Step {step.step_order} is not the current step ({request.current_step_order}) of request {request.request_id}"
        )

    history = ApprovalHistoryEntry(
        request_id=request.request_id,
        workflow_step_id=step.step_id,
        approver_employee_id=approver_employee_id,
        step_order=step.step_order,
        action=action,
        notes=notes,
        action_at=now,
    )

    if action == ApprovalAction.REJECTED:
        return Transition(ExceptionRequestStatus.REJECTED, request.current_step_order, history)

    following = next_step(request.steps, step.step_order)
    if following is None:
        return Transition(ExceptionRequestStatus.APPROVED, request.current_step_order, history)
    return Transition(ExceptionRequestStatus.PENDING, following.step_order, history)


def cancel(request: ExceptionRequest) -> Transition:
    if not request.is_pending:
        raise InvalidStateError("Only pending requests can be cancelled")
    return Transition(ExceptionRequestStatus.CANCELLED, request.current_step_order)
