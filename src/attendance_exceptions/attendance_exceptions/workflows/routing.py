"""Step resolution over an ordered set of workflow steps.

Steps are ordered by ``step_order`` only; gaps between orders are allowed.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ..core.constants import FALLBACK_STEP_ORDER
from ..core.enums import ApproverType, ExceptionRequestType
from .model import WorkflowStep

logger = logging.getLogger(__name__)


def ordered(steps: Iterable[WorkflowStep]) -> List[WorkflowStep]:
    return sorted(steps, key=lambda s: s.step_order)


def resolve_initial_step(
    steps: Iterable[WorkflowStep],
    request_type: ExceptionRequestType,
    *,
    workflow_id: Optional[int] = None,
) -> int:
    """Pick the step a new request starts at.

    Sick leave starts at the first Doctor step. Every other type skips
    medical review and starts at the first non-Doctor step. If no step
    matches, the request starts at step 1.
    """
    steps = ordered(steps)
    if request_type == ExceptionRequestType.SICK:
        match = next((s for s in steps if s.approver_type == ApproverType.DOCTOR), None)
    else:
        match = next((s for s in steps if s.approver_type != ApproverType.DOCTOR), None)

    if match is not None:
        return match.step_order

    logger.warning(
        "Workflow %s has no step for %s requests; starting at step %d",
        workflow_id,
        request_type.value,
        FALLBACK_STEP_ORDER,
    )
    return FALLBACK_STEP_ORDER


def step_at(steps: Iterable[WorkflowStep], step_order: int) -> Optional[WorkflowStep]:
    return next((s for s in steps if s.step_order == step_order), None)


def next_step(steps: Iterable[WorkflowStep], current_step_order: int) -> Optional[WorkflowStep]:
    """Step with the smallest order strictly greater than the current one.

    ``None`` means the current step is the final one.
    """
    later = [s for s in steps if s.step_order > current_step_order]
    return min(later, key=lambda s: s.step_order) if later else None
