from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..core.enums import ApproverType


@dataclass(frozen=True)
class WorkflowStep:
    step_id: int
    step_order: int
    approver_type: ApproverType
    approver_employee_id: Optional[int] = None


@dataclass(frozen=True)
class Workflow:
    workflow_id: int
    name: str
    description: Optional[str] = None
    is_active: bool = True
    steps: Tuple[WorkflowStep, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class NewWorkflowStep:
    """Step definition submitted by an administrator (no id yet)."""

    step_order: int
    approver_type: ApproverType
    approver_employee_id: Optional[int] = None
