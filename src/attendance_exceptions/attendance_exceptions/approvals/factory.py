from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from ..core.enums import ApproverType
from .strategies.assigned_strategy import AssignedApproverStrategy
from .strategies.base import ApproverStrategy
from .strategies.doctor_strategy import DoctorApproverStrategy


def default_strategies() -> Dict[ApproverType, ApproverStrategy]:
    assigned = AssignedApproverStrategy()
    return {
        ApproverType.DOCTOR: DoctorApproverStrategy(),
        ApproverType.MANAGER: assigned,
        ApproverType.HR_MANAGER: assigned,
    }


@dataclass
class ApproverStrategyFactory:
    """Factory Pattern: one authorization strategy per approver type.

    Every ApproverType must be mapped; a new type without a strategy fails
    when the factory is built, not when a request reaches that step.
    """

    strategies: Dict[ApproverType, ApproverStrategy] = field(default_factory=default_strategies)

    def __post_init__(self) -> None:
        missing = [t.value for t in ApproverType if t not in self.strategies]
        if missing:
            raise ValueError(f"No approver strategy for: {', '.join(missing)}")

    def for_type(self, approver_type: ApproverType) -> ApproverStrategy:
        return self.strategies[approver_type]
