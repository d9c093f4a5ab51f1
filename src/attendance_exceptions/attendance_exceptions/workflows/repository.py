from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewWorkflowStep, Workflow


class WorkflowRepository(Protocol):
    def get_by_id(self, workflow_id: int) -> Optional[Workflow]:
        """Workflow with its steps ordered by step_order."""

        raise NotImplementedError

    def list_active(self) -> Sequence[Workflow]:
        raise NotImplementedError

    def create(self, *, name: str, description: Optional[str], steps: Sequence[NewWorkflowStep]) -> int:
        raise NotImplementedError

    def replace(
        self,
        *,
        workflow_id: int,
        name: str,
        description: Optional[str],
        steps: Sequence[NewWorkflowStep],
    ) -> bool:
        """Rename the workflow and rebuild its step list."""

        raise NotImplementedError

    def set_active(self, *, workflow_id: int, is_active: bool) -> bool:
        raise NotImplementedError
