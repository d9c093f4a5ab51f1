from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class EmployeeRepository(Protocol):
    """Employee directory consumed by the request engine.

    Note: services depend on this interface, never on a concrete DB class.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def exists(self, employee_id: int) -> bool:
        raise NotImplementedError

    def assign_workflow(self, *, employee_id: int, workflow_id: Optional[int]) -> bool:
        raise NotImplementedError
