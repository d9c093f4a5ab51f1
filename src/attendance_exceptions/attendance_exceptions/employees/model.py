from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee record linked to an authenticated user.

    ``workflow_id`` is the approval workflow assigned by an administrator.
    """

    employee_id: int
    user_id: int
    name: str
    department: Optional[str] = None
    sector: Optional[str] = None
    is_active: bool = True
    workflow_id: Optional[int] = None
