from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Schedule, ScheduleAssignment


class ScheduleRepository(Protocol):
    def list_active_assignments(self, *, employee_id: int, on_date: date) -> Sequence[ScheduleAssignment]:
        """Assignments of the employee whose effective range covers ``on_date``."""

        raise NotImplementedError

    def get_schedule(self, *, schedule_id: int) -> Optional[Schedule]:
        """Schedule with its weekday list."""

        raise NotImplementedError
