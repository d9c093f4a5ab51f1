from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..core.exceptions import NotFoundError
from .model import ScheduleAssignment
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class ScheduleService:
    """Schedule gate: is a given date a mandated on-site day for an employee?"""

    def __init__(self, schedules: ScheduleRepository):
        self._schedules = schedules

    def get_active_assignment(self, *, employee_id: int, on_date: date) -> Optional[ScheduleAssignment]:
        active = [
            a
            for a in self._schedules.list_active_assignments(employee_id=int(employee_id), on_date=on_date)
            if a.covers(on_date)
        ]
        if not active:
            return None
        if len(active) > 1:
            logger.warning(
                "Employee %s has %d overlapping schedule assignments on %s; using the most recent",
                employee_id,
                len(active),
                on_date,
            )
        return max(active, key=lambda a: (a.effective_from, a.assignment_id))

    def is_on_site_day(self, *, employee_id: int, on_date: date) -> bool:
        assignment = self.get_active_assignment(employee_id=employee_id, on_date=on_date)
        if assignment is None:
            raise NotFoundError(f"No active schedule assignment for employee {employee_id} on {on_date}")

        schedule = self._schedules.get_schedule(schedule_id=assignment.schedule_id)
        if schedule is None:
            raise NotFoundError(f"Schedule {assignment.schedule_id} not found")

        return schedule.is_on_site(on_date.weekday())
