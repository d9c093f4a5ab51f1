from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple


@dataclass(frozen=True)
class ScheduleDay:
    day_of_week: int  # 0=Monday ... 6=Sunday, same as date.weekday()
    is_on_site: bool


@dataclass(frozen=True)
class Schedule:
    schedule_id: int
    name: str
    days: Tuple[ScheduleDay, ...] = field(default_factory=tuple)

    def is_on_site(self, day_of_week: int) -> bool:
        for day in self.days:
            if day.day_of_week == day_of_week:
                return day.is_on_site
        return False


@dataclass(frozen=True)
class ScheduleAssignment:
    assignment_id: int
    employee_id: int
    schedule_id: int
    effective_from: date
    effective_to: Optional[date] = None

    def covers(self, on_date: date) -> bool:
        if self.effective_from > on_date:
            return False
        return self.effective_to is None or on_date <= self.effective_to
