from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Schedule, ScheduleAssignment, ScheduleDay
from .repository import ScheduleRepository


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active_assignments(self, *, employee_id: int, on_date: date) -> Sequence[ScheduleAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT assignment_id, employee_id, schedule_id, effective_from, effective_to
                FROM schedule_assignments
                WHERE employee_id=%s
                  AND effective_from <= %s
                  AND (effective_to IS NULL OR effective_to >= %s)
                ORDER BY effective_from DESC, assignment_id DESC
                """,
                (int(employee_id), on_date, on_date),
            )
            return [
                ScheduleAssignment(
                    assignment_id=int(r["assignment_id"]),
                    employee_id=int(r["employee_id"]),
                    schedule_id=int(r["schedule_id"]),
                    effective_from=r["effective_from"],
                    effective_to=r.get("effective_to"),
                )
                for r in fetchall(cur)
            ]

    def get_schedule(self, *, schedule_id: int) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT schedule_id, name FROM schedules WHERE schedule_id=%s", (int(schedule_id),))
            row = fetchone(cur)
            if not row:
                return None

            cur.execute(
                """
                SELECT day_of_week, is_on_site
                FROM schedule_days
                WHERE schedule_id=%s
                ORDER BY day_of_week ASC
                """,
                (int(schedule_id),),
            )
            days = tuple(
                ScheduleDay(day_of_week=int(d["day_of_week"]), is_on_site=bool(d["is_on_site"]))
                for d in fetchall(cur)
            )
            return Schedule(schedule_id=int(row["schedule_id"]), name=row["name"], days=days)
