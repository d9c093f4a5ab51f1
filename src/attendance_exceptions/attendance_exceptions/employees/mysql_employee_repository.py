from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "employee_id, user_id, name, department, sector, is_active, workflow_id"


def _to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        user_id=int(row["user_id"]),
        name=row["name"],
        department=row.get("department"),
        sector=row.get("sector"),
        is_active=bool(row.get("is_active", True)),
        workflow_id=int(row["workflow_id"]) if row.get("workflow_id") is not None else None,
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def exists(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM employees WHERE employee_id=%s", (int(employee_id),))
            return fetchone(cur) is not None

    def assign_workflow(self, *, employee_id: int, workflow_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET workflow_id=%s WHERE employee_id=%s",
                (workflow_id, int(employee_id)),
            )
            return cur.rowcount > 0
