from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from ..core.enums import ApproverType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import NewWorkflowStep, Workflow, WorkflowStep
from .repository import WorkflowRepository


def _to_step(row: dict) -> WorkflowStep:
    return WorkflowStep(
        step_id=int(row["step_id"]),
        step_order=int(row["step_order"]),
        approver_type=ApproverType(row["approver_type"]),
        approver_employee_id=(
            int(row["approver_employee_id"]) if row.get("approver_employee_id") is not None else None
        ),
    )


class MySQLWorkflowRepository(WorkflowRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_steps(self, cur, workflow_ids: Sequence[int]) -> Dict[int, List[WorkflowStep]]:
        out: Dict[int, List[WorkflowStep]] = {int(w): [] for w in workflow_ids}
        if not workflow_ids:
            return out
        cur.execute(
            f"""
            SELECT step_id, workflow_id, step_order, approver_type, approver_employee_id
            FROM workflow_steps
            WHERE workflow_id IN ({placeholders(len(workflow_ids))})
            ORDER BY workflow_id ASC, step_order ASC
            """,
            tuple(int(w) for w in workflow_ids),
        )
        for r in fetchall(cur):
            out[int(r["workflow_id"])].append(_to_step(r))
        return out

    @staticmethod
    def _insert_steps(cur, workflow_id: int, steps: Sequence[NewWorkflowStep]) -> None:
        for s in sorted(steps, key=lambda s: s.step_order):
            cur.execute(
                """
                INSERT INTO workflow_steps(workflow_id, step_order, approver_type, approver_employee_id)
                VALUES(%s,%s,%s,%s)
                """,
                (int(workflow_id), int(s.step_order), s.approver_type.value, s.approver_employee_id),
            )

    def get_by_id(self, workflow_id: int) -> Optional[Workflow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT workflow_id, name, description, is_active FROM workflows WHERE workflow_id=%s",
                (int(workflow_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            steps = self._load_steps(cur, [int(row["workflow_id"])])
            return Workflow(
                workflow_id=int(row["workflow_id"]),
                name=row["name"],
                description=row.get("description"),
                is_active=bool(row["is_active"]),
                steps=tuple(steps[int(row["workflow_id"])]),
            )

    def list_active(self) -> Sequence[Workflow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT workflow_id, name, description, is_active FROM workflows WHERE is_active=1 ORDER BY name"
            )
            rows = fetchall(cur)
            steps = self._load_steps(cur, [int(r["workflow_id"]) for r in rows])
            return [
                Workflow(
                    workflow_id=int(r["workflow_id"]),
                    name=r["name"],
                    description=r.get("description"),
                    is_active=True,
                    steps=tuple(steps[int(r["workflow_id"])]),
                )
                for r in rows
            ]

    def create(self, *, name: str, description: Optional[str], steps: Sequence[NewWorkflowStep]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO workflows(name, description, is_active) VALUES(%s,%s,1)",
                (name, description),
            )
            workflow_id = int(cur.lastrowid)
            self._insert_steps(cur, workflow_id, steps)
            return workflow_id

    def replace(
        self,
        *,
        workflow_id: int,
        name: str,
        description: Optional[str],
        steps: Sequence[NewWorkflowStep],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT workflow_id FROM workflows WHERE workflow_id=%s FOR UPDATE", (int(workflow_id),))
            if not fetchone(cur):
                return False
            cur.execute(
                "UPDATE workflows SET name=%s, description=%s WHERE workflow_id=%s",
                (name, description, int(workflow_id)),
            )
            cur.execute("DELETE FROM workflow_steps WHERE workflow_id=%s", (int(workflow_id),))
            self._insert_steps(cur, int(workflow_id), steps)
            return True

    def set_active(self, *, workflow_id: int, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE workflows SET is_active=%s WHERE workflow_id=%s",
                (1 if is_active else 0, int(workflow_id)),
            )
            return cur.rowcount > 0
