from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..core.enums import (
    ApprovalAction,
    ApproverType,
    AttachmentType,
    ExceptionRequestStatus,
    ExceptionRequestType,
)
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from ..workflows.model import WorkflowStep
from .model import ApprovalHistoryEntry, Attachment, ExceptionRequest, NewExceptionRequest
from .repository import RequestRepository
from .state_machine import Transition

_REQUEST_COLUMNS = """
    r.request_id, r.employee_id, r.workflow_id, r.exception_date, r.request_type,
    r.reason, r.status, r.current_step_order, r.version, r.created_at
"""


def _to_attachment(r: dict) -> Attachment:
    return Attachment(
        attachment_id=int(r["attachment_id"]),
        request_id=int(r["request_id"]),
        file_name=r["file_name"],
        file_path=r["file_path"],
        content_type=r.get("content_type"),
        attachment_type=AttachmentType(r["attachment_type"]),
        uploaded_at=r["uploaded_at"],
    )


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Reads --------
    def _load_steps(self, cur, request_ids: Sequence[int]) -> Dict[int, List[WorkflowStep]]:
        out: Dict[int, List[WorkflowStep]] = {int(r): [] for r in request_ids}
        if not request_ids:
            return out
        cur.execute(
            f"""
            SELECT request_id, workflow_step_id, step_order, approver_type, approver_employee_id
            FROM exception_request_steps
            WHERE request_id IN ({placeholders(len(request_ids))})
            ORDER BY request_id ASC, step_order ASC
            """,
            tuple(int(r) for r in request_ids),
        )
        for s in fetchall(cur):
            out[int(s["request_id"])].append(
                WorkflowStep(
                    step_id=int(s["workflow_step_id"]),
                    step_order=int(s["step_order"]),
                    approver_type=ApproverType(s["approver_type"]),
                    approver_employee_id=(
                        int(s["approver_employee_id"]) if s.get("approver_employee_id") is not None else None
                    ),
                )
            )
        return out

    def _hydrate(self, cur, rows: List[dict]) -> List[ExceptionRequest]:
        steps = self._load_steps(cur, [int(r["request_id"]) for r in rows])
        return [
            ExceptionRequest(
                request_id=int(r["request_id"]),
                employee_id=int(r["employee_id"]),
                exception_date=r["exception_date"],
                request_type=ExceptionRequestType(r["request_type"]),
                reason=r["reason"],
                status=ExceptionRequestStatus(r["status"]),
                current_step_order=int(r["current_step_order"]),
                workflow_id=int(r["workflow_id"]),
                created_at=r["created_at"],
                steps=tuple(steps[int(r["request_id"])]),
                version=int(r["version"]),
            )
            for r in rows
        ]

    def get_by_id(self, request_id: int) -> Optional[ExceptionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_REQUEST_COLUMNS} FROM exception_requests r WHERE r.request_id=%s", (int(request_id),))
            row = fetchone(cur)
            if not row:
                return None
            return self._hydrate(cur, [row])[0]

    def list_by_employee(self, *, employee_id: int, limit: int = 200) -> Sequence[ExceptionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_REQUEST_COLUMNS}
                FROM exception_requests r
                WHERE r.employee_id=%s
                ORDER BY r.created_at DESC, r.request_id DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return self._hydrate(cur, fetchall(cur))

    def list_pending(self) -> Sequence[ExceptionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_REQUEST_COLUMNS}
                FROM exception_requests r
                WHERE r.status=%s
                ORDER BY r.created_at ASC, r.request_id ASC
                """,
                (ExceptionRequestStatus.PENDING.value,),
            )
            return self._hydrate(cur, fetchall(cur))

    def list_all(self, *, offset: int = 0, limit: int = 200) -> Sequence[ExceptionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_REQUEST_COLUMNS}
                FROM exception_requests r
                ORDER BY r.created_at DESC, r.request_id DESC
                LIMIT %s OFFSET %s
                """,
                (int(limit), int(offset)),
            )
            return self._hydrate(cur, fetchall(cur))

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM exception_requests")
            row = fetchone(cur)
            return int(row["total"]) if row else 0

    def list_history(self, *, request_id: int) -> Sequence[ApprovalHistoryEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT history_id, request_id, workflow_step_id, approver_employee_id,
                       step_order, action, notes, action_at
                FROM exception_request_approval_history
                WHERE request_id=%s
                ORDER BY action_at ASC, history_id ASC
                """,
                (int(request_id),),
            )
            return [
                ApprovalHistoryEntry(
                    history_id=int(h["history_id"]),
                    request_id=int(h["request_id"]),
                    workflow_step_id=int(h["workflow_step_id"]),
                    approver_employee_id=(
                        int(h["approver_employee_id"]) if h.get("approver_employee_id") is not None else None
                    ),
                    step_order=int(h["step_order"]),
                    action=ApprovalAction(h["action"]),
                    notes=h.get("notes"),
                    action_at=h["action_at"],
                )
                for h in fetchall(cur)
            ]

    # -------- Writes --------
    def create(self, new: NewExceptionRequest) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO exception_requests(
                    employee_id, workflow_id, exception_date, request_type, reason,
                    status, current_step_order, version, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,0,%s)
                """,
                (
                    int(new.employee_id),
                    int(new.workflow_id),
                    new.exception_date,
                    new.request_type.value,
                    new.reason,
                    ExceptionRequestStatus.PENDING.value,
                    int(new.current_step_order),
                    new.created_at,
                ),
            )
            request_id = int(cur.lastrowid)
            for s in new.steps:
                cur.execute(
                    """
                    INSERT INTO exception_request_steps(
                        request_id, workflow_step_id, step_order, approver_type, approver_employee_id
                    )
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (request_id, int(s.step_id), int(s.step_order), s.approver_type.value, s.approver_employee_id),
                )
            return request_id

    def save_transition(self, *, request_id: int, expected_version: int, transition: Transition) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE exception_requests
                SET status=%s, current_step_order=%s, version=version+1
                WHERE request_id=%s AND version=%s AND status=%s
                """,
                (
                    transition.status.value,
                    int(transition.current_step_order),
                    int(request_id),
                    int(expected_version),
                    ExceptionRequestStatus.PENDING.value,
                ),
            )
            if cur.rowcount == 0:
                return False

            h = transition.history
            if h is not None:
                cur.execute(
                    """
                    INSERT INTO exception_request_approval_history(
                        request_id, workflow_step_id, approver_employee_id, step_order, action, notes, action_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(h.request_id),
                        int(h.workflow_step_id),
                        h.approver_employee_id,
                        int(h.step_order),
                        h.action.value,
                        h.notes,
                        h.action_at,
                    ),
                )
            return True

    # -------- Attachments --------
    def add_attachment(
        self,
        *,
        request_id: int,
        file_name: str,
        file_path: str,
        content_type: Optional[str],
        attachment_type: AttachmentType,
        uploaded_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO exception_request_attachments(
                    request_id, file_name, file_path, content_type, attachment_type, uploaded_at
                )
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(request_id), file_name, file_path, content_type, attachment_type.value, uploaded_at),
            )
            return int(cur.lastrowid)

    def get_attachment(self, *, attachment_id: int) -> Optional[Attachment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attachment_id, request_id, file_name, file_path, content_type, attachment_type, uploaded_at
                FROM exception_request_attachments
                WHERE attachment_id=%s
                """,
                (int(attachment_id),),
            )
            row = fetchone(cur)
            return _to_attachment(row) if row else None

    def list_attachments(self, *, request_id: int) -> Sequence[Attachment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attachment_id, request_id, file_name, file_path, content_type, attachment_type, uploaded_at
                FROM exception_request_attachments
                WHERE request_id=%s
                ORDER BY uploaded_at ASC, attachment_id ASC
                """,
                (int(request_id),),
            )
            return [_to_attachment(r) for r in fetchall(cur)]
