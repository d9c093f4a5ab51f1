from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import ApprovalAction, AttachmentType, ExceptionRequestStatus, ExceptionRequestType
from ..workflows.model import WorkflowStep


@dataclass(frozen=True)
class ExceptionRequest:
    """An employee's request to be excused from an on-site day.

    ``steps`` is the workflow's step list copied at creation time; routing
    always uses it instead of the live workflow. ``version`` changes on every
    persisted transition.
    """

    request_id: int
    employee_id: int
    exception_date: date
    request_type: ExceptionRequestType
    reason: str
    status: ExceptionRequestStatus
    current_step_order: int
    workflow_id: int
    created_at: datetime
    steps: Tuple[WorkflowStep, ...] = field(default_factory=tuple)
    version: int = 0

    @property
    def is_pending(self) -> bool:
        return self.status == ExceptionRequestStatus.PENDING


@dataclass(frozen=True)
class NewExceptionRequest:
    employee_id: int
    exception_date: date
    request_type: ExceptionRequestType
    reason: str
    workflow_id: int
    current_step_order: int
    steps: Tuple[WorkflowStep, ...]
    created_at: datetime


@dataclass(frozen=True)
class ApprovalHistoryEntry:
    """One approve/reject action. Never updated or deleted.

    ``approver_employee_id`` is None when a doctor without an employee
    record acted.
    """

    request_id: int
    workflow_step_id: int
    approver_employee_id: Optional[int]
    step_order: int
    action: ApprovalAction
    notes: Optional[str]
    action_at: datetime
    history_id: Optional[int] = None


@dataclass(frozen=True)
class Attachment:
    attachment_id: int
    request_id: int
    file_name: str
    file_path: str
    content_type: Optional[str]
    attachment_type: AttachmentType
    uploaded_at: datetime


@dataclass(frozen=True)
class HistoryRow:
    entry: ApprovalHistoryEntry
    approver_name: str


@dataclass(frozen=True)
class RequestDetails:
    request: ExceptionRequest
    employee_name: str
    history: Tuple[HistoryRow, ...]
    attachments: Tuple[Attachment, ...]
