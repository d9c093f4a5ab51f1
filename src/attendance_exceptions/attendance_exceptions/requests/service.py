from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from ..approvals.service import ApprovalRoutingService
from ..attachments.storage import AttachmentStore, clean_file_name
from ..common.datetime_utils import Clock, SystemClock
from ..common.validators import optional_text, require_max_length, require_non_empty
from ..core.actor import Actor
from ..core.constants import DEFAULT_LIST_LIMIT, DOCTOR_APPROVER_NAME, MAX_NOTES_LENGTH, MAX_REASON_LENGTH
from ..core.enums import ApprovalAction, AttachmentType, ExceptionRequestType
from ..core.exceptions import AuthorizationError, ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..core.permissions import Capability
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..schedules.service import ScheduleService
from ..workflows.repository import WorkflowRepository
from ..workflows.routing import resolve_initial_step
from . import state_machine
from .model import ExceptionRequest, HistoryRow, NewExceptionRequest, RequestDetails
from .repository import RequestRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestPage:
    total: int
    items: Sequence[ExceptionRequest]


@dataclass(frozen=True)
class DownloadedFile:
    file_name: str
    content_type: Optional[str]
    data: bytes


class ExceptionRequestService:
    """Use cases of the exception-request workflow.

    Every mutation re-reads the request, computes the transition and persists
    it with the version it was read at, so two racing approvals cannot both
    land.
    """

    def __init__(
        self,
        requests: RequestRepository,
        employees: EmployeeRepository,
        workflows: WorkflowRepository,
        schedules: ScheduleService,
        routing: ApprovalRoutingService,
        attachments: AttachmentStore,
        *,
        clock: Optional[Clock] = None,
    ):
        self._requests = requests
        self._employees = employees
        self._workflows = workflows
        self._schedules = schedules
        self._routing = routing
        self._attachments = attachments
        self._clock = clock or SystemClock()

    def _employee_for(self, actor: Actor) -> Employee:
        employee = self._employees.get_by_user_id(int(actor.user_id))
        if employee is None:
            raise NotFoundError("Employee record not found for current user")
        return employee

    def _load(self, request_id: int) -> ExceptionRequest:
        request = self._requests.get_by_id(int(request_id))
        if request is None:
            raise NotFoundError(f"Exception request {request_id} not found")
        return request

    def _persist(self, request: ExceptionRequest, transition: state_machine.Transition) -> ExceptionRequest:
        saved = self._requests.save_transition(
            request_id=request.request_id,
            expected_version=request.version,
            transition=transition,
        )
        if not saved:
            raise ConflictError(f"Exception request {request.request_id} was changed by someone else; reload and retry")
        return self._load(request.request_id)

    # -------- Create --------
    def create(
        self,
        *,
        actor: Actor,
        exception_date: date,
        reason: str,
        request_type: ExceptionRequestType,
    ) -> ExceptionRequest:
        actor.require(Capability.REQUESTS_CREATE)

        reason = require_non_empty(reason, "Reason")
        require_max_length(reason, "Reason", MAX_REASON_LENGTH)

        employee = self._employee_for(actor)
        if employee.workflow_id is None:
            raise InvalidStateError("No workflow assigned to this employee")

        try:
            on_site = self._schedules.is_on_site_day(employee_id=employee.employee_id, on_date=exception_date)
        except NotFoundError:
            raise InvalidStateError("You don't have an active schedule for this date")
        if not on_site:
            raise InvalidStateError("Exception requests can only be submitted for scheduled on-site days")

        workflow = self._workflows.get_by_id(employee.workflow_id)
        if workflow is None:
            raise NotFoundError(f"Workflow {employee.workflow_id} not found")

        initial = resolve_initial_step(workflow.steps, request_type, workflow_id=workflow.workflow_id)
        request_id = self._requests.create(
            NewExceptionRequest(
                employee_id=employee.employee_id,
                exception_date=exception_date,
                request_type=request_type,
                reason=reason,
                workflow_id=workflow.workflow_id,
                current_step_order=initial,
                steps=tuple(workflow.steps),
                created_at=self._clock.now(),
            )
        )
        logger.info(
            "Employee %s raised %s request %s for %s (workflow %s, step %s)",
            employee.employee_id,
            request_type.value,
            request_id,
            exception_date,
            workflow.workflow_id,
            initial,
        )
        return self._load(request_id)

    # -------- Reads --------
    def get(self, request_id: int) -> ExceptionRequest:
        return self._load(request_id)

    def get_details(self, request_id: int) -> RequestDetails:
        request = self._load(request_id)
        owner = self._employees.get_by_id(request.employee_id)

        names: dict[int, str] = {}
        rows: List[HistoryRow] = []
        for entry in self._requests.list_history(request_id=request.request_id):
            if entry.approver_employee_id is None:
                name = DOCTOR_APPROVER_NAME
            else:
                if entry.approver_employee_id not in names:
                    approver = self._employees.get_by_id(entry.approver_employee_id)
                    names[entry.approver_employee_id] = approver.name if approver else f"#{entry.approver_employee_id}"
                name = names[entry.approver_employee_id]
            rows.append(HistoryRow(entry=entry, approver_name=name))

        return RequestDetails(
            request=request,
            employee_name=owner.name if owner else f"#{request.employee_id}",
            history=tuple(rows),
            attachments=tuple(self._requests.list_attachments(request_id=request.request_id)),
        )

    def list_mine(self, *, actor: Actor, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[ExceptionRequest]:
        actor.require(Capability.REQUESTS_VIEW_OWN)
        employee = self._employee_for(actor)
        return self._requests.list_by_employee(employee_id=employee.employee_id, limit=int(limit))

    def list_all(self, *, actor: Actor, offset: int = 0, limit: int = DEFAULT_LIST_LIMIT) -> RequestPage:
        actor.require(Capability.REQUESTS_VIEW_ALL)
        if int(offset) < 0 or int(limit) <= 0:
            raise ValidationError("Invalid paging parameters")
        return RequestPage(
            total=self._requests.count_all(),
            items=self._requests.list_all(offset=int(offset), limit=int(limit)),
        )

    def list_actionable(self, *, actor: Actor) -> Sequence[ExceptionRequest]:
        actor.require(Capability.REQUESTS_APPROVE)
        return self._routing.filter_actionable(actor, self._requests.list_pending())

    # -------- Transitions --------
    def record_action(
        self,
        *,
        actor: Actor,
        request_id: int,
        action: ApprovalAction,
        notes: Optional[str] = None,
        step_order: Optional[int] = None,
    ) -> ExceptionRequest:
        """Approve or reject the request at its current step.

        ``step_order`` is the step the caller saw; when given and no longer
        current, the call fails instead of acting on a later step.
        """
        actor.require(Capability.REQUESTS_APPROVE)
        notes = require_max_length(optional_text(notes, "Notes"), "Notes", MAX_NOTES_LENGTH)

        request = self._load(request_id)
        if not request.is_pending:
            raise InvalidStateError("This request has already been processed")
        if step_order is not None and int(step_order) != request.current_step_order:
            raise InvalidStateError(
                f"Request {request.request_id} is at step {request.current_step_order}, not step {step_order}"
            )

        step = self._routing.current_step(request)
        actor_employee = self._routing.actor_employee(actor)
        if not self._routing.can_act(actor, request, actor_employee=actor_employee):
            raise AuthorizationError("You are not authorized to act on this request at this step")

        transition = state_machine.apply_action(
            request,
            step,
            action,
            approver_employee_id=self._routing.approver_identity(request, actor_employee=actor_employee),
            notes=notes,
            now=self._clock.now(),
        )
        updated = self._persist(request, transition)
        logger.info(
            "User %s %s request %s at step %s -> %s (step %s)",
            actor.user_id,
            action.value.lower(),
            request.request_id,
            step.step_order,
            updated.status.value,
            updated.current_step_order,
        )
        return updated

    def cancel(self, *, actor: Actor, request_id: int) -> ExceptionRequest:
        actor.require(Capability.REQUESTS_DELETE)
        request = self._load(request_id)
        updated = self._persist(request, state_machine.cancel(request))
        logger.info("User %s cancelled request %s", actor.user_id, request.request_id)
        return updated

    # -------- Attachments --------
    def _require_file_access(self, actor: Actor, request: ExceptionRequest) -> None:
        if actor.has(Capability.REQUESTS_APPROVE):
            return
        employee = self._employees.get_by_user_id(int(actor.user_id))
        if employee is None or employee.employee_id != request.employee_id:
            raise AuthorizationError("You do not have permission to access attachments of this request")

    def upload_attachment(
        self,
        *,
        actor: Actor,
        request_id: int,
        file_name: str,
        data: bytes,
        content_type: Optional[str] = None,
        attachment_type: AttachmentType = AttachmentType.OTHER,
    ) -> int:
        request = self._load(request_id)
        self._require_file_access(actor, request)
        if not data:
            raise ValidationError("File is empty")

        name = clean_file_name(file_name)
        relative_path = self._attachments.save(request_id=request.request_id, file_name=name, data=data)
        try:
            attachment_id = self._requests.add_attachment(
                request_id=request.request_id,
                file_name=name,
                file_path=relative_path,
                content_type=content_type,
                attachment_type=attachment_type,
                uploaded_at=self._clock.now(),
            )
        except Exception:
            # No row points at the file; remove it before propagating.
            self._attachments.delete(relative_path=relative_path)
            raise
        logger.info("User %s attached %s to request %s", actor.user_id, name, request.request_id)
        return attachment_id

    def download_attachment(self, *, actor: Actor, attachment_id: int) -> DownloadedFile:
        attachment = self._requests.get_attachment(attachment_id=int(attachment_id))
        if attachment is None:
            raise NotFoundError(f"Attachment {attachment_id} not found")
        self._require_file_access(actor, self._load(attachment.request_id))

        return DownloadedFile(
            file_name=attachment.file_name,
            content_type=attachment.content_type,
            data=self._attachments.read(relative_path=attachment.file_path),
        )
