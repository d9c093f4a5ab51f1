from __future__ import annotations

from datetime import datetime

import pytest

from helpers import (
    DOCTOR_USER,
    EMPLOYEE,
    HR_EMPLOYEE,
    MANAGER_EMPLOYEE,
    MANAGER_USER,
    MONDAY,
    NOW,
    THURSDAY,
    actor,
)
from src.attendance_exceptions.attendance_exceptions.approvals.service import ApprovalRoutingService
from src.attendance_exceptions.attendance_exceptions.core.enums import (
    ApprovalAction,
    ApproverType,
    AttachmentType,
    ExceptionRequestStatus,
    ExceptionRequestType,
)
from src.attendance_exceptions.attendance_exceptions.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from src.attendance_exceptions.attendance_exceptions.requests import state_machine
from src.attendance_exceptions.attendance_exceptions.workflows.model import NewWorkflowStep


def _create(svc, who, request_type=ExceptionRequestType.REMOTE_WORK, on=MONDAY, reason="Internet outage at office"):
    return svc.create(actor=who, exception_date=on, reason=reason, request_type=request_type)


def test_sick_request_walks_every_step_to_approval(request_service, clock, employee, doctor, manager, hr):
    req = _create(request_service, employee, ExceptionRequestType.SICK, reason="Flu")
    assert req.status == ExceptionRequestStatus.PENDING
    assert req.current_step_order == 1
    assert req.employee_id == EMPLOYEE

    clock.advance_to(datetime(2026, 10, 15, 10, 0))
    req = request_service.record_action(actor=doctor, request_id=req.request_id, action=ApprovalAction.APPROVED)
    assert req.current_step_order == 2

    clock.advance_to(datetime(2026, 10, 15, 11, 0))
    req = request_service.record_action(actor=manager, request_id=req.request_id, action=ApprovalAction.APPROVED)
    assert req.current_step_order == 3

    clock.advance_to(datetime(2026, 10, 15, 12, 0))
    req = request_service.record_action(
        actor=hr, request_id=req.request_id, action=ApprovalAction.APPROVED, notes=" fine "
    )
    assert req.status == ExceptionRequestStatus.APPROVED

    details = request_service.get_details(req.request_id)
    assert details.employee_name == "Evan Employee"
    assert [(h.entry.step_order, h.approver_name) for h in details.history] == [
        (1, "Doctor"),
        (2, "Mark Manager"),
        (3, "Hannah HR"),
    ]
    assert details.history[0].entry.approver_employee_id is None
    assert details.history[2].entry.notes == "fine"
    assert [h.entry.action_at.hour for h in details.history] == [10, 11, 12]


def test_non_sick_request_skips_doctor_and_rejection_keeps_step(request_service, employee, manager, hr):
    req = _create(request_service, employee, ExceptionRequestType.PERSONAL)
    assert req.current_step_order == 2

    req = request_service.record_action(actor=manager, request_id=req.request_id, action=ApprovalAction.APPROVED)
    assert req.current_step_order == 3

    req = request_service.record_action(
        actor=hr, request_id=req.request_id, action=ApprovalAction.REJECTED, notes="Not justified"
    )
    assert req.status == ExceptionRequestStatus.REJECTED
    assert req.current_step_order == 3

    with pytest.raises(InvalidStateError):
        request_service.record_action(actor=hr, request_id=req.request_id, action=ApprovalAction.APPROVED)


def test_create_refuses_day_that_is_not_on_site(request_service, employee):
    with pytest.raises(InvalidStateError):
        _create(request_service, employee, on=THURSDAY)


def test_create_refuses_without_active_schedule(request_service, schedules_repo, employee):
    schedules_repo.assignments.clear()
    with pytest.raises(InvalidStateError):
        _create(request_service, employee)


def test_create_refuses_without_workflow(request_service):
    # Mark has an employee record but no workflow.
    with pytest.raises(InvalidStateError):
        _create(request_service, actor(MANAGER_USER, "employee"))


def test_create_needs_employee_record_and_permission(request_service, manager):
    with pytest.raises(NotFoundError):
        _create(request_service, actor(99, "employee"))
    with pytest.raises(AuthorizationError):
        _create(request_service, manager)


@pytest.mark.parametrize("reason", ["", "   ", "x" * 2001])
def test_create_validates_reason(request_service, employee, reason):
    with pytest.raises(ValidationError):
        _create(request_service, employee, reason=reason)


def test_only_designated_approver_may_act(request_service, employee, doctor, hr, admin):
    req = _create(request_service, employee)
    for intruder in (hr, admin, doctor):
        with pytest.raises(AuthorizationError):
            request_service.record_action(actor=intruder, request_id=req.request_id, action=ApprovalAction.APPROVED)
    assert request_service.get(req.request_id).current_step_order == 2


def test_doctor_step_needs_doctor_capability(request_service, employee, manager):
    req = _create(request_service, employee, ExceptionRequestType.SICK)
    with pytest.raises(AuthorizationError):
        request_service.record_action(actor=manager, request_id=req.request_id, action=ApprovalAction.APPROVED)


def test_repeated_action_on_same_step_fails(request_service, employee, manager):
    req = _create(request_service, employee)
    request_service.record_action(
        actor=manager, request_id=req.request_id, action=ApprovalAction.APPROVED, step_order=2
    )
    with pytest.raises(InvalidStateError):
        request_service.record_action(
            actor=manager, request_id=req.request_id, action=ApprovalAction.APPROVED, step_order=2
        )
    with pytest.raises(AuthorizationError):
        request_service.record_action(actor=manager, request_id=req.request_id, action=ApprovalAction.APPROVED)


def test_stale_read_raises_conflict_and_writes_no_history(
    request_service, requests_repo, monkeypatch, employee, manager
):
    stale = _create(request_service, employee)
    request_service.record_action(actor=manager, request_id=stale.request_id, action=ApprovalAction.APPROVED)
    assert len(requests_repo.history) == 1

    # A second approval that read the request before the first one landed.
    monkeypatch.setattr(requests_repo, "get_by_id", lambda request_id: stale)
    with pytest.raises(ConflictError):
        request_service.record_action(actor=manager, request_id=stale.request_id, action=ApprovalAction.APPROVED)
    assert len(requests_repo.history) == 1


def test_save_transition_refuses_old_version(requests_repo, request_service, employee, manager):
    stale = _create(request_service, employee)
    request_service.record_action(actor=manager, request_id=stale.request_id, action=ApprovalAction.APPROVED)

    transition = state_machine.apply_action(
        stale,
        ApprovalRoutingService.current_step(stale),
        ApprovalAction.REJECTED,
        approver_employee_id=MANAGER_EMPLOYEE,
        notes=None,
        now=NOW,
    )
    assert not requests_repo.save_transition(
        request_id=stale.request_id, expected_version=stale.version, transition=transition
    )
    assert [h.action for h in requests_repo.history] == [ApprovalAction.APPROVED]
    assert requests_repo.get_by_id(stale.request_id).current_step_order == 3


def test_notes_are_limited(request_service, employee, manager):
    req = _create(request_service, employee)
    with pytest.raises(ValidationError):
        request_service.record_action(
            actor=manager, request_id=req.request_id, action=ApprovalAction.REJECTED, notes="n" * 2001
        )


def test_unknown_request_is_not_found(request_service, manager):
    with pytest.raises(NotFoundError):
        request_service.record_action(actor=manager, request_id=404, action=ApprovalAction.APPROVED)
    with pytest.raises(NotFoundError):
        request_service.get_details(404)


def test_routing_uses_steps_captured_at_creation(request_service, workflow_service, employee, manager, hr):
    req = _create(request_service, employee)
    workflow_service.update_workflow(
        actor=hr,
        workflow_id=1,
        name="HR only",
        description=None,
        steps=[NewWorkflowStep(1, ApproverType.HR_MANAGER, HR_EMPLOYEE)],
    )
    req = request_service.record_action(actor=manager, request_id=req.request_id, action=ApprovalAction.APPROVED)
    assert req.current_step_order == 3
    assert [s.approver_employee_id for s in req.steps] == [None, MANAGER_EMPLOYEE, HR_EMPLOYEE]


def test_pending_approvals_are_filtered_per_approver(request_service, employee, doctor, manager, hr):
    sick = _create(request_service, employee, ExceptionRequestType.SICK)
    remote = _create(request_service, employee, ExceptionRequestType.REMOTE_WORK)

    assert [r.request_id for r in request_service.list_actionable(actor=doctor)] == [sick.request_id]
    assert [r.request_id for r in request_service.list_actionable(actor=manager)] == [remote.request_id]
    assert [r.request_id for r in request_service.list_actionable(actor=hr)] == [sick.request_id, remote.request_id]


def test_pending_approvals_need_approve_permission(request_service, employee):
    with pytest.raises(AuthorizationError):
        request_service.list_actionable(actor=employee)


def test_list_mine_and_list_all(request_service, employee, hr):
    first = _create(request_service, employee)
    second = _create(request_service, employee, ExceptionRequestType.OTHER)
    other = _create(request_service, actor(6, "employee"))

    assert [r.request_id for r in request_service.list_mine(actor=employee)] == [second.request_id, first.request_id]

    page = request_service.list_all(actor=hr, offset=1, limit=1)
    assert page.total == 3
    assert [r.request_id for r in page.items] == [second.request_id]
    assert other.employee_id == 6

    with pytest.raises(AuthorizationError):
        request_service.list_all(actor=employee)
    with pytest.raises(ValidationError):
        request_service.list_all(actor=hr, offset=-1)


def test_cancel_pending_request(request_service, employee, admin, manager):
    req = _create(request_service, employee)
    with pytest.raises(AuthorizationError):
        request_service.cancel(actor=employee, request_id=req.request_id)

    cancelled = request_service.cancel(actor=admin, request_id=req.request_id)
    assert cancelled.status == ExceptionRequestStatus.CANCELLED
    assert cancelled.version == 1

    with pytest.raises(InvalidStateError):
        request_service.cancel(actor=admin, request_id=req.request_id)
    with pytest.raises(InvalidStateError):
        request_service.record_action(actor=manager, request_id=req.request_id, action=ApprovalAction.APPROVED)


def test_attachment_upload_and_download(request_service, tmp_path, employee, manager):
    req = _create(request_service, employee, ExceptionRequestType.SICK)
    attachment_id = request_service.upload_attachment(
        actor=employee,
        request_id=req.request_id,
        file_name="../medical report.pdf",
        data=b"%PDF-1.4",
        content_type="application/pdf",
        attachment_type=AttachmentType.MEDICAL_REPORT,
    )
    stored = list((tmp_path / "attachments" / str(req.request_id)).iterdir())
    assert len(stored) == 1
    assert stored[0].name.endswith("_medical_report.pdf")
    assert stored[0].read_bytes() == b"%PDF-1.4"

    for reader in (employee, manager):
        f = request_service.download_attachment(actor=reader, attachment_id=attachment_id)
        assert f.file_name == "medical_report.pdf"
        assert f.content_type == "application/pdf"
        assert f.data == b"%PDF-1.4"

    details = request_service.get_details(req.request_id)
    assert [a.attachment_type for a in details.attachments] == [AttachmentType.MEDICAL_REPORT]


def test_attachment_access_is_limited_to_owner_and_approvers(request_service, employee):
    req = _create(request_service, employee)
    attachment_id = request_service.upload_attachment(
        actor=employee, request_id=req.request_id, file_name="note.txt", data=b"hello"
    )
    stranger = actor(6, "employee")
    with pytest.raises(AuthorizationError):
        request_service.download_attachment(actor=stranger, attachment_id=attachment_id)
    with pytest.raises(AuthorizationError):
        request_service.upload_attachment(actor=stranger, request_id=req.request_id, file_name="x.txt", data=b"x")


def test_attachment_validation(request_service, employee):
    req = _create(request_service, employee)
    with pytest.raises(ValidationError):
        request_service.upload_attachment(actor=employee, request_id=req.request_id, file_name="a.txt", data=b"")
    with pytest.raises(ValidationError):
        request_service.upload_attachment(actor=employee, request_id=req.request_id, file_name="../", data=b"x")
    with pytest.raises(NotFoundError):
        request_service.download_attachment(actor=employee, attachment_id=99)


def test_doctor_without_employee_record_is_recorded_anonymously(request_service, requests_repo, employee):
    req = _create(request_service, employee, ExceptionRequestType.SICK)
    request_service.record_action(
        actor=actor(DOCTOR_USER, "doctor"), request_id=req.request_id, action=ApprovalAction.APPROVED
    )
    assert requests_repo.history[0].approver_employee_id is None
    assert requests_repo.history[0].workflow_step_id == 11


def test_same_name_uploads_keep_their_own_bytes(request_service, employee):
    req = _create(request_service, employee, ExceptionRequestType.SICK)
    first = request_service.upload_attachment(
        actor=employee, request_id=req.request_id, file_name="report.pdf", data=b"FIRST"
    )
    second = request_service.upload_attachment(
        actor=employee, request_id=req.request_id, file_name="report.pdf", data=b"SECOND"
    )

    assert request_service.download_attachment(actor=employee, attachment_id=first).data == b"FIRST"
    assert request_service.download_attachment(actor=employee, attachment_id=second).data == b"SECOND"
    assert request_service.download_attachment(actor=employee, attachment_id=first).file_name == "report.pdf"


def test_failed_attachment_row_removes_stored_file(request_service, requests_repo, tmp_path, monkeypatch, employee):
    req = _create(request_service, employee)

    def broken_insert(**kwargs):
        raise RuntimeError("insert failed")

    monkeypatch.setattr(requests_repo, "add_attachment", broken_insert)
    with pytest.raises(RuntimeError):
        request_service.upload_attachment(actor=employee, request_id=req.request_id, file_name="a.txt", data=b"x")
    assert list((tmp_path / "attachments" / str(req.request_id)).iterdir()) == []


def test_attachment_upload_time_comes_from_clock(request_service, clock, employee):
    req = _create(request_service, employee)
    clock.advance_to(datetime(2026, 10, 16, 14, 30))
    request_service.upload_attachment(actor=employee, request_id=req.request_id, file_name="a.txt", data=b"x")

    details = request_service.get_details(req.request_id)
    assert [a.uploaded_at for a in details.attachments] == [datetime(2026, 10, 16, 14, 30)]


def test_non_text_notes_are_rejected(request_service, employee, manager):
    req = _create(request_service, employee)
    with pytest.raises(ValidationError):
        request_service.record_action(actor=manager, request_id=req.request_id, action=ApprovalAction.APPROVED, notes=5)
    assert request_service.get(req.request_id).current_step_order == 2
