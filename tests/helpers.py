"""In-memory repositories and shared data for the service and controller tests."""
from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

from src.attendance_exceptions.attendance_exceptions.core.actor import Actor
from src.attendance_exceptions.attendance_exceptions.core.enums import ApproverType, ExceptionRequestStatus
from src.attendance_exceptions.attendance_exceptions.requests.model import Attachment, ExceptionRequest
from src.attendance_exceptions.attendance_exceptions.schedules.model import Schedule, ScheduleDay
from src.attendance_exceptions.attendance_exceptions.workflows.model import Workflow, WorkflowStep

MONDAY = date(2026, 10, 19)
THURSDAY = date(2026, 10, 22)
NOW = datetime(2026, 10, 15, 9, 0, 0)

ADMIN_USER, HR_USER, MANAGER_USER, DOCTOR_USER, EMPLOYEE_USER, OTHER_USER = 1, 2, 3, 40, 5, 6
HR_EMPLOYEE, MANAGER_EMPLOYEE, EMPLOYEE, OTHER_EMPLOYEE = 2, 3, 5, 6


class FakeEmployeesRepo:
    def __init__(self, employees):
        self._by_id = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id):
        return self._by_id.get(int(employee_id))

    def get_by_user_id(self, user_id):
        return next((e for e in self._by_id.values() if e.user_id == int(user_id)), None)

    def exists(self, employee_id):
        return int(employee_id) in self._by_id

    def assign_workflow(self, *, employee_id, workflow_id):
        emp = self._by_id.get(int(employee_id))
        if emp is None:
            return False
        self._by_id[emp.employee_id] = replace(emp, workflow_id=workflow_id)
        return True


class FakeSchedulesRepo:
    def __init__(self, assignments=(), schedules=()):
        self.assignments = list(assignments)
        self.schedules = {s.schedule_id: s for s in schedules}

    def list_active_assignments(self, *, employee_id, on_date):
        return [a for a in self.assignments if a.employee_id == int(employee_id) and a.covers(on_date)]

    def get_schedule(self, *, schedule_id):
        return self.schedules.get(int(schedule_id))


class FakeWorkflowsRepo:
    def __init__(self, workflows=()):
        self._by_id = {w.workflow_id: w for w in workflows}
        self._next_workflow_id = max(self._by_id, default=0) + 1
        self._next_step_id = 100

    def _build_steps(self, steps):
        out = []
        for s in steps:
            self._next_step_id += 1
            out.append(WorkflowStep(self._next_step_id, s.step_order, s.approver_type, s.approver_employee_id))
        return tuple(out)

    def get_by_id(self, workflow_id):
        return self._by_id.get(int(workflow_id))

    def list_active(self):
        return sorted((w for w in self._by_id.values() if w.is_active), key=lambda w: w.name)

    def create(self, *, name, description, steps):
        wid = self._next_workflow_id
        self._next_workflow_id += 1
        self._by_id[wid] = Workflow(wid, name, description, True, self._build_steps(steps))
        return wid

    def replace(self, *, workflow_id, name, description, steps):
        wf = self._by_id.get(int(workflow_id))
        if wf is None:
            return False
        self._by_id[wf.workflow_id] = replace(wf, name=name, description=description, steps=self._build_steps(steps))
        return True

    def set_active(self, *, workflow_id, is_active):
        wf = self._by_id.get(int(workflow_id))
        if wf is None:
            return False
        self._by_id[wf.workflow_id] = replace(wf, is_active=is_active)
        return True


class FakeRequestsRepo:
    def __init__(self):
        self._next_id = 1
        self._requests = {}
        self.history = []
        self.attachments = {}

    def create(self, new):
        rid = self._next_id
        self._next_id += 1
        self._requests[rid] = ExceptionRequest(
            request_id=rid,
            employee_id=new.employee_id,
            exception_date=new.exception_date,
            request_type=new.request_type,
            reason=new.reason,
            status=ExceptionRequestStatus.PENDING,
            current_step_order=new.current_step_order,
            workflow_id=new.workflow_id,
            created_at=new.created_at,
            steps=tuple(new.steps),
            version=0,
        )
        return rid

    def get_by_id(self, request_id):
        return self._requests.get(int(request_id))

    def list_by_employee(self, *, employee_id, limit=200):
        mine = [r for r in self._requests.values() if r.employee_id == int(employee_id)]
        return sorted(mine, key=lambda r: (r.created_at, r.request_id), reverse=True)[:limit]

    def list_pending(self):
        pending = [r for r in self._requests.values() if r.is_pending]
        return sorted(pending, key=lambda r: (r.created_at, r.request_id))

    def list_all(self, *, offset=0, limit=200):
        rows = sorted(self._requests.values(), key=lambda r: (r.created_at, r.request_id), reverse=True)
        return rows[offset:offset + limit]

    def count_all(self):
        return len(self._requests)

    def save_transition(self, *, request_id, expected_version, transition):
        req = self._requests.get(int(request_id))
        if req is None or req.version != expected_version or not req.is_pending:
            return False
        self._requests[req.request_id] = replace(
            req,
            status=transition.status,
            current_step_order=transition.current_step_order,
            version=req.version + 1,
        )
        if transition.history is not None:
            self.history.append(replace(transition.history, history_id=len(self.history) + 1))
        return True

    def list_history(self, *, request_id):
        return [h for h in self.history if h.request_id == int(request_id)]

    def add_attachment(self, *, request_id, file_name, file_path, content_type, attachment_type, uploaded_at):
        aid = len(self.attachments) + 1
        self.attachments[aid] = Attachment(
            aid, int(request_id), file_name, file_path, content_type, attachment_type, uploaded_at
        )
        return aid

    def get_attachment(self, *, attachment_id):
        return self.attachments.get(int(attachment_id))

    def list_attachments(self, *, request_id):
        return [a for a in self.attachments.values() if a.request_id == int(request_id)]


def standard_workflow() -> Workflow:
    return Workflow(
        workflow_id=1,
        name="Standard",
        steps=(
            WorkflowStep(11, 1, ApproverType.DOCTOR, None),
            WorkflowStep(12, 2, ApproverType.MANAGER, MANAGER_EMPLOYEE),
            WorkflowStep(13, 3, ApproverType.HR_MANAGER, HR_EMPLOYEE),
        ),
    )


def hybrid_schedule() -> Schedule:
    # On site Monday to Wednesday.
    return Schedule(1, "Hybrid", tuple(ScheduleDay(d, d < 3) for d in range(7)))


def actor(user_id, *roles) -> Actor:
    return Actor.from_roles(user_id, roles)


