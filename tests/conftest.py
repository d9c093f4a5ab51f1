from __future__ import annotations

from datetime import date

import pytest

from helpers import (
    ADMIN_USER,
    DOCTOR_USER,
    EMPLOYEE,
    EMPLOYEE_USER,
    HR_EMPLOYEE,
    HR_USER,
    MANAGER_EMPLOYEE,
    MANAGER_USER,
    NOW,
    OTHER_EMPLOYEE,
    OTHER_USER,
    FakeEmployeesRepo,
    FakeRequestsRepo,
    FakeSchedulesRepo,
    FakeWorkflowsRepo,
    actor,
    hybrid_schedule,
    standard_workflow,
)
from src.attendance_exceptions.attendance_exceptions.approvals.service import ApprovalRoutingService
from src.attendance_exceptions.attendance_exceptions.attachments.storage import LocalAttachmentStore
from src.attendance_exceptions.attendance_exceptions.common.datetime_utils import FixedClock
from src.attendance_exceptions.attendance_exceptions.employees.model import Employee
from src.attendance_exceptions.attendance_exceptions.requests.service import ExceptionRequestService
from src.attendance_exceptions.attendance_exceptions.schedules.model import ScheduleAssignment
from src.attendance_exceptions.attendance_exceptions.schedules.service import ScheduleService
from src.attendance_exceptions.attendance_exceptions.workflows.service import WorkflowService


@pytest.fixture
def employees_repo():
    return FakeEmployeesRepo(
        [
            Employee(1, ADMIN_USER, "Alice Admin"),
            Employee(HR_EMPLOYEE, HR_USER, "Hannah HR"),
            Employee(MANAGER_EMPLOYEE, MANAGER_USER, "Mark Manager"),
            Employee(EMPLOYEE, EMPLOYEE_USER, "Evan Employee", workflow_id=1),
            Employee(OTHER_EMPLOYEE, OTHER_USER, "Olga Other", workflow_id=1),
        ]
    )


@pytest.fixture
def schedules_repo():
    return FakeSchedulesRepo(
        assignments=[
            ScheduleAssignment(1, EMPLOYEE, 1, date(2024, 1, 1)),
            ScheduleAssignment(2, OTHER_EMPLOYEE, 1, date(2024, 1, 1)),
        ],
        schedules=[hybrid_schedule()],
    )


@pytest.fixture
def workflows_repo():
    return FakeWorkflowsRepo([standard_workflow()])


@pytest.fixture
def requests_repo():
    return FakeRequestsRepo()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def routing_service(employees_repo):
    return ApprovalRoutingService(employees_repo)


@pytest.fixture
def workflow_service(workflows_repo, employees_repo):
    return WorkflowService(workflows_repo, employees_repo)


@pytest.fixture
def request_service(tmp_path, requests_repo, employees_repo, workflows_repo, schedules_repo, routing_service, clock):
    return ExceptionRequestService(
        requests_repo,
        employees_repo,
        workflows_repo,
        ScheduleService(schedules_repo),
        routing_service,
        LocalAttachmentStore(tmp_path),
        clock=clock,
    )


@pytest.fixture
def employee():
    return actor(EMPLOYEE_USER, "employee")


@pytest.fixture
def doctor():
    return actor(DOCTOR_USER, "doctor")


@pytest.fixture
def manager():
    return actor(MANAGER_USER, "manager")


@pytest.fixture
def hr():
    return actor(HR_USER, "hr_manager")


@pytest.fixture
def admin():
    return actor(ADMIN_USER, "admin")
