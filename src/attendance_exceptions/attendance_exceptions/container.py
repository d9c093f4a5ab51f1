from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .approvals.service import ApprovalRoutingService
from .attachments.storage import LocalAttachmentStore
from .common.datetime_utils import Clock, SystemClock
from .database.connection import DatabaseConnection, DBConfig
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.service import ExceptionRequestService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService
from .workflows.mysql_workflow_repository import MySQLWorkflowRepository
from .workflows.service import WorkflowService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    schedules_repo: MySQLScheduleRepository
    workflows_repo: MySQLWorkflowRepository
    requests_repo: MySQLRequestRepository

    schedule_service: ScheduleService
    workflow_service: WorkflowService
    routing_service: ApprovalRoutingService
    request_service: ExceptionRequestService


def build_container(*, db_config: dict, attachments_path: str | Path, clock: Optional[Clock] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    employees_repo = MySQLEmployeeRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    workflows_repo = MySQLWorkflowRepository(conn)
    requests_repo = MySQLRequestRepository(conn)

    schedule_service = ScheduleService(schedules_repo)
    workflow_service = WorkflowService(workflows_repo, employees_repo)
    routing_service = ApprovalRoutingService(employees_repo)
    request_service = ExceptionRequestService(
        requests_repo,
        employees_repo,
        workflows_repo,
        schedule_service,
        routing_service,
        LocalAttachmentStore(attachments_path),
        clock=clock or SystemClock(),
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        schedules_repo=schedules_repo,
        workflows_repo=workflows_repo,
        requests_repo=requests_repo,
        schedule_service=schedule_service,
        workflow_service=workflow_service,
        routing_service=routing_service,
        request_service=request_service,
    )
