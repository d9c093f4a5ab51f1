from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, FrozenSet

from .enums import Role

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    """Permission names checked inline by the services."""

    REQUESTS_CREATE = "ExceptionRequests.Create"
    REQUESTS_APPROVE = "ExceptionRequests.Approve"
    REQUESTS_APPROVE_AS_DOCTOR = "ExceptionRequests.ApproveAsDoctor"
    REQUESTS_VIEW_ALL = "ExceptionRequests.ViewAll"
    REQUESTS_VIEW_OWN = "ExceptionRequests.ViewOwn"
    REQUESTS_DELETE = "ExceptionRequests.Delete"

    WORKFLOWS_CREATE = "Workflows.Create"
    WORKFLOWS_EDIT = "Workflows.Edit"
    WORKFLOWS_MANAGE_STEPS = "Workflows.ManageSteps"


ROLE_CAPABILITIES: Dict[Role, FrozenSet[Capability]] = {
    Role.ADMIN: frozenset(Capability),
    Role.HR_MANAGER: frozenset(
        {
            Capability.REQUESTS_VIEW_ALL,
            Capability.REQUESTS_APPROVE,
            Capability.WORKFLOWS_CREATE,
            Capability.WORKFLOWS_EDIT,
            Capability.WORKFLOWS_MANAGE_STEPS,
        }
    ),
    Role.MANAGER: frozenset({Capability.REQUESTS_VIEW_OWN, Capability.REQUESTS_APPROVE}),
    Role.DOCTOR: frozenset({Capability.REQUESTS_APPROVE, Capability.REQUESTS_APPROVE_AS_DOCTOR}),
    Role.EMPLOYEE: frozenset({Capability.REQUESTS_CREATE, Capability.REQUESTS_VIEW_OWN}),
}


def capabilities_for(roles) -> FrozenSet[Capability]:
    out: set[Capability] = set()
    for role in roles:
        try:
            known = Role(role)
        except ValueError:
            logger.warning("Ignoring unknown role %r", role)
            continue
        out |= ROLE_CAPABILITIES.get(known, frozenset())
    return frozenset(out)
