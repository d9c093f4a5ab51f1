from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles granted to an authenticated principal."""

    ADMIN = "admin"
    HR_MANAGER = "hr_manager"
    MANAGER = "manager"
    DOCTOR = "doctor"
    EMPLOYEE = "employee"


class ApproverType(str, Enum):
    """Who may act on a workflow step."""

    DOCTOR = "DOCTOR"
    MANAGER = "MANAGER"
    HR_MANAGER = "HR_MANAGER"


class ExceptionRequestType(str, Enum):
    SICK = "SICK"
    REMOTE_WORK = "REMOTE_WORK"
    PERSONAL = "PERSONAL"
    OTHER = "OTHER"


class ExceptionRequestStatus(str, Enum):
    """Request lifecycle. Everything except PENDING is terminal."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class ApprovalAction(str, Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AttachmentType(str, Enum):
    MEDICAL_REPORT = "MEDICAL_REPORT"
    SUPPORTING_DOCUMENT = "SUPPORTING_DOCUMENT"
    OTHER = "OTHER"
