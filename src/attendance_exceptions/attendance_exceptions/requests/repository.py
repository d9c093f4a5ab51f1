from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttachmentType
from .model import ApprovalHistoryEntry, Attachment, ExceptionRequest, NewExceptionRequest
from .state_machine import Transition


class RequestRepository(Protocol):
    def create(self, new: NewExceptionRequest) -> int:
        """Insert the request and its step snapshot in one transaction."""

        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[ExceptionRequest]:
        raise NotImplementedError

    def list_by_employee(self, *, employee_id: int, limit: int = 200) -> Sequence[ExceptionRequest]:
        """Newest first."""

        raise NotImplementedError

    def list_pending(self) -> Sequence[ExceptionRequest]:
        """All PENDING requests ordered by (created_at, request_id)."""

        raise NotImplementedError

    def list_all(self, *, offset: int = 0, limit: int = 200) -> Sequence[ExceptionRequest]:
        """Newest first."""

        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError

    def save_transition(self, *, request_id: int, expected_version: int, transition: Transition) -> bool:
        """Apply a transition if the stored version still equals ``expected_version``.

        The status/step update and the history insert are atomic. Returns
        False when another writer got there first.
        """

        raise NotImplementedError

    def list_history(self, *, request_id: int) -> Sequence[ApprovalHistoryEntry]:
        """Oldest first."""

        raise NotImplementedError

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
        raise NotImplementedError

    def get_attachment(self, *, attachment_id: int) -> Optional[Attachment]:
        raise NotImplementedError

    def list_attachments(self, *, request_id: int) -> Sequence[Attachment]:
        raise NotImplementedError
