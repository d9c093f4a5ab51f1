from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Protocol
from uuid import uuid4

from werkzeug.utils import secure_filename

from ..core.constants import ATTACHMENTS_DIR, MAX_FILE_NAME_LENGTH
from ..core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class AttachmentStore(Protocol):
    def save(self, *, request_id: int, file_name: str, data: bytes) -> str:
        """Store the bytes and return the relative path recorded on the attachment."""

        raise NotImplementedError

    def read(self, *, relative_path: str) -> bytes:
        raise NotImplementedError

    def delete(self, *, relative_path: str) -> None:
        raise NotImplementedError


def clean_file_name(file_name: str) -> str:
    name = secure_filename(file_name or "")
    if not name:
        raise ValidationError("File name is required")
    if len(name) > MAX_FILE_NAME_LENGTH:
        raise ValidationError(f"File name must be at most {MAX_FILE_NAME_LENGTH} characters")
    return name


class LocalAttachmentStore(AttachmentStore):
    """Files under ``<base_dir>/attachments/<request_id>/<token>_<file_name>``.

    The random token keeps two uploads with the same name apart.
    """

    def __init__(self, base_dir: str | Path):
        self._base_dir = Path(base_dir).resolve()

    def _resolve(self, relative_path: str) -> Path:
        path = (self._base_dir / PurePosixPath(relative_path)).resolve()
        if self._base_dir not in path.parents:
            raise NotFoundError(f"File not found: {relative_path}")
        return path

    def save(self, *, request_id: int, file_name: str, data: bytes) -> str:
        relative_path = f"{ATTACHMENTS_DIR}/{int(request_id)}/{uuid4().hex}_{clean_file_name(file_name)}"
        path = self._resolve(relative_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info("Stored attachment %s (%d bytes)", relative_path, len(data))
        return relative_path

    def read(self, *, relative_path: str) -> bytes:
        path = self._resolve(relative_path)
        if not path.is_file():
            logger.warning("Attachment file missing: %s", path)
            raise NotFoundError(f"File not found: {relative_path}")
        return path.read_bytes()

    def delete(self, *, relative_path: str) -> None:
        path = self._resolve(relative_path)
        path.unlink(missing_ok=True)
        logger.info("Removed attachment file %s", relative_path)
