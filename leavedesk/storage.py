"""Leave document storage — validation and the object store behind uploads."""

from __future__ import annotations

import asyncio
import logging
import os
import time
import uuid
from typing import Optional

from leavedesk.common.constants import ALLOWED_DOCUMENT_TYPES, DOCUMENT_BUCKET
from leavedesk.common.exceptions import BackendException, ValidationException
from leavedesk.config import settings

logger = logging.getLogger(__name__)


def validate_document(content_type: Optional[str], size: int) -> str:
    """Check type and size before upload; return the file extension."""
    errors: dict[str, list[str]] = {}
    ext = ALLOWED_DOCUMENT_TYPES.get(content_type or "")
    if ext is None:
        errors["file"] = [
            f"File type '{content_type}' not allowed. Accepted: PDF, DOC, DOCX."
        ]
    if size > settings.max_upload_bytes:
        errors.setdefault("file", []).append(
            f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE_MB} MB."
        )
    if size == 0:
        errors.setdefault("file", []).append("File is empty.")
    if errors:
        raise ValidationException(errors)
    return ext


def document_key(employee_id: uuid.UUID, ext: str, *, now_ms: Optional[int] = None) -> str:
    """Object key ``<employee_id>/<epoch_ms><ext>`` inside the documents bucket."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{employee_id}/{now_ms}{ext}"


class DocumentStorage:
    """Object store interface. ``put`` returns a URL the request can reference."""

    async def put(self, key: str, contents: bytes, content_type: str) -> str:
        raise NotImplementedError


class LocalDocumentStorage(DocumentStorage):
    """Stores documents under ``<root>/leave-documents`` on the local disk."""

    def __init__(
        self,
        root: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
    ) -> None:
        self.root = root or settings.UPLOAD_DIR
        self.timeout = timeout if timeout is not None else settings.BACKEND_TIMEOUT_SECONDS

    def _write(self, key: str, contents: bytes) -> None:
        path = os.path.join(self.root, DOCUMENT_BUCKET, key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(contents)

    async def put(self, key: str, contents: bytes, content_type: str) -> str:
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self._write, key, contents),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error("Document upload timed out for %s", key)
            raise BackendException("Document upload timed out. Please retry.")
        except OSError as exc:
            logger.error("Document upload failed for %s: %s", key, exc)
            raise BackendException("Document upload failed. Please retry.")
        return f"/uploads/{DOCUMENT_BUCKET}/{key}"


def get_document_storage() -> DocumentStorage:
    """FastAPI dependency; overridden in tests."""
    return LocalDocumentStorage()
