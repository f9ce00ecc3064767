"""Document validation and local object store."""

from __future__ import annotations

import asyncio
import os
import uuid

import pytest

from leavedesk.common.exceptions import BackendException, ValidationException
from leavedesk.storage import LocalDocumentStorage, document_key, validate_document

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class TestValidateDocument:

    @pytest.mark.parametrize(
        "content_type,ext",
        [(PDF, ".pdf"), ("application/msword", ".doc"), (DOCX, ".docx")],
    )
    def test_allowed_types(self, content_type, ext):
        assert validate_document(content_type, 1024) == ext

    @pytest.mark.parametrize("content_type", ["image/png", "text/plain", None])
    def test_disallowed_type(self, content_type):
        with pytest.raises(ValidationException):
            validate_document(content_type, 1024)

    def test_exactly_five_megabytes_allowed(self):
        assert validate_document(PDF, 5 * 1024 * 1024) == ".pdf"

    def test_over_five_megabytes_rejected(self):
        with pytest.raises(ValidationException) as exc_info:
            validate_document(PDF, 5 * 1024 * 1024 + 1)
        assert "too large" in exc_info.value.detail

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationException):
            validate_document(PDF, 0)


def test_document_key_layout():
    employee_id = uuid.uuid4()
    assert document_key(employee_id, ".pdf", now_ms=1700000000000) == f"{employee_id}/1700000000000.pdf"


class TestLocalDocumentStorage:

    async def test_put_writes_file_and_returns_url(self, tmp_path):
        storage = LocalDocumentStorage(root=str(tmp_path))

        url = await storage.put("abc/1.pdf", b"%PDF-1.4", PDF)

        assert url == "/uploads/leave-documents/abc/1.pdf"
        with open(os.path.join(tmp_path, "leave-documents", "abc", "1.pdf"), "rb") as f:
            assert f.read() == b"%PDF-1.4"

    async def test_write_failure_is_backend_error(self, tmp_path):
        blocker = tmp_path / "blocked"
        blocker.write_text("not a directory")
        storage = LocalDocumentStorage(root=str(blocker))

        with pytest.raises(BackendException) as exc_info:
            await storage.put("abc/1.pdf", b"data", PDF)
        assert exc_info.value.retryable is True

    async def test_timeout_is_backend_error(self, tmp_path, monkeypatch):
        storage = LocalDocumentStorage(root=str(tmp_path), timeout=0.01)

        async def _slow_to_thread(func, *args):
            await asyncio.sleep(1)

        monkeypatch.setattr("leavedesk.storage.asyncio.to_thread", _slow_to_thread)

        with pytest.raises(BackendException):
            await storage.put("abc/1.pdf", b"data", PDF)
