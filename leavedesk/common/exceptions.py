"""Custom exceptions and RFC 7807 Problem Detail error handlers.

Corrective failures (validation, authorization, not-found, conflict) carry
``retryable = False``; backend failures (store or object-store errors and
timeouts) carry ``retryable = True`` so clients can offer a retry.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

BASE_ERROR_URI = "https://leavedesk.local/errors"
PROBLEM_JSON = "application/problem+json"

logger = logging.getLogger(__name__)


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all application exceptions → RFC 7807 JSON.

    Subclasses fix ``status_code``, ``error_type`` and ``title``; instances
    carry the human-readable ``detail`` and optional per-field ``errors``.
    """

    status_code: int = 500
    error_type: str = "internal-error"
    title: str = "Internal Error"
    retryable: bool = False

    def __init__(
        self,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
        *,
        title: Optional[str] = None,
    ) -> None:
        self.detail = detail
        self.errors = errors
        if title is not None:
            self.title = title
        super().__init__(detail)

    def to_problem(self, instance: str) -> dict[str, Any]:
        body: dict[str, Any] = {
            "type": f"{BASE_ERROR_URI}/{self.error_type}",
            "title": self.title,
            "status": self.status_code,
            "detail": self.detail,
            "instance": instance,
            "retryable": self.retryable,
        }
        if self.errors:
            body["errors"] = self.errors
        return body


class NotFoundException(AppException):
    """404 — entity not found."""

    status_code = 404
    error_type = "not-found"

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(
            f"{entity_type} with id '{entity_id}' does not exist.",
            title=f"{entity_type} Not Found",
        )


class ConflictError(AppException):
    """409 — entity still referenced, or a duplicate name."""

    status_code = 409
    error_type = "conflict"
    title = "Conflict"


class ForbiddenException(AppException):
    """403 — viewer lacks permission for the requested view or action."""

    status_code = 403
    error_type = "forbidden"
    title = "Forbidden"

    def __init__(
        self,
        detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(detail)


class ValidationException(AppException):
    """422 — input or business-rule validation failures, keyed by field."""

    status_code = 422
    error_type = "validation-error"
    title = "Validation Error"

    def __init__(
        self,
        errors: dict[str, list[str]],
        detail: Optional[str] = None,
    ) -> None:
        if detail is None:
            detail = (
                "; ".join(msg for msgs in errors.values() for msg in msgs)
                or "One or more fields failed validation."
            )
        super().__init__(detail, errors)


class BackendException(AppException):
    """503 — store, session or object-store call failed or timed out."""

    status_code = 503
    error_type = "backend-unavailable"
    title = "Backend Unavailable"
    retryable = True

    def __init__(self, detail: str = "A backend service is unavailable. Please retry.") -> None:
        super().__init__(detail)


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_problem(str(request.url.path)),
        media_type=PROBLEM_JSON,
    )


async def _handle_backend_failure(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Backend call failed on %s: %r", request.url.path, exc)
    return await _handle_app_exception(request, BackendException())


def _field_name(loc: tuple) -> str:
    # ("body", "reason") -> "reason"; ("query", "page") -> "page"
    if len(loc) > 1:
        return ".".join(str(p) for p in loc[1:])
    return str(loc[0]) if loc else "unknown"


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        field_errors.setdefault(_field_name(tuple(err.get("loc", ()))), []).append(
            err.get("msg", "Invalid value")
        )
    problem = ValidationException(field_errors, detail="Request validation failed.")
    return await _handle_app_exception(request, problem)


# ── Registration helper (called from main.py) ──────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(AppException, _handle_app_exception)          # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _handle_backend_failure)
    app.add_exception_handler(asyncio.TimeoutError, _handle_backend_failure)
