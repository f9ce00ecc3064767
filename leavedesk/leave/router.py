"""Leave router — leave types, request lifecycle, documents, report export.

All endpoints require a session. Actions are gated by permission; row
visibility is enforced in the service.
"""


import logging
import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_viewer, require_permission
from leavedesk.auth.gate import Viewer
from leavedesk.common.constants import LeaveStatus
from leavedesk.common.pagination import PaginatedResponse, PaginationParams
from leavedesk.common.rate_limit import EXPORT_LIMIT, UPLOAD_LIMIT, limiter
from leavedesk.database import get_db
from leavedesk.leave.reports import render_csv, report_filename
from leavedesk.leave.schemas import (
    ConflictBrief,
    DocumentUploadOut,
    LeaveDecisionRequest,
    LeaveRequestCreate,
    LeaveRequestFilters,
    LeaveRequestOut,
    LeaveTypeCreate,
    LeaveTypeOut,
    LeaveTypeUpdate,
)
from leavedesk.leave.service import LeaveService, LeaveTypeService
from leavedesk.storage import DocumentStorage, document_key, get_document_storage, validate_document

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["leave"])


def _filters(
    department: Optional[str] = Query(None),
    status: Optional[LeaveStatus] = Query(None),
    date_from: Optional[date] = Query(None, description="start_date on or after"),
    date_to: Optional[date] = Query(None, description="end_date on or before"),
    employee_id: Optional[uuid.UUID] = Query(None),
    leave_type_id: Optional[uuid.UUID] = Query(None),
) -> LeaveRequestFilters:
    return LeaveRequestFilters(
        department=department or None,
        status=status,
        date_from=date_from,
        date_to=date_to,
        employee_id=employee_id,
        leave_type_id=leave_type_id,
    )


# ── Leave types ─────────────────────────────────────────────────────

@router.get("/types", response_model=list[LeaveTypeOut])
async def list_leave_types(
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    """Active leave types, for the request form."""
    return await LeaveTypeService.list_leave_types(db, active_only=True)


@router.get("/types/admin", response_model=list[LeaveTypeOut])
async def list_all_leave_types(
    viewer: Viewer = Depends(require_permission("leave_type:configure")),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveTypeService.list_leave_types(db, active_only=False)


@router.post("/types/admin", response_model=LeaveTypeOut, status_code=201)
async def create_leave_type(
    body: LeaveTypeCreate,
    viewer: Viewer = Depends(require_permission("leave_type:configure")),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveTypeService.create_leave_type(db, body)


@router.put("/types/{leave_type_id}", response_model=LeaveTypeOut)
async def update_leave_type(
    leave_type_id: uuid.UUID,
    body: LeaveTypeUpdate,
    viewer: Viewer = Depends(require_permission("leave_type:configure")),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveTypeService.update_leave_type(db, leave_type_id, body)


# ── POST /requests ──────────────────────────────────────────────────

@router.post("/requests", response_model=LeaveRequestOut, status_code=201)
async def apply_leave(
    body: LeaveRequestCreate,
    viewer: Viewer = Depends(require_permission("leave:request")),
    db: AsyncSession = Depends(get_db),
):
    """Submit a leave request. It starts pending."""
    return await LeaveService.apply_leave(db, viewer.id, body)


# ── GET /requests ───────────────────────────────────────────────────

@router.get("/requests", response_model=PaginatedResponse[LeaveRequestOut])
async def list_leave_requests(
    filters: LeaveRequestFilters = Depends(_filters),
    pagination: PaginationParams = Depends(),
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    """Requests visible to the caller: own, team, or all depending on role."""
    return await LeaveService.list_leave_requests(
        db, viewer, filters,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.get("/requests/{request_id}", response_model=LeaveRequestOut)
async def get_leave_request(
    request_id: uuid.UUID,
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.get_leave_request(db, request_id, viewer)


@router.get("/requests/{request_id}/conflicts", response_model=list[ConflictBrief])
async def get_conflicts(
    request_id: uuid.UUID,
    viewer: Viewer = Depends(require_permission("leave:decide")),
    db: AsyncSession = Depends(get_db),
):
    """Approved same-department leave overlapping this request. Advisory."""
    return await LeaveService.get_conflicts(db, request_id, viewer)


# ── PUT /requests/{id}/approve | reject | cancel ────────────────────

@router.put("/requests/{request_id}/approve", response_model=LeaveRequestOut)
async def approve_leave(
    request_id: uuid.UUID,
    body: Optional[LeaveDecisionRequest] = None,
    viewer: Viewer = Depends(require_permission("leave:decide")),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.approve_leave(
        db, request_id, viewer, comments=body.comments if body else None,
    )


@router.put("/requests/{request_id}/reject", response_model=LeaveRequestOut)
async def reject_leave(
    request_id: uuid.UUID,
    body: Optional[LeaveDecisionRequest] = None,
    viewer: Viewer = Depends(require_permission("leave:decide")),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.reject_leave(
        db, request_id, viewer, comments=body.comments if body else None,
    )


@router.put("/requests/{request_id}/cancel", response_model=LeaveRequestOut)
async def cancel_leave(
    request_id: uuid.UUID,
    viewer: Viewer = Depends(require_permission("leave:cancel_own")),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.cancel_leave(db, request_id, viewer)


# ── POST /documents ─────────────────────────────────────────────────

@router.post("/documents", response_model=DocumentUploadOut, status_code=201)
@limiter.limit(UPLOAD_LIMIT)
async def upload_document(
    request: Request,
    file: UploadFile = File(...),
    viewer: Viewer = Depends(require_permission("leave:request")),
    storage: DocumentStorage = Depends(get_document_storage),
):
    """Upload a supporting document. Returns the URL to put on a request."""
    contents = await file.read()
    ext = validate_document(file.content_type, len(contents))

    key = document_key(viewer.id, ext)
    url = await storage.put(key, contents, file.content_type)
    logger.info("Document %s uploaded by %s (%d bytes)", key, viewer.id, len(contents))
    return DocumentUploadOut(
        document_url=url,
        filename=key.rsplit("/", 1)[-1],
        content_type=file.content_type,
        size=len(contents),
    )


# ── GET /reports/export ─────────────────────────────────────────────

@router.get("/reports/export")
@limiter.limit(EXPORT_LIMIT)
async def export_report(
    request: Request,
    filters: LeaveRequestFilters = Depends(_filters),
    viewer: Viewer = Depends(require_permission("leave:export")),
    db: AsyncSession = Depends(get_db),
):
    """CSV of the filtered leave records."""
    rows = await LeaveService.export_leave_requests(db, viewer, filters)
    filename = report_filename()
    logger.info("Leave report exported by %s (%d rows)", viewer.id, len(rows))
    return Response(
        content=render_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
