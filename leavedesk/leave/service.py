"""Leave service layer — request lifecycle, approvals, conflicts, leave types.

Business logic:
  - Leave submission with inclusive day count and optional yearly cap
  - Manager approval / rejection of direct reports' pending requests
  - Employee cancellation of own pending requests
  - Role-scoped listing with department / status / date-range filters
  - Advisory same-department conflict detection for managers
  - Leave type configuration for admins
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leavedesk.auth.gate import (
    ManagerViewer,
    Viewer,
    ensure_can_cancel,
    ensure_can_decide,
    ensure_can_view_request,
    ensure_permission,
    request_scope,
)
from leavedesk.common.constants import (
    DEFAULT_PAGE_SIZE,
    ApprovalStatus,
    LeaveStatus,
    RequestScope,
)
from leavedesk.common.exceptions import (
    ConflictError,
    NotFoundException,
    ValidationException,
)
from leavedesk.common.pagination import build_meta
from leavedesk.config import settings
from leavedesk.leave.models import LeaveApproval, LeaveRequest, LeaveType
from leavedesk.leave.registry import LeaveTypeRegistry
from leavedesk.leave.rules import count_leave_days, find_conflicts, status_of
from leavedesk.leave.schemas import (
    ConflictBrief,
    LeaveRequestCreate,
    LeaveRequestFilters,
    LeaveRequestOut,
    LeaveTypeCreate,
    LeaveTypeOut,
    LeaveTypeUpdate,
)
from leavedesk.profiles.directory import ProfileDirectory
from leavedesk.profiles.models import Profile
from leavedesk.profiles.service import ProfileService

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave request operations."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _request_query():
        return select(LeaveRequest).options(
            selectinload(LeaveRequest.employee),
            selectinload(LeaveRequest.leave_type),
            selectinload(LeaveRequest.approvals),
        )

    @staticmethod
    async def _load_request(db: AsyncSession, request_id: uuid.UUID) -> LeaveRequest:
        result = await db.execute(
            LeaveService._request_query().where(LeaveRequest.id == request_id)
        )
        leave_req = result.scalars().first()
        if leave_req is None:
            raise NotFoundException("LeaveRequest", str(request_id))
        return leave_req

    @staticmethod
    def _build_conflict_brief(req: LeaveRequest) -> ConflictBrief:
        return ConflictBrief(
            id=req.id,
            employee_id=req.employee_id,
            employee_name=req.employee.full_name if req.employee else None,
            start_date=req.start_date,
            end_date=req.end_date,
        )

    @staticmethod
    def _build_request_response(
        req: LeaveRequest,
        *,
        conflicts: Optional[Sequence[LeaveRequest]] = None,
    ) -> LeaveRequestOut:
        """Build LeaveRequestOut from ORM; status is the reconciled one."""
        out = LeaveRequestOut.model_validate(req)
        out.status = status_of(req)
        if conflicts is not None:
            out.conflicts = [LeaveService._build_conflict_brief(c) for c in conflicts]
        return out

    @staticmethod
    async def visible_leave_requests(
        db: AsyncSession,
        viewer: Viewer,
        filters: Optional[LeaveRequestFilters] = None,
    ) -> list[LeaveRequest]:
        """Every request the viewer may see that matches *filters*, newest first.

        Status is matched on the reconciled status, so a stored ``pending``
        row is kept as a candidate for any status filter and narrowed here.
        """
        filters = filters or LeaveRequestFilters()
        query = LeaveService._request_query().order_by(
            LeaveRequest.created_at.desc(), LeaveRequest.id.desc()
        )

        scope = request_scope(viewer)
        if scope == RequestScope.own:
            query = query.where(LeaveRequest.employee_id == viewer.id)
        elif scope == RequestScope.team:
            query = query.where(
                LeaveRequest.employee_id.in_(
                    select(Profile.id).where(Profile.manager_id == viewer.id)
                )
            )
        # scope == all: no employee filter

        if filters.department:
            query = query.where(
                LeaveRequest.employee_id.in_(
                    select(Profile.id).where(Profile.department == filters.department)
                )
            )
        if filters.employee_id:
            query = query.where(LeaveRequest.employee_id == filters.employee_id)
        if filters.leave_type_id:
            query = query.where(LeaveRequest.leave_type_id == filters.leave_type_id)
        if filters.date_from:
            query = query.where(LeaveRequest.start_date >= filters.date_from)
        if filters.date_to:
            query = query.where(LeaveRequest.end_date <= filters.date_to)
        if filters.status and filters.status != LeaveStatus.pending:
            query = query.where(
                LeaveRequest.status.in_([filters.status, LeaveStatus.pending])
            )

        result = await db.execute(query)
        requests = list(result.scalars().all())
        if filters.status:
            requests = [r for r in requests if status_of(r) == filters.status]
        return requests

    @staticmethod
    async def _conflicts_for(
        db: AsyncSession,
        viewer: Viewer,
        targets: Sequence[LeaveRequest],
    ) -> dict[uuid.UUID, list[LeaveRequest]]:
        candidates = await LeaveService.visible_leave_requests(db, viewer)
        directory: ProfileDirectory = await ProfileService.load_directory(db)
        return {
            t.id: find_conflicts(t, candidates, directory)
            for t in targets
        }

    # ─────────────────────────────────────────────────────────────────
    # Apply Leave
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def apply_leave(
        db: AsyncSession,
        requester_id: uuid.UUID,
        data: LeaveRequestCreate,
        *,
        enforce_yearly_cap: Optional[bool] = None,
    ) -> LeaveRequestOut:
        """Submit a leave request as pending. Nothing is written on failure."""
        if enforce_yearly_cap is None:
            enforce_yearly_cap = settings.ENFORCE_LEAVE_TYPE_YEARLY_CAP

        employee = await db.get(Profile, requester_id)
        if employee is None:
            raise ValidationException({"employee_id": ["Profile not found."]})

        errors: dict[str, list[str]] = {}
        reason = (data.reason or "").strip()
        if not reason:
            errors.setdefault("reason", []).append("Reason is required.")
        if data.end_date < data.start_date:
            errors.setdefault("end_date", []).append(
                "End date must be on or after start date."
            )
        if errors:
            raise ValidationException(errors)

        leave_type = await LeaveTypeRegistry(db).require_active(data.leave_type_id)
        total_days = count_leave_days(data.start_date, data.end_date)

        if enforce_yearly_cap and leave_type.max_days_per_year:
            year = data.start_date.year
            used_q = select(func.coalesce(func.sum(LeaveRequest.total_days), 0)).where(
                LeaveRequest.employee_id == employee.id,
                LeaveRequest.leave_type_id == leave_type.id,
                LeaveRequest.status.in_([LeaveStatus.pending, LeaveStatus.approved]),
                LeaveRequest.start_date >= date(year, 1, 1),
                LeaveRequest.start_date <= date(year, 12, 31),
            )
            used = int((await db.execute(used_q)).scalar_one())
            if used + total_days > leave_type.max_days_per_year:
                raise ValidationException(
                    {
                        "total_days": [
                            f"{leave_type.name} allows {leave_type.max_days_per_year} "
                            f"days per year; {used} already requested in {year}."
                        ]
                    }
                )

        leave_req = LeaveRequest(
            employee=employee,
            leave_type=leave_type,
            approvals=[],
            start_date=data.start_date,
            end_date=data.end_date,
            total_days=total_days,
            reason=reason,
            status=LeaveStatus.pending,
            document_url=data.document_url,
        )
        db.add(leave_req)
        await db.flush()

        logger.info(
            "Leave request %s submitted by %s: %s %s..%s (%d days)",
            leave_req.id, employee.id, leave_type.name,
            data.start_date, data.end_date, total_days,
        )
        return LeaveService._build_request_response(leave_req)

    # ─────────────────────────────────────────────────────────────────
    # Decide (approve / reject)
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def decide_leave(
        db: AsyncSession,
        request_id: uuid.UUID,
        viewer: Viewer,
        decision: ApprovalStatus,
        *,
        comments: Optional[str] = None,
    ) -> LeaveRequestOut:
        """Record a manager decision and move the request to it.

        The approval row and the status change are flushed in one session so
        they commit, or roll back, together.
        """
        leave_req = await LeaveService._load_request(db, request_id)

        ensure_can_decide(viewer, leave_req.employee)

        current = status_of(leave_req)
        if current != LeaveStatus.pending:
            raise ValidationException(
                {"status": [f"Leave request is already {current.value}."]}
            )

        now = _utcnow()
        leave_req.approvals.append(
            LeaveApproval(
                approver_id=viewer.id,
                status=decision,
                comments=(comments or "").strip() or None,
                approved_at=now,
            )
        )
        leave_req.status = LeaveStatus(decision.value)
        leave_req.updated_at = now
        await db.flush()

        logger.info(
            "Leave request %s %s by manager %s",
            leave_req.id, decision.value, viewer.id,
        )
        return LeaveService._build_request_response(leave_req)

    @staticmethod
    async def approve_leave(
        db: AsyncSession,
        request_id: uuid.UUID,
        viewer: Viewer,
        *,
        comments: Optional[str] = None,
    ) -> LeaveRequestOut:
        return await LeaveService.decide_leave(
            db, request_id, viewer, ApprovalStatus.approved, comments=comments,
        )

    @staticmethod
    async def reject_leave(
        db: AsyncSession,
        request_id: uuid.UUID,
        viewer: Viewer,
        *,
        comments: Optional[str] = None,
    ) -> LeaveRequestOut:
        return await LeaveService.decide_leave(
            db, request_id, viewer, ApprovalStatus.rejected, comments=comments,
        )

    # ─────────────────────────────────────────────────────────────────
    # Cancel Leave
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def cancel_leave(
        db: AsyncSession,
        request_id: uuid.UUID,
        viewer: Viewer,
    ) -> LeaveRequestOut:
        """Withdraw an own request that has not been decided yet."""
        leave_req = await LeaveService._load_request(db, request_id)

        ensure_can_cancel(viewer, leave_req.employee_id)

        current = status_of(leave_req)
        if current != LeaveStatus.pending:
            raise ValidationException(
                {"status": [f"Only pending requests can be cancelled; this one is {current.value}."]}
            )

        leave_req.status = LeaveStatus.cancelled
        leave_req.updated_at = _utcnow()
        await db.flush()

        logger.info("Leave request %s cancelled by %s", leave_req.id, viewer.id)
        return LeaveService._build_request_response(leave_req)

    # ─────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_leave_requests(
        db: AsyncSession,
        viewer: Viewer,
        filters: Optional[LeaveRequestFilters] = None,
        *,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> dict[str, Any]:
        """Requests visible to *viewer*, filtered and paginated.

        Managers get each row's advisory conflicts.
        """
        requests = await LeaveService.visible_leave_requests(db, viewer, filters)
        total = len(requests)
        offset = (page - 1) * page_size
        page_rows = requests[offset:offset + page_size]

        conflicts: dict[uuid.UUID, list[LeaveRequest]] = {}
        if isinstance(viewer, ManagerViewer) and page_rows:
            conflicts = await LeaveService._conflicts_for(db, viewer, page_rows)

        return {
            "data": [
                LeaveService._build_request_response(r, conflicts=conflicts.get(r.id))
                for r in page_rows
            ],
            "meta": build_meta(total, page, page_size),
        }

    @staticmethod
    async def export_leave_requests(
        db: AsyncSession,
        viewer: Viewer,
        filters: Optional[LeaveRequestFilters] = None,
    ) -> list[LeaveRequest]:
        """Unpaginated rows for the report export."""
        ensure_permission(viewer, "leave:export")
        return await LeaveService.visible_leave_requests(db, viewer, filters)

    @staticmethod
    async def get_leave_request(
        db: AsyncSession,
        request_id: uuid.UUID,
        viewer: Viewer,
    ) -> LeaveRequestOut:
        leave_req = await LeaveService._load_request(db, request_id)
        ensure_can_view_request(viewer, leave_req.employee)

        conflicts = None
        if isinstance(viewer, ManagerViewer):
            conflicts = (await LeaveService._conflicts_for(db, viewer, [leave_req]))[leave_req.id]
        return LeaveService._build_request_response(leave_req, conflicts=conflicts)

    @staticmethod
    async def get_conflicts(
        db: AsyncSession,
        request_id: uuid.UUID,
        viewer: Viewer,
    ) -> list[ConflictBrief]:
        """Approved same-department requests overlapping the given one."""
        ensure_permission(viewer, "leave:decide")
        leave_req = await LeaveService._load_request(db, request_id)
        ensure_can_view_request(viewer, leave_req.employee)

        found = (await LeaveService._conflicts_for(db, viewer, [leave_req]))[leave_req.id]
        return [LeaveService._build_conflict_brief(c) for c in found]


# ═════════════════════════════════════════════════════════════════════
# LeaveTypeService
# ═════════════════════════════════════════════════════════════════════


class LeaveTypeService:
    """Leave type configuration (admin)."""

    @staticmethod
    async def list_leave_types(
        db: AsyncSession,
        *,
        active_only: bool = True,
    ) -> list[LeaveTypeOut]:
        if active_only:
            types = await LeaveTypeRegistry(db).active()
        else:
            result = await db.execute(select(LeaveType).order_by(LeaveType.name))
            types = list(result.scalars().all())
        return [LeaveTypeOut.model_validate(lt) for lt in types]

    @staticmethod
    async def _ensure_unique_name(
        db: AsyncSession,
        name: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(LeaveType.id).where(func.lower(LeaveType.name) == name.lower())
        if exclude_id is not None:
            query = query.where(LeaveType.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise ConflictError(f"Leave type '{name}' already exists.")

    @staticmethod
    async def create_leave_type(db: AsyncSession, data: LeaveTypeCreate) -> LeaveTypeOut:
        await LeaveTypeService._ensure_unique_name(db, data.name)

        lt = LeaveType(**data.model_dump())
        db.add(lt)
        await db.flush()
        logger.info("Leave type %s (%s) created", lt.id, lt.name)
        return LeaveTypeOut.model_validate(lt)

    @staticmethod
    async def update_leave_type(
        db: AsyncSession,
        leave_type_id: uuid.UUID,
        data: LeaveTypeUpdate,
    ) -> LeaveTypeOut:
        lt = await LeaveTypeRegistry(db).get(leave_type_id)
        if lt is None:
            raise NotFoundException("LeaveType", str(leave_type_id))

        update_data = data.model_dump(exclude_unset=True)
        # Non-nullable columns: an explicit null means "leave unchanged"
        for field in ("name", "requires_document", "is_active"):
            if field in update_data and update_data[field] is None:
                update_data.pop(field)
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
            await LeaveTypeService._ensure_unique_name(db, update_data["name"], exclude_id=lt.id)

        for field, value in update_data.items():
            setattr(lt, field, value)
        await db.flush()
        logger.info("Leave type %s updated: %s", lt.id, sorted(update_data))
        return LeaveTypeOut.model_validate(lt)
