"""Dashboard service — per-portal summary counters."""

from __future__ import annotations

from collections import Counter

from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.gate import (
    AdminViewer,
    EmployeeViewer,
    HRViewer,
    ManagerViewer,
    Viewer,
    portal_for,
)
from leavedesk.common.constants import LeaveStatus, UserRole
from leavedesk.dashboard.schemas import DashboardOut
from leavedesk.leave.rules import status_of
from leavedesk.leave.service import LeaveService
from leavedesk.profiles.service import ProfileService


class DashboardService:
    """Composes the role-conditional landing view."""

    @staticmethod
    async def get_dashboard(db: AsyncSession, viewer: Viewer) -> DashboardOut:
        portal = portal_for(viewer)

        if isinstance(viewer, AdminViewer):
            roles = await ProfileService.role_stats(db)
            stats = roles.model_dump()
        else:
            requests = await LeaveService.visible_leave_requests(db, viewer)
            by_status = Counter(status_of(r) for r in requests)
            stats = {
                "total": len(requests),
                "pending": by_status[LeaveStatus.pending],
                "approved": by_status[LeaveStatus.approved],
            }
            if isinstance(viewer, EmployeeViewer):
                stats["rejected"] = by_status[LeaveStatus.rejected]
                stats["cancelled"] = by_status[LeaveStatus.cancelled]
            elif isinstance(viewer, ManagerViewer):
                stats["team_members"] = len({r.employee_id for r in requests})
            elif isinstance(viewer, HRViewer):
                stats["total_approved_days"] = sum(
                    r.total_days for r in requests
                    if status_of(r) == LeaveStatus.approved
                )

        return DashboardOut(portal=portal, role=UserRole(viewer.role), stats=stats)
