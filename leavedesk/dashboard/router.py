"""Dashboard router — the landing view for the signed-in user."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_viewer
from leavedesk.auth.gate import Viewer
from leavedesk.dashboard.schemas import DashboardOut
from leavedesk.dashboard.service import DashboardService
from leavedesk.database import get_db

router = APIRouter()


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=DashboardOut)
async def dashboard(
    viewer: Viewer = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    """Portal for the caller's role with its summary counters."""
    return await DashboardService.get_dashboard(db, viewer)
