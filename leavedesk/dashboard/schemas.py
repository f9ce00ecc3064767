"""Dashboard Pydantic v2 schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from leavedesk.common.constants import Portal, UserRole


class DashboardOut(BaseModel):
    """The caller's portal and the summary cards that portal shows."""

    portal: Portal
    role: UserRole
    stats: dict[str, int] = Field(
        default_factory=dict,
        description="Portal-specific counters, e.g. pending / approved",
    )
