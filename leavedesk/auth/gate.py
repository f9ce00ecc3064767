"""Authorization gate — role → portal, visible requests and permitted actions.

A signed-in profile is turned into exactly one viewer variant. Each variant
carries only the data its role needs, and every decision below branches on
the variant type; a profile whose role is none of the four known roles never
becomes a viewer at all.
"""

from __future__ import annotations

import logging
import uuid
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from leavedesk.common.constants import PERMISSIONS, Portal, RequestScope, UserRole
from leavedesk.common.exceptions import ForbiddenException
from leavedesk.profiles.models import Profile

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# Viewer variants
# ═════════════════════════════════════════════════════════════════════


class _ViewerBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    email: str
    full_name: str
    department: Optional[str] = None


class EmployeeViewer(_ViewerBase):
    role: Literal["employee"] = "employee"
    manager_id: Optional[uuid.UUID] = None


class ManagerViewer(_ViewerBase):
    role: Literal["manager"] = "manager"


class HRViewer(_ViewerBase):
    role: Literal["hr"] = "hr"


class AdminViewer(_ViewerBase):
    role: Literal["admin"] = "admin"


Viewer = Annotated[
    Union[EmployeeViewer, ManagerViewer, HRViewer, AdminViewer],
    Field(discriminator="role"),
]

_viewer_adapter: TypeAdapter = TypeAdapter(Viewer)


def viewer_from_profile(profile: Profile) -> Viewer:
    """Build the viewer variant for *profile*; unknown roles are denied."""
    role = getattr(profile.role, "value", profile.role)
    try:
        return _viewer_adapter.validate_python(
            {
                "id": profile.id,
                "email": profile.email,
                "full_name": profile.full_name,
                "department": profile.department,
                "manager_id": profile.manager_id,
                "role": role,
            }
        )
    except PydanticValidationError:
        logger.warning("Access denied for profile %s with unrecognized role %r", profile.id, role)
        raise ForbiddenException(f"Role '{role}' is not recognized.")


# ═════════════════════════════════════════════════════════════════════
# Portal / scope
# ═════════════════════════════════════════════════════════════════════


def portal_for(viewer: Viewer) -> Portal:
    if isinstance(viewer, EmployeeViewer):
        return Portal.employee
    if isinstance(viewer, ManagerViewer):
        return Portal.manager
    if isinstance(viewer, HRViewer):
        return Portal.hr
    if isinstance(viewer, AdminViewer):
        return Portal.admin
    raise ForbiddenException("Invalid role.")


def request_scope(viewer: Viewer) -> RequestScope:
    """Which leave requests the viewer may see."""
    if isinstance(viewer, EmployeeViewer):
        return RequestScope.own
    if isinstance(viewer, ManagerViewer):
        return RequestScope.team
    if isinstance(viewer, (HRViewer, AdminViewer)):
        return RequestScope.all
    raise ForbiddenException("Invalid role.")


# ═════════════════════════════════════════════════════════════════════
# Permissions
# ═════════════════════════════════════════════════════════════════════


def permissions_for(viewer: Viewer) -> list[str]:
    return list(PERMISSIONS.get(UserRole(viewer.role), []))


def has_permission(viewer: Viewer, permission: str) -> bool:
    return permission in permissions_for(viewer)


def ensure_permission(viewer: Viewer, permission: str) -> None:
    if not has_permission(viewer, permission):
        logger.info("Denied %s to %s (%s)", permission, viewer.id, viewer.role)
        raise ForbiddenException(
            f"Permission '{permission}' is not granted to role '{viewer.role}'.",
        )


# ═════════════════════════════════════════════════════════════════════
# Row-level checks
# ═════════════════════════════════════════════════════════════════════


def can_view_request(viewer: Viewer, employee: Profile) -> bool:
    """Whether a request owned by *employee* is visible to *viewer*."""
    scope = request_scope(viewer)
    if scope == RequestScope.own:
        return employee.id == viewer.id
    if scope == RequestScope.team:
        return employee.manager_id == viewer.id
    return True


def ensure_can_view_request(viewer: Viewer, employee: Profile) -> None:
    if not can_view_request(viewer, employee):
        raise ForbiddenException("You are not allowed to view this leave request.")


def ensure_can_decide(viewer: Viewer, employee: Profile) -> None:
    """Only the employee's own manager may approve or reject."""
    if not isinstance(viewer, ManagerViewer):
        logger.info("Decision attempt by non-manager %s (%s)", viewer.id, viewer.role)
        raise ForbiddenException("Only managers can approve or reject leave requests.")
    if employee.manager_id != viewer.id:
        logger.info(
            "Manager %s attempted to decide a request of non-report %s",
            viewer.id, employee.id,
        )
        raise ForbiddenException(
            "You can only approve or reject leave requests of your direct reports."
        )


def ensure_can_cancel(viewer: Viewer, employee_id: uuid.UUID) -> None:
    """Only the requesting employee may cancel."""
    ensure_permission(viewer, "leave:cancel_own")
    if employee_id != viewer.id:
        raise ForbiddenException("You can only cancel your own leave requests.")
