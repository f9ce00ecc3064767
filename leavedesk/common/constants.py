"""Enums and constants for Leave Desk — matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    employee = "employee"
    manager = "manager"
    hr = "hr"
    admin = "admin"


class Portal(str, enum.Enum):
    """Top-level view rendered for a signed-in user."""

    employee = "employee"
    manager = "manager"
    hr = "hr"
    admin = "admin"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"


class ApprovalStatus(str, enum.Enum):
    approved = "approved"
    rejected = "rejected"


class RequestScope(str, enum.Enum):
    own = "own"
    team = "team"
    all = "all"


# ── Role-based permissions ──────────────────────────────────────────

PERMISSIONS: dict[UserRole, list[str]] = {
    UserRole.employee: [
        "leave:request",
        "leave:read_own",
        "leave:cancel_own",
    ],
    UserRole.manager: [
        "leave:read_team",
        "leave:decide",
    ],
    UserRole.hr: [
        "leave:read_all",
        "leave:export",
        "profile:read_all",
    ],
    UserRole.admin: [
        "leave:read_all",
        "profile:read_all",
        "profile:update",
        "profile:delete",
        "leave_type:configure",
    ],
}

# ── Documents ───────────────────────────────────────────────────────

ALLOWED_DOCUMENT_TYPES: dict[str, str] = {
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
}
DOCUMENT_BUCKET = "leave-documents"

# ── Reports ─────────────────────────────────────────────────────────

REPORT_COLUMNS: tuple[str, ...] = (
    "Employee Name",
    "Email",
    "Department",
    "Leave Type",
    "Start Date",
    "End Date",
    "Total Days",
    "Status",
    "Applied On",
)
REPORT_FILENAME_TEMPLATE = "leave-report-{date}.csv"

# ── Misc constants ──────────────────────────────────────────────────

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50
