"""Pure leave computations: day counts, team conflicts, effective status.

Nothing here touches the database. Functions accept ORM rows or any object
exposing the same attributes, which keeps them usable from tests and from
already-loaded result sets.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Iterable, Optional, Protocol, Sequence

from leavedesk.common.constants import LeaveStatus


class _ApprovalLike(Protocol):
    id: object
    status: object
    approved_at: datetime


class _RequestLike(Protocol):
    id: object
    employee_id: object
    status: LeaveStatus
    start_date: date
    end_date: date


def _as_date(value: date) -> date:
    # datetime is a date subclass; drop the time part so no timezone drift leaks in
    if isinstance(value, datetime):
        return value.date()
    return value


# ── Day count ───────────────────────────────────────────────────────

def count_leave_days(start: date, end: date) -> int:
    """Inclusive number of calendar days between *start* and *end*.

    Magnitude based: an inverted pair yields the same count as the ordered
    pair. Rejecting inverted ranges is the caller's job.
    """
    return abs((_as_date(end) - _as_date(start)).days) + 1


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Closed-interval overlap test."""
    return _as_date(a_start) <= _as_date(b_end) and _as_date(a_end) >= _as_date(b_start)


# ── Effective status ────────────────────────────────────────────────

def _as_utc(value: datetime) -> datetime:
    # naive timestamps are stored UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def latest_approval(approvals: Sequence[_ApprovalLike]) -> Optional[_ApprovalLike]:
    """Most recent decision, by time then id."""
    if not approvals:
        return None
    return max(approvals, key=lambda a: (_as_utc(a.approved_at), str(a.id)))


def effective_status(
    status: LeaveStatus,
    approvals: Sequence[_ApprovalLike] = (),
) -> LeaveStatus:
    """Status as derived on read.

    A request still marked pending that already has a decision record takes
    the status of its latest decision.
    """
    if status != LeaveStatus.pending:
        return status
    latest = latest_approval(approvals)
    if latest is None:
        return status
    return LeaveStatus(getattr(latest.status, "value", latest.status))


def status_of(request: _RequestLike) -> LeaveStatus:
    """Effective status of a request row whose approvals are loaded."""
    return effective_status(request.status, getattr(request, "approvals", None) or ())


# ── Conflicts ───────────────────────────────────────────────────────

class _DepartmentLookup(Protocol):
    def department_of(self, profile_id) -> Optional[str]: ...


def find_conflicts(
    target: _RequestLike,
    candidates: Iterable[_RequestLike],
    directory: _DepartmentLookup,
) -> list[_RequestLike]:
    """Approved requests from the target's department that overlap its dates.

    Advisory only. Employees without a department never conflict.
    """
    department = directory.department_of(target.employee_id)
    if not department:
        return []

    conflicts: list[_RequestLike] = []
    for other in candidates:
        if other.id == target.id:
            continue
        if status_of(other) != LeaveStatus.approved:
            continue
        if directory.department_of(other.employee_id) != department:
            continue
        if ranges_overlap(other.start_date, other.end_date, target.start_date, target.end_date):
            conflicts.append(other)
    return conflicts
