"""Pure leave rules — inclusive day counts, overlap, conflicts, effective status."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

from leavedesk.common.constants import ApprovalStatus, LeaveStatus, UserRole
from leavedesk.leave.rules import (
    count_leave_days,
    effective_status,
    find_conflicts,
    latest_approval,
    ranges_overlap,
)
from leavedesk.profiles.directory import ProfileDirectory
from leavedesk.profiles.models import Profile


def _profile(department="Engineering", role=UserRole.employee, name="P"):
    return Profile(
        id=uuid.uuid4(),
        email=f"{uuid.uuid4().hex[:8]}@example.com",
        full_name=name,
        role=role,
        department=department,
    )


def _req(employee, start, end, status=LeaveStatus.approved, approvals=()):
    return SimpleNamespace(
        id=uuid.uuid4(),
        employee_id=employee.id,
        start_date=start,
        end_date=end,
        status=status,
        approvals=list(approvals),
    )


def _approval(status, at):
    return SimpleNamespace(id=uuid.uuid4(), status=status, approved_at=at)


# ═════════════════════════════════════════════════════════════════════
# Day count
# ═════════════════════════════════════════════════════════════════════


class TestCountLeaveDays:

    def test_single_day_counts_one(self):
        assert count_leave_days(date(2026, 3, 2), date(2026, 3, 2)) == 1

    def test_three_day_span(self):
        assert count_leave_days(date(2026, 3, 2), date(2026, 3, 4)) == 3

    def test_weekends_are_counted(self):
        # Fri → Mon
        assert count_leave_days(date(2026, 3, 6), date(2026, 3, 9)) == 4

    def test_inverted_range_uses_magnitude(self):
        assert count_leave_days(date(2026, 3, 4), date(2026, 3, 2)) == 3

    def test_across_month_and_leap_day(self):
        assert count_leave_days(date(2028, 2, 28), date(2028, 3, 1)) == 3

    def test_datetime_inputs_ignore_time_of_day(self):
        start = datetime(2026, 3, 2, 23, 30, tzinfo=timezone.utc)
        end = datetime(2026, 3, 3, 0, 15, tzinfo=timezone.utc)
        assert count_leave_days(start, end) == 2


class TestRangesOverlap:

    def test_touching_endpoints_overlap(self):
        assert ranges_overlap(date(2026, 3, 1), date(2026, 3, 5), date(2026, 3, 5), date(2026, 3, 9))

    def test_disjoint_ranges(self):
        assert not ranges_overlap(date(2026, 3, 1), date(2026, 3, 4), date(2026, 3, 5), date(2026, 3, 9))

    def test_containment(self):
        assert ranges_overlap(date(2026, 3, 1), date(2026, 3, 31), date(2026, 3, 10), date(2026, 3, 12))


# ═════════════════════════════════════════════════════════════════════
# Conflicts
# ═════════════════════════════════════════════════════════════════════


class TestFindConflicts:

    def test_same_department_overlapping_approved_conflicts(self):
        a, b = _profile(), _profile()
        directory = ProfileDirectory([a, b])
        target = _req(a, date(2026, 3, 3), date(2026, 3, 6), status=LeaveStatus.pending)
        other = _req(b, date(2026, 3, 5), date(2026, 3, 10))

        assert find_conflicts(target, [target, other], directory) == [other]

    def test_conflicts_are_symmetric(self):
        a, b = _profile(), _profile()
        directory = ProfileDirectory([a, b])
        first = _req(a, date(2024, 6, 10), date(2024, 6, 12))
        second = _req(b, date(2024, 6, 11), date(2024, 6, 15))
        candidates = [first, second]

        assert find_conflicts(first, candidates, directory) == [second]
        assert find_conflicts(second, candidates, directory) == [first]

    def test_other_department_does_not_conflict(self):
        a, b = _profile("Engineering"), _profile("Sales")
        directory = ProfileDirectory([a, b])
        target = _req(a, date(2026, 3, 3), date(2026, 3, 6), status=LeaveStatus.pending)
        other = _req(b, date(2026, 3, 3), date(2026, 3, 6))

        assert find_conflicts(target, [other], directory) == []

    def test_non_approved_requests_are_ignored(self):
        a, b = _profile(), _profile()
        directory = ProfileDirectory([a, b])
        target = _req(a, date(2026, 3, 3), date(2026, 3, 6), status=LeaveStatus.pending)
        candidates = [
            _req(b, date(2026, 3, 3), date(2026, 3, 6), status=s)
            for s in (LeaveStatus.pending, LeaveStatus.rejected, LeaveStatus.cancelled)
        ]

        assert find_conflicts(target, candidates, directory) == []

    def test_target_never_conflicts_with_itself(self):
        a = _profile()
        directory = ProfileDirectory([a])
        target = _req(a, date(2026, 3, 3), date(2026, 3, 6))

        assert find_conflicts(target, [target], directory) == []

    def test_no_department_never_conflicts(self):
        a, b = _profile(department=None), _profile(department=None)
        directory = ProfileDirectory([a, b])
        target = _req(a, date(2026, 3, 3), date(2026, 3, 6), status=LeaveStatus.pending)
        other = _req(b, date(2026, 3, 3), date(2026, 3, 6))

        assert find_conflicts(target, [other], directory) == []

    def test_non_overlapping_dates(self):
        a, b = _profile(), _profile()
        directory = ProfileDirectory([a, b])
        target = _req(a, date(2026, 3, 3), date(2026, 3, 6), status=LeaveStatus.pending)
        other = _req(b, date(2026, 3, 7), date(2026, 3, 9))

        assert find_conflicts(target, [other], directory) == []

    def test_reconciled_approval_counts_as_approved(self):
        a, b = _profile(), _profile()
        directory = ProfileDirectory([a, b])
        target = _req(a, date(2026, 3, 3), date(2026, 3, 6), status=LeaveStatus.pending)
        other = _req(
            b, date(2026, 3, 4), date(2026, 3, 4),
            status=LeaveStatus.pending,
            approvals=[_approval(ApprovalStatus.approved, datetime.now(timezone.utc))],
        )

        assert find_conflicts(target, [other], directory) == [other]


# ═════════════════════════════════════════════════════════════════════
# Effective status
# ═════════════════════════════════════════════════════════════════════


class TestEffectiveStatus:

    def test_pending_without_approvals_stays_pending(self):
        assert effective_status(LeaveStatus.pending, []) == LeaveStatus.pending

    def test_pending_with_approval_takes_its_status(self):
        approvals = [_approval(ApprovalStatus.rejected, datetime.now(timezone.utc))]
        assert effective_status(LeaveStatus.pending, approvals) == LeaveStatus.rejected

    def test_latest_approval_wins(self):
        now = datetime.now(timezone.utc)
        approvals = [
            _approval(ApprovalStatus.approved, now),
            _approval(ApprovalStatus.rejected, now - timedelta(minutes=5)),
        ]
        assert latest_approval(approvals).status == ApprovalStatus.approved
        assert effective_status(LeaveStatus.pending, approvals) == LeaveStatus.approved

    def test_naive_and_aware_timestamps_compare(self):
        aware = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)
        naive = datetime(2026, 3, 2, 11, 0)
        approvals = [
            _approval(ApprovalStatus.approved, aware),
            _approval(ApprovalStatus.rejected, naive),
        ]
        assert latest_approval(approvals).status == ApprovalStatus.rejected

    def test_terminal_status_is_not_overridden(self):
        approvals = [_approval(ApprovalStatus.approved, datetime.now(timezone.utc))]
        assert effective_status(LeaveStatus.cancelled, approvals) == LeaveStatus.cancelled
