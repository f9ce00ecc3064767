"""Leave report — CSV rendering of leave requests for HR export."""

from __future__ import annotations

import csv
import io
from datetime import date, datetime
from typing import Iterable, Optional

from leavedesk.common.constants import REPORT_COLUMNS, REPORT_FILENAME_TEMPLATE
from leavedesk.leave.models import LeaveRequest
from leavedesk.leave.rules import status_of


def _iso(value: Optional[date]) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    return value.isoformat()


def build_report_rows(requests: Iterable[LeaveRequest]) -> list[list[str]]:
    """One row per request in REPORT_COLUMNS order. Expects employee and
    leave_type loaded."""
    rows: list[list[str]] = []
    for req in requests:
        employee = req.employee
        rows.append(
            [
                employee.full_name if employee else "",
                employee.email if employee else "",
                (employee.department if employee else None) or "N/A",
                req.leave_type.name if req.leave_type else "",
                _iso(req.start_date),
                _iso(req.end_date),
                str(req.total_days),
                status_of(req).value,
                _iso(req.created_at),
            ]
        )
    return rows


def render_csv(requests: Iterable[LeaveRequest]) -> str:
    """Header plus one line per request. An empty input yields the header only."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(REPORT_COLUMNS)
    writer.writerows(build_report_rows(requests))
    return buf.getvalue()


def report_filename(today: Optional[date] = None) -> str:
    return REPORT_FILENAME_TEMPLATE.format(date=(today or date.today()).isoformat())
