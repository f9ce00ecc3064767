"""Leave ORM models: LeaveType, LeaveRequest, LeaveApproval."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leavedesk.common.constants import ApprovalStatus, LeaveStatus
from leavedesk.database import Base
from leavedesk.profiles.models import Profile


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LeaveType(Base):
    __tablename__ = "leave_types"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    # Yearly cap; only enforced when ENFORCE_LEAVE_TYPE_YEARLY_CAP is on
    max_days_per_year: Mapped[Optional[int]] = mapped_column(sa.Integer)
    requires_document: Mapped[bool] = mapped_column(
        sa.Boolean, default=False, server_default=sa.text("FALSE")
    )
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, default=True, server_default=sa.text("TRUE")
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow, server_default=sa.func.now()
    )

    # Relationships
    requests: Mapped[list[LeaveRequest]] = relationship(back_populates="leave_type")


class LeaveRequest(Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_requests_date_order"),
        sa.CheckConstraint("total_days > 0", name="ck_leave_requests_total_days"),
        sa.Index("ix_leave_requests_employee_id", "employee_id"),
        sa.Index("ix_leave_requests_status", "status"),
        sa.Index("ix_leave_requests_created_at", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False
    )
    leave_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("leave_types.id"), nullable=False
    )
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    total_days: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    reason: Mapped[str] = mapped_column(sa.Text, nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status"),
        nullable=False,
        default=LeaveStatus.pending,
        server_default="pending",
    )
    document_url: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow, server_default=sa.func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=_utcnow,
        server_default=sa.func.now(),
        onupdate=_utcnow,
    )

    # Relationships
    employee: Mapped[Profile] = relationship(foreign_keys=[employee_id])
    leave_type: Mapped[LeaveType] = relationship(back_populates="requests")
    approvals: Mapped[list[LeaveApproval]] = relationship(
        back_populates="leave_request",
        order_by="LeaveApproval.approved_at",
    )


class LeaveApproval(Base):
    """One manager decision. Appended per decision, never updated."""

    __tablename__ = "leave_approvals"
    __table_args__ = (
        sa.Index("ix_leave_approvals_leave_request_id", "leave_request_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    leave_request_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("leave_requests.id"),
        nullable=False,
    )
    approver_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("profiles.id"), nullable=False
    )
    status: Mapped[ApprovalStatus] = mapped_column(
        sa.Enum(ApprovalStatus, name="approval_status"), nullable=False
    )
    comments: Mapped[Optional[str]] = mapped_column(sa.Text)
    approved_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow, server_default=sa.func.now()
    )

    # Relationships
    leave_request: Mapped[LeaveRequest] = relationship(back_populates="approvals")
