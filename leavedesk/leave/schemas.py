"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Out                → response bodies (read)
  - *Brief              → compact embedded representations
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from leavedesk.common.constants import ApprovalStatus, LeaveStatus
from leavedesk.profiles.schemas import ProfileBrief


# ═════════════════════════════════════════════════════════════════════
# Embedded / shared
# ═════════════════════════════════════════════════════════════════════


class LeaveTypeBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    requires_document: bool = False


class LeaveApprovalOut(BaseModel):
    """One recorded manager decision."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    approver_id: uuid.UUID
    status: ApprovalStatus
    comments: Optional[str] = None
    approved_at: datetime


class ConflictBrief(BaseModel):
    """Approved overlapping request in the same department."""

    id: uuid.UUID
    employee_id: uuid.UUID
    employee_name: Optional[str] = None
    start_date: date
    end_date: date


# ═════════════════════════════════════════════════════════════════════
# Leave Type
# ═════════════════════════════════════════════════════════════════════


class LeaveTypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    max_days_per_year: Optional[int] = None
    requires_document: bool = False
    is_active: bool = True
    created_at: datetime


class LeaveTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    max_days_per_year: Optional[int] = Field(None, ge=1)
    requires_document: bool = False
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v


class LeaveTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    max_days_per_year: Optional[int] = Field(None, ge=1)
    requires_document: Optional[bool] = None
    is_active: Optional[bool] = None


# ═════════════════════════════════════════════════════════════════════
# Leave Request
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(BaseModel):
    """Payload for submitting a leave request.

    Shape only; the business rules (non-blank reason, date order, active
    type) are checked by the service so every failure is reported the same
    way and nothing is written.
    """

    leave_type_id: uuid.UUID
    start_date: date = Field(..., description="Leave start date (inclusive)")
    end_date: date = Field(..., description="Leave end date (inclusive)")
    reason: str = Field("", max_length=2000)
    document_url: Optional[str] = Field(None, max_length=1000)


class LeaveRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    total_days: int
    reason: str
    status: LeaveStatus
    document_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    # Filled by service
    employee: Optional[ProfileBrief] = None
    leave_type: Optional[LeaveTypeBrief] = None
    approvals: list[LeaveApprovalOut] = []
    conflicts: Optional[list[ConflictBrief]] = None


class LeaveDecisionRequest(BaseModel):
    comments: Optional[str] = Field(None, max_length=1000)


class LeaveRequestFilters(BaseModel):
    """Shared by the list and the report export."""

    department: Optional[str] = None
    status: Optional[LeaveStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    employee_id: Optional[uuid.UUID] = None
    leave_type_id: Optional[uuid.UUID] = None


# ═════════════════════════════════════════════════════════════════════
# Documents
# ═════════════════════════════════════════════════════════════════════


class DocumentUploadOut(BaseModel):
    document_url: str
    filename: str
    content_type: str
    size: int
