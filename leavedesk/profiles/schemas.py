"""Profile Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from leavedesk.common.constants import UserRole


class ProfileBrief(BaseModel):
    """Compact profile embedded in leave responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str
    email: str
    department: Optional[str] = None


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    full_name: str
    role: UserRole
    department: Optional[str] = None
    manager_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(BaseModel):
    """Admin edit form. Only sent fields are applied."""

    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    role: Optional[UserRole] = None
    department: Optional[str] = Field(None, max_length=100)
    manager_id: Optional[uuid.UUID] = None

    @field_validator("full_name")
    @classmethod
    def _strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Full name cannot be blank")
        return v

    @field_validator("department")
    @classmethod
    def _blank_department_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class RoleStatsOut(BaseModel):
    total_users: int
    employees: int
    managers: int
    hr: int
    admins: int
