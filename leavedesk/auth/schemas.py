"""Auth Pydantic schemas."""

import uuid
from typing import Optional

from pydantic import BaseModel

from leavedesk.common.constants import Portal, UserRole


class MeResponse(BaseModel):
    id: uuid.UUID
    email: str
    full_name: str
    role: UserRole
    department: Optional[str] = None
    manager_id: Optional[uuid.UUID] = None
    portal: Portal
    permissions: list[str]


class MessageResponse(BaseModel):
    message: str
