"""Leave type registry — read-only lookup of configured leave types."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.exceptions import ValidationException
from leavedesk.leave.models import LeaveType


class LeaveTypeRegistry:
    """Leave types as seen by the request lifecycle. Never writes."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get(self, leave_type_id: uuid.UUID) -> Optional[LeaveType]:
        return await self._db.get(LeaveType, leave_type_id)

    async def require_active(self, leave_type_id: uuid.UUID) -> LeaveType:
        leave_type = await self.get(leave_type_id)
        if leave_type is None:
            raise ValidationException({"leave_type_id": ["Leave type not found."]})
        if not leave_type.is_active:
            raise ValidationException(
                {"leave_type_id": [f"Leave type '{leave_type.name}' is not active."]}
            )
        return leave_type

    async def active(self) -> list[LeaveType]:
        result = await self._db.execute(
            select(LeaveType)
            .where(LeaveType.is_active.is_(True))
            .order_by(LeaveType.name)
        )
        return list(result.scalars().all())
