"""Profile service — admin user management and directory loading."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.common.constants import UserRole
from leavedesk.common.exceptions import (
    ConflictError,
    NotFoundException,
    ValidationException,
)
from leavedesk.leave.models import LeaveApproval, LeaveRequest
from leavedesk.profiles.directory import ProfileDirectory
from leavedesk.profiles.models import Profile
from leavedesk.profiles.schemas import ProfileUpdate, RoleStatsOut

logger = logging.getLogger(__name__)


class ProfileService:
    """Static service class for profile operations."""

    # ── Reads ───────────────────────────────────────────────────────

    @staticmethod
    async def get_profile(db: AsyncSession, profile_id: uuid.UUID) -> Profile:
        profile = await db.get(Profile, profile_id)
        if profile is None:
            raise NotFoundException("Profile", str(profile_id))
        return profile

    @staticmethod
    async def list_profiles(
        db: AsyncSession,
        *,
        role: Optional[UserRole] = None,
        department: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> tuple[list[Profile], int]:
        """Profiles newest first, plus the unpaginated total."""
        query = select(Profile)
        if role is not None:
            query = query.where(Profile.role == role)
        if department:
            query = query.where(Profile.department == department)

        count_q = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_q)).scalar_one()

        query = query.order_by(Profile.created_at.desc(), Profile.id.desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all()), total

    @staticmethod
    async def load_directory(db: AsyncSession) -> ProfileDirectory:
        result = await db.execute(select(Profile))
        return ProfileDirectory(result.scalars().all())

    @staticmethod
    async def list_managers(
        db: AsyncSession,
        *,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> list[Profile]:
        """Candidates for an employee's manager field."""
        directory = await ProfileService.load_directory(db)
        return directory.managers(exclude_id=exclude_id)

    @staticmethod
    async def role_stats(db: AsyncSession) -> RoleStatsOut:
        directory = await ProfileService.load_directory(db)
        groups = directory.partition_by_role()
        return RoleStatsOut(
            total_users=len(directory),
            employees=len(groups[UserRole.employee]),
            managers=len(groups[UserRole.manager]),
            hr=len(groups[UserRole.hr]),
            admins=len(groups[UserRole.admin]),
        )

    @staticmethod
    async def list_departments(db: AsyncSession) -> list[str]:
        """Distinct departments in use, for report and listing filters."""
        directory = await ProfileService.load_directory(db)
        return directory.departments()

    # ── Writes ──────────────────────────────────────────────────────

    @staticmethod
    async def update_profile(
        db: AsyncSession,
        profile_id: uuid.UUID,
        data: ProfileUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Profile:
        """Apply an admin edit, keeping the manager invariant intact.

        Only employees keep a manager; the manager must be an existing
        manager profile other than the edited profile itself.
        """
        directory = await ProfileService.load_directory(db)
        profile = directory.require(profile_id)

        update_data = data.model_dump(exclude_unset=True)
        # Non-nullable columns: an explicit null means "leave unchanged"
        for field in ("full_name", "role"):
            if field in update_data and update_data[field] is None:
                update_data.pop(field)

        new_role = update_data.get("role", profile.role)
        manager_id = update_data.get("manager_id", profile.manager_id)

        if new_role != UserRole.employee:
            manager_id = None
        elif manager_id is not None:
            if manager_id == profile.id:
                raise ValidationException(
                    {"manager_id": ["A profile cannot be its own manager."]}
                )
            manager = directory.get(manager_id)
            if manager is None:
                raise ValidationException({"manager_id": ["Manager not found."]})
            if manager.role != UserRole.manager:
                raise ValidationException(
                    {"manager_id": ["Selected profile is not a manager."]}
                )

        # Demoting a manager would leave reports pointing at a non-manager
        if profile.role == UserRole.manager and new_role != UserRole.manager:
            if directory.direct_reports(profile.id):
                raise ConflictError(
                    "Reassign this manager's direct reports before changing the role."
                )

        for field in ("full_name", "role", "department"):
            if field in update_data:
                setattr(profile, field, update_data[field])
        profile.manager_id = manager_id

        await db.flush()
        await db.refresh(profile)
        logger.info(
            "Profile %s updated by %s: %s",
            profile.id, actor_id, sorted(update_data),
        )
        return profile

    @staticmethod
    async def delete_profile(
        db: AsyncSession,
        profile_id: uuid.UUID,
        actor_id: uuid.UUID,
    ) -> None:
        """Delete a profile that nothing references. No cascade."""
        if profile_id == actor_id:
            raise ValidationException({"id": ["You cannot delete your own account."]})

        profile = await ProfileService.get_profile(db, profile_id)

        references = {
            "leave_requests": select(func.count())
            .select_from(LeaveRequest)
            .where(LeaveRequest.employee_id == profile_id),
            "leave_approvals": select(func.count())
            .select_from(LeaveApproval)
            .where(LeaveApproval.approver_id == profile_id),
            "direct_reports": select(func.count())
            .select_from(Profile)
            .where(Profile.manager_id == profile_id),
        }
        blocking: dict[str, list[str]] = {}
        for name, query in references.items():
            count = (await db.execute(query)).scalar_one()
            if count:
                blocking[name] = [f"{count} record(s) still reference this profile."]
        if blocking:
            raise ConflictError(
                f"Profile '{profile.email}' is still referenced and cannot be deleted.",
                errors=blocking,
            )

        await db.delete(profile)
        await db.flush()
        logger.info("Profile %s (%s) deleted by %s", profile_id, profile.email, actor_id)

