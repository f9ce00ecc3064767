"""Profiles router — user administration."""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import require_permission
from leavedesk.auth.gate import Viewer
from leavedesk.common.constants import UserRole
from leavedesk.common.pagination import PaginatedResponse, PaginationParams, build_meta
from leavedesk.database import get_db
from leavedesk.profiles.schemas import ProfileBrief, ProfileOut, ProfileUpdate, RoleStatsOut
from leavedesk.profiles.service import ProfileService

router = APIRouter(prefix="", tags=["profiles"])


@router.get("", response_model=PaginatedResponse[ProfileOut])
async def list_profiles(
    role: Optional[UserRole] = Query(None),
    department: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(),
    viewer: Viewer = Depends(require_permission("profile:read_all")),
    db: AsyncSession = Depends(get_db),
):
    profiles, total = await ProfileService.list_profiles(
        db,
        role=role,
        department=department,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return {
        "data": [ProfileOut.model_validate(p) for p in profiles],
        "meta": build_meta(total, pagination.page, pagination.page_size),
    }


@router.get("/managers", response_model=list[ProfileBrief])
async def list_managers(
    exclude_id: Optional[uuid.UUID] = Query(None),
    viewer: Viewer = Depends(require_permission("profile:read_all")),
    db: AsyncSession = Depends(get_db),
):
    """Manager candidates for the edit form."""
    return await ProfileService.list_managers(db, exclude_id=exclude_id)


@router.get("/stats", response_model=RoleStatsOut)
async def role_stats(
    viewer: Viewer = Depends(require_permission("profile:read_all")),
    db: AsyncSession = Depends(get_db),
):
    return await ProfileService.role_stats(db)


@router.get("/departments", response_model=list[str])
async def list_departments(
    viewer: Viewer = Depends(require_permission("profile:read_all")),
    db: AsyncSession = Depends(get_db),
):
    """Departments in use, for the HR department filter."""
    return await ProfileService.list_departments(db)


@router.patch("/{profile_id}", response_model=ProfileOut)
async def update_profile(
    profile_id: uuid.UUID,
    body: ProfileUpdate,
    viewer: Viewer = Depends(require_permission("profile:update")),
    db: AsyncSession = Depends(get_db),
):
    return await ProfileService.update_profile(db, profile_id, body, actor_id=viewer.id)


@router.delete("/{profile_id}", status_code=204)
async def delete_profile(
    profile_id: uuid.UUID,
    viewer: Viewer = Depends(require_permission("profile:delete")),
    db: AsyncSession = Depends(get_db),
):
    await ProfileService.delete_profile(db, profile_id, viewer.id)
    return Response(status_code=204)
