"""Auth router — current session info and sign-out."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.dependencies import get_current_user
from leavedesk.auth.gate import permissions_for, portal_for, viewer_from_profile
from leavedesk.auth.schemas import MeResponse, MessageResponse
from leavedesk.auth.service import revoke_token
from leavedesk.database import get_db
from leavedesk.profiles.models import Profile

router = APIRouter(prefix="", tags=["auth"])


# ── GET /me — Current profile ──────────────────────────────────────

@router.get("/me", response_model=MeResponse)
async def me(profile: Profile = Depends(get_current_user)):
    viewer = viewer_from_profile(profile)
    return MeResponse(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        role=profile.role,
        department=profile.department,
        manager_id=profile.manager_id,
        portal=portal_for(viewer),
        permissions=permissions_for(viewer),
    )


# ── POST /sign-out — Revoke current token ──────────────────────────

@router.post("/sign-out", response_model=MessageResponse)
async def sign_out(
    request: Request,
    profile: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await revoke_token(db, request.state.access_token, profile.id)
    return MessageResponse(message="Signed out successfully")
