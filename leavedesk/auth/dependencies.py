"""Auth dependencies — JWT validation, viewer resolution, permission checks."""

from __future__ import annotations

import logging
import uuid
from typing import Callable

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.gate import Viewer, ensure_permission, viewer_from_profile
from leavedesk.auth.service import decode_access_token, is_revoked
from leavedesk.database import get_db
from leavedesk.profiles.models import Profile

logger = logging.getLogger(__name__)

NO_SESSION = "No active session."


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail=NO_SESSION)
    return auth_header[7:]


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """Validate JWT, reject signed-out tokens, return the signed-in Profile."""
    token = _extract_bearer(request)

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise HTTPException(status_code=401, detail=NO_SESSION)

    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail=NO_SESSION)

    try:
        profile_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(status_code=401, detail=NO_SESSION)

    if await is_revoked(db, token):
        raise HTTPException(status_code=401, detail=NO_SESSION)

    profile = await db.get(Profile, profile_id)
    if profile is None:
        logger.info("Token for unknown profile %s rejected", profile_id)
        raise HTTPException(status_code=401, detail=NO_SESSION)

    request.state.access_token = token
    return profile


async def get_viewer(profile: Profile = Depends(get_current_user)) -> Viewer:
    """The signed-in profile as a role-tagged viewer."""
    return viewer_from_profile(profile)


# ── Permission-based dependency ─────────────────────────────────────

def require_permission(permission: str) -> Callable:
    """Return a FastAPI dependency that enforces a specific permission string."""

    async def _check(viewer: Viewer = Depends(get_viewer)) -> Viewer:
        ensure_permission(viewer, permission)
        return viewer

    return _check
