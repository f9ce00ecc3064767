"""Auth service — access token issue/decode and sign-out ledger."""

from __future__ import annotations

import hashlib
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import jwt
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.models import RevokedToken
from leavedesk.config import settings
from leavedesk.profiles.models import Profile

logger = logging.getLogger(__name__)


# ── JWT helpers ─────────────────────────────────────────────────────

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def issue_access_token(
    profile: Profile,
    *,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Encode an access token for *profile*.

    The session provider signs with the shared secret; this is the same
    encoding, used by provisioning scripts and tests.
    """
    expires_delta = expires_delta or timedelta(hours=settings.JWT_EXPIRY_HOURS)
    payload: dict[str, Any] = {
        "sub": str(profile.id),
        "email": profile.email,
        "type": "access",
        "jti": uuid.uuid4().hex,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify signature/expiry. Raises jose.JWTError on failure."""
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


# ── Sign-out ledger ─────────────────────────────────────────────────

async def is_revoked(db: AsyncSession, token: str) -> bool:
    result = await db.execute(
        select(RevokedToken.id).where(RevokedToken.token_hash == hash_token(token))
    )
    return result.first() is not None


async def revoke_token(db: AsyncSession, token: str, profile_id: uuid.UUID) -> None:
    """Record *token* as signed out. Signing out twice is a no-op.

    Rows whose token has already expired are pruned on the way.
    """
    now = datetime.now(timezone.utc)
    pruned = await db.execute(
        delete(RevokedToken)
        .where(RevokedToken.expires_at <= now)
        .execution_options(synchronize_session=False)
    )
    if pruned.rowcount:
        logger.info("Pruned %d expired revoked-token rows", pruned.rowcount)

    if await is_revoked(db, token):
        return
    claims = decode_access_token(token)
    db.add(
        RevokedToken(
            token_hash=hash_token(token),
            profile_id=profile_id,
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )
    )
    await db.flush()
    logger.info("Session revoked for profile %s", profile_id)
