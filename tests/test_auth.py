"""Session tokens, sign-out ledger and rate limiting."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from jose import JWTError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.auth.models import RevokedToken
from leavedesk.auth.service import (
    decode_access_token,
    hash_token,
    is_revoked,
    issue_access_token,
    revoke_token,
)
from leavedesk.common.constants import UserRole
from tests.factories import auth_headers, seed_profile, seed_team


# ═════════════════════════════════════════════════════════════════════
# Tokens
# ═════════════════════════════════════════════════════════════════════


class TestAccessTokens:

    async def test_issue_and_decode(self, db: AsyncSession):
        profile = await seed_profile(db)

        claims = decode_access_token(issue_access_token(profile))

        assert claims["sub"] == str(profile.id)
        assert claims["email"] == profile.email
        assert claims["type"] == "access"

    async def test_each_token_is_unique(self, db: AsyncSession):
        profile = await seed_profile(db)
        assert issue_access_token(profile) != issue_access_token(profile)

    async def test_expired_token_fails_decode(self, db: AsyncSession):
        profile = await seed_profile(db)
        token = issue_access_token(profile, expires_delta=timedelta(seconds=-5))

        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_tampered_token_fails_decode(self):
        with pytest.raises(JWTError):
            decode_access_token("not.a.token")

    def test_hash_is_stable_sha256(self):
        assert hash_token("abc") == hash_token("abc")
        assert len(hash_token("abc")) == 64


# ═════════════════════════════════════════════════════════════════════
# Sign-out ledger
# ═════════════════════════════════════════════════════════════════════


class TestRevocation:

    async def test_revoke_is_idempotent(self, db: AsyncSession):
        profile = await seed_profile(db)
        token = issue_access_token(profile)

        assert not await is_revoked(db, token)
        await revoke_token(db, token, profile.id)
        await revoke_token(db, token, profile.id)

        assert await is_revoked(db, token)
        count = (await db.execute(select(func.count(RevokedToken.id)))).scalar_one()
        assert count == 1

    async def test_revoke_prunes_expired_rows(self, db: AsyncSession):
        profile = await seed_profile(db)
        db.add(
            RevokedToken(
                token_hash=hash_token("long-gone"),
                profile_id=profile.id,
                expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
            )
        )
        await db.flush()
        token = issue_access_token(profile)

        await revoke_token(db, token, profile.id)

        hashes = (await db.execute(select(RevokedToken.token_hash))).scalars().all()
        assert hashes == [hash_token(token)]
        assert await is_revoked(db, token)

    async def test_other_tokens_survive_sign_out(self, client: AsyncClient, db: AsyncSession):
        profile = await seed_profile(db)
        await db.commit()
        first, second = auth_headers(profile), auth_headers(profile)

        await client.post("/api/v1/auth/sign-out", headers=first)

        assert (await client.get("/api/v1/auth/me", headers=first)).status_code == 401
        assert (await client.get("/api/v1/auth/me", headers=second)).status_code == 200

    async def test_non_bearer_scheme_rejected(self, client: AsyncClient, db: AsyncSession):
        profile = await seed_profile(db)
        await db.commit()
        token = auth_headers(profile)["Authorization"].split(" ", 1)[1]

        resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Basic {token}"})
        assert resp.status_code == 401


# ═════════════════════════════════════════════════════════════════════
# Rate limiting
# ═════════════════════════════════════════════════════════════════════


class TestRateLimiting:
    """Per-endpoint limits on uploads and exports."""

    @pytest.fixture(autouse=True)
    def _enable_limiter(self):
        from leavedesk.common.rate_limit import limiter

        original = limiter.enabled
        limiter.enabled = True
        limiter.reset()
        yield
        limiter.enabled = original

    async def test_upload_limited_at_10_per_minute(self, client: AsyncClient, db: AsyncSession):
        _, employee, _ = await seed_team(db)
        await db.commit()
        headers = auth_headers(employee)

        for i in range(10):
            resp = await client.post(
                "/api/v1/leave/documents",
                files={"file": (f"note-{i}.pdf", b"%PDF-1.4", "application/pdf")},
                headers=headers,
            )
            assert resp.status_code == 201, f"Upload {i + 1} should succeed"

        resp = await client.post(
            "/api/v1/leave/documents",
            files={"file": ("overflow.pdf", b"%PDF-1.4", "application/pdf")},
            headers=headers,
        )
        assert resp.status_code == 429

    async def test_export_limited_at_20_per_minute(self, client: AsyncClient, db: AsyncSession):
        hr = await seed_profile(db, full_name="Hana HR", role=UserRole.hr)
        await db.commit()
        headers = auth_headers(hr)

        for i in range(20):
            resp = await client.get("/api/v1/leave/reports/export", headers=headers)
            assert resp.status_code == 200, f"Export {i + 1} should succeed"

        resp = await client.get("/api/v1/leave/reports/export", headers=headers)
        assert resp.status_code == 429
