"""001 – Initial schema: profiles, leave tables, sign-out ledger, enums, seed data.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17 10:00:00.000000+00:00
"""

from alembic import op

# Revision identifiers
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ENUM_TYPES: list[tuple[str, list[str]]] = [
    ("user_role", ["employee", "manager", "hr", "admin"]),
    ("leave_status", ["pending", "approved", "rejected", "cancelled"]),
    ("approval_status", ["approved", "rejected"]),
]


def _create_enum(name: str, values: list[str]) -> None:
    vals = ", ".join(f"'{v}'" for v in values)
    op.execute(f"CREATE TYPE {name} AS ENUM ({vals})")


def _drop_enum(name: str) -> None:
    op.execute(f"DROP TYPE IF EXISTS {name}")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── Enum types ────────────────────────────────────────────────────────
    for name, values in ENUM_TYPES:
        _create_enum(name, values)

    # ── 1. profiles ───────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE profiles (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            email       VARCHAR(255) NOT NULL UNIQUE,
            full_name   VARCHAR(200) NOT NULL,
            role        user_role    NOT NULL DEFAULT 'employee',
            department  VARCHAR(100),
            manager_id  UUID REFERENCES profiles(id),
            created_at  TIMESTAMPTZ DEFAULT NOW(),
            updated_at  TIMESTAMPTZ DEFAULT NOW(),
            CHECK (manager_id IS NULL OR manager_id <> id)
        )
    """)
    op.execute("CREATE INDEX ix_profiles_manager_id ON profiles(manager_id)")
    op.execute("CREATE INDEX ix_profiles_department ON profiles(department)")

    # ── 2. leave_types ────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_types (
            id                 UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            name               VARCHAR(100) NOT NULL UNIQUE,
            description        TEXT,
            max_days_per_year  INTEGER CHECK (max_days_per_year IS NULL OR max_days_per_year > 0),
            requires_document  BOOLEAN DEFAULT FALSE,
            is_active          BOOLEAN DEFAULT TRUE,
            created_at         TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # ── 3. leave_requests ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_requests (
            id             UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            employee_id    UUID NOT NULL REFERENCES profiles(id),
            leave_type_id  UUID NOT NULL REFERENCES leave_types(id),
            start_date     DATE NOT NULL,
            end_date       DATE NOT NULL,
            total_days     INTEGER NOT NULL,
            reason         TEXT NOT NULL,
            status         leave_status NOT NULL DEFAULT 'pending',
            document_url   TEXT,
            created_at     TIMESTAMPTZ DEFAULT NOW(),
            updated_at     TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT ck_leave_requests_date_order CHECK (start_date <= end_date),
            CONSTRAINT ck_leave_requests_total_days CHECK (total_days > 0)
        )
    """)
    op.execute("CREATE INDEX ix_leave_requests_employee_id ON leave_requests(employee_id)")
    op.execute("CREATE INDEX ix_leave_requests_status ON leave_requests(status)")
    op.execute("CREATE INDEX ix_leave_requests_created_at ON leave_requests(created_at)")

    # ── 4. leave_approvals ────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE leave_approvals (
            id                UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            leave_request_id  UUID NOT NULL REFERENCES leave_requests(id),
            approver_id       UUID NOT NULL REFERENCES profiles(id),
            status            approval_status NOT NULL,
            comments          TEXT,
            approved_at       TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX ix_leave_approvals_leave_request_id ON leave_approvals(leave_request_id)"
    )

    # ── 5. revoked_tokens ─────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE revoked_tokens (
            id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            token_hash  VARCHAR(128) NOT NULL UNIQUE,
            profile_id  UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            revoked_at  TIMESTAMPTZ DEFAULT NOW(),
            expires_at  TIMESTAMPTZ NOT NULL
        )
    """)
    op.execute("CREATE INDEX ix_revoked_tokens_expires_at ON revoked_tokens(expires_at)")

    # ── Seed data ─────────────────────────────────────────────────────────
    op.execute("""
        INSERT INTO leave_types (name, description, max_days_per_year, requires_document)
        VALUES
            ('Annual Leave', 'Planned paid time off',             20, FALSE),
            ('Sick Leave',   'Illness or medical appointments',  10, TRUE),
            ('Casual Leave', 'Short personal or urgent absences', 7, FALSE)
    """)


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    # Drop tables in reverse dependency order
    tables = [
        "revoked_tokens",
        "leave_approvals",
        "leave_requests",
        "leave_types",
        "profiles",
    ]
    for t in tables:
        op.execute(f"DROP TABLE IF EXISTS {t} CASCADE")

    for name, _ in reversed(ENUM_TYPES):
        _drop_enum(name)
