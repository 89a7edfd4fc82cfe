"""001_baseline

Baseline migration: users, admins, driver profiles and verification
requests.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_TABLES_WITH_TRIGGERS = [
    "users",
    "admins",
    "driver_profiles",
    "verification_requests",
]


def upgrade() -> None:
    # ------------------------------------------------------------------
    # Extensions
    # ------------------------------------------------------------------
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ------------------------------------------------------------------
    # Enum types
    # ------------------------------------------------------------------
    op.execute(
        "CREATE TYPE user_role AS ENUM ('driver', 'owner', 'admin', 'unassigned')"
    )
    op.execute("CREATE TYPE auth_provider AS ENUM ('phone', 'google')")
    op.execute(
        "CREATE TYPE verification_status AS ENUM ('pending', 'approved', 'rejected')"
    )
    op.execute(
        "CREATE TYPE request_status AS ENUM "
        "('pending', 'approved', 'rejected', 'cancelled')"
    )
    op.execute("CREATE TYPE request_priority AS ENUM ('low', 'medium', 'high')")

    # ------------------------------------------------------------------
    # Tables (dependency order)
    # ------------------------------------------------------------------

    # --- users ---
    op.execute("""
        CREATE TABLE users (
            id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            subject_id VARCHAR(128) UNIQUE NOT NULL,
            name VARCHAR(100) NOT NULL,
            email VARCHAR(255),
            phone VARCHAR(32) NOT NULL DEFAULT '',
            photo_url VARCHAR(1024),
            role user_role NOT NULL DEFAULT 'unassigned',
            auth_provider auth_provider NOT NULL DEFAULT 'phone',
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            is_available BOOLEAN NOT NULL DEFAULT FALSE,
            registration_completed BOOLEAN NOT NULL DEFAULT FALSE,
            last_login_at TIMESTAMP WITH TIME ZONE,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
    """)

    # --- admins ---
    op.execute("""
        CREATE TABLE admins (
            id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            username VARCHAR(50) UNIQUE NOT NULL,
            hashed_password VARCHAR(255) NOT NULL,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            is_first_login BOOLEAN NOT NULL DEFAULT TRUE,
            created_by VARCHAR(64),
            last_login_at TIMESTAMP WITH TIME ZONE,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
    """)

    # --- driver_profiles ---
    op.execute("""
        CREATE TABLE driver_profiles (
            id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            user_id VARCHAR(128) UNIQUE NOT NULL,
            name VARCHAR(100),
            license_number VARCHAR(50),
            license_expiry_date DATE,
            known_truck_types VARCHAR(50)[] NOT NULL DEFAULT '{}',
            experience VARCHAR(100),
            gender VARCHAR(20),
            age INTEGER,
            location VARCHAR(200),
            profile_photo VARCHAR(1024),
            license_photo_front VARCHAR(1024),
            license_photo_back VARCHAR(1024),
            profile_completed BOOLEAN NOT NULL DEFAULT FALSE,
            verification_status verification_status NOT NULL DEFAULT 'pending',
            verification_requested_at TIMESTAMP WITH TIME ZONE,
            approved_by VARCHAR(64),
            approved_at TIMESTAMP WITH TIME ZONE,
            rejection_reason VARCHAR(1000),
            resubmission_count INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            CONSTRAINT ck_driver_profiles_resubmission_count
                CHECK (resubmission_count >= 0)
        )
    """)

    # --- verification_requests ---
    op.execute("""
        CREATE TABLE verification_requests (
            id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
            driver_id VARCHAR(128) NOT NULL,
            profile_id UUID REFERENCES driver_profiles(id) ON DELETE SET NULL,
            status request_status NOT NULL DEFAULT 'pending',
            priority request_priority NOT NULL DEFAULT 'medium',
            snapshot_profile_photo VARCHAR(1024),
            snapshot_license_photo_front VARCHAR(1024),
            snapshot_license_photo_back VARCHAR(1024),
            processed_by VARCHAR(64),
            processed_at TIMESTAMP WITH TIME ZONE,
            notes TEXT,
            created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
    """)

    # ------------------------------------------------------------------
    # Indexes
    # ------------------------------------------------------------------
    op.execute("CREATE INDEX ix_users_subject_id ON users (subject_id)")
    op.execute("CREATE INDEX ix_users_email ON users (email)")
    op.execute("CREATE INDEX ix_admins_username ON admins (username)")
    op.execute("CREATE INDEX ix_driver_profiles_user_id ON driver_profiles (user_id)")
    op.execute(
        "CREATE INDEX ix_verification_requests_driver_status "
        "ON verification_requests (driver_id, status)"
    )
    op.execute(
        "CREATE INDEX ix_verification_requests_status_created "
        "ON verification_requests (status, created_at)"
    )
    # At most one open request per driver
    op.execute(
        "CREATE UNIQUE INDEX uq_verification_requests_one_pending "
        "ON verification_requests (driver_id) WHERE status = 'pending'"
    )

    # ------------------------------------------------------------------
    # Functions & triggers
    # ------------------------------------------------------------------
    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = CURRENT_TIMESTAMP;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
    """)

    for table in _TABLES_WITH_TRIGGERS:
        op.execute(
            f"CREATE TRIGGER update_{table}_updated_at "
            f"BEFORE UPDATE ON {table} "
            f"FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()"
        )


def downgrade() -> None:
    for table in _TABLES_WITH_TRIGGERS:
        op.execute(f"DROP TRIGGER IF EXISTS update_{table}_updated_at ON {table}")

    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column()")

    # ------------------------------------------------------------------
    # Drop tables (reverse dependency order)
    # ------------------------------------------------------------------
    op.execute("DROP TABLE IF EXISTS verification_requests CASCADE")
    op.execute("DROP TABLE IF EXISTS driver_profiles CASCADE")
    op.execute("DROP TABLE IF EXISTS admins CASCADE")
    op.execute("DROP TABLE IF EXISTS users CASCADE")

    # ------------------------------------------------------------------
    # Drop enum types
    # ------------------------------------------------------------------
    op.execute("DROP TYPE IF EXISTS request_priority")
    op.execute("DROP TYPE IF EXISTS request_status")
    op.execute("DROP TYPE IF EXISTS verification_status")
    op.execute("DROP TYPE IF EXISTS auth_provider")
    op.execute("DROP TYPE IF EXISTS user_role")
