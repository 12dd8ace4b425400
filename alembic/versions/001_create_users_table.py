"""Create users table

Revision ID: 001_create_users_table
Revises: None
Create Date: 2026-10-19

Creates the users table with support for:
- Local authentication (email/password)
- Federated login (Google, Facebook)
- One stored secret per user
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "001_create_users_table"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create users table with federated login support."""

    op.create_table(
        "users",
        # Primary key and timestamps (from Base)
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),

        # Authentication fields
        sa.Column(
            "email",
            sa.String(255),
            nullable=True,  # Providers may not share an email
        ),
        sa.Column(
            "hashed_password",
            sa.String(255),
            nullable=True,
            comment="Bcrypt hashed password, null for federated-only users",
        ),

        # Federated login fields
        sa.Column(
            "google_id",
            sa.String(255),
            nullable=True,
            comment="Google account subject identifier",
        ),
        sa.Column(
            "facebook_id",
            sa.String(255),
            nullable=True,
            comment="Facebook account identifier",
        ),

        sa.Column("secret", sa.Text, nullable=True),

        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("google_id", name="uq_users_google_id"),
        sa.UniqueConstraint("facebook_id", name="uq_users_facebook_id"),
    )


def downgrade() -> None:
    """Remove users table."""
    op.drop_table("users")
