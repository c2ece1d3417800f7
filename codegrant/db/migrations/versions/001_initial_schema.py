"""Create oauth_clients, user_consents and authorization_codes.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "oauth_clients",
        sa.Column("id", sa.String(48), primary_key=True),
        sa.Column("client_identifier", sa.String(64), nullable=False),
        sa.Column("client_secret_hash", sa.String(255), nullable=False),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("redirect_uris", sa.JSON(), nullable=False),
        sa.Column("grant_types", sa.JSON(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("owner_user_id", sa.String(48), nullable=True),
        sa.Column("is_system_client", sa.Boolean(), nullable=False),
        sa.Column("system_role", sa.String(32), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_oauth_clients_client_identifier",
        "oauth_clients",
        ["client_identifier"],
        unique=True,
    )
    op.create_index(
        "ix_oauth_clients_owner_user_id", "oauth_clients", ["owner_user_id"]
    )
    op.create_index("ix_oauth_clients_system_role", "oauth_clients", ["system_role"])

    op.create_table(
        "user_consents",
        sa.Column("id", sa.String(48), primary_key=True),
        sa.Column("user_id", sa.String(48), nullable=False),
        sa.Column(
            "client_id",
            sa.String(64),
            sa.ForeignKey("oauth_clients.client_identifier"),
            nullable=False,
        ),
        sa.Column("scopes", sa.JSON(), nullable=False),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_user_consents_user_id", "user_consents", ["user_id"])
    op.create_index(
        "uq_user_consents_active_pair",
        "user_consents",
        ["user_id", "client_id"],
        unique=True,
        postgresql_where=sa.text("revoked_at IS NULL"),
    )

    op.create_table(
        "authorization_codes",
        sa.Column("code", sa.String(128), primary_key=True),
        sa.Column(
            "client_id",
            sa.String(64),
            sa.ForeignKey("oauth_clients.client_identifier"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(48), nullable=False),
        sa.Column("redirect_uri", sa.String(2048), nullable=False),
        sa.Column("scope", sa.String(1024), nullable=True),
        sa.Column("state", sa.String(1024), nullable=True),
        sa.Column("code_challenge", sa.String(128), nullable=False),
        sa.Column("code_challenge_method", sa.String(10), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used", sa.Boolean(), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )


def downgrade() -> None:
    op.drop_table("authorization_codes")
    op.drop_index("uq_user_consents_active_pair", table_name="user_consents")
    op.drop_index("ix_user_consents_user_id", table_name="user_consents")
    op.drop_table("user_consents")
    op.drop_index("ix_oauth_clients_system_role", table_name="oauth_clients")
    op.drop_index("ix_oauth_clients_owner_user_id", table_name="oauth_clients")
    op.drop_index("ix_oauth_clients_client_identifier", table_name="oauth_clients")
    op.drop_table("oauth_clients")
