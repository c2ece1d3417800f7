"""SQLAlchemy models for OAuth clients, user consents, and authorization codes."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from codegrant.db.base import BaseEntity


class OAuthClientEntity(BaseEntity):
    """Registered OAuth client (relying party)."""

    __tablename__ = "oauth_clients"

    id: Mapped[str] = mapped_column(String(48), primary_key=True)
    client_identifier: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, index=True
    )
    client_secret_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    redirect_uris: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    grant_types: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=lambda: ["authorization_code"]
    )
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    owner_user_id: Mapped[str | None] = mapped_column(
        String(48), nullable=True, index=True
    )
    is_system_client: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    system_role: Mapped[str | None] = mapped_column(
        String(32), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class UserConsentEntity(BaseEntity):
    """A user's grant of scopes to a client."""

    __tablename__ = "user_consents"
    __table_args__ = (
        # At most one non-revoked consent per (user, client).
        Index(
            "uq_user_consents_active_pair",
            "user_id",
            "client_id",
            unique=True,
            postgresql_where=text("revoked_at IS NULL"),
            sqlite_where=text("revoked_at IS NULL"),
        ),
    )

    id: Mapped[str] = mapped_column(String(48), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(48), nullable=False, index=True)
    client_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("oauth_clients.client_identifier"), nullable=False
    )
    scopes: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    granted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class AuthorizationCodeEntity(BaseEntity):
    """Single-use authorization code for the auth code flow."""

    __tablename__ = "authorization_codes"

    code: Mapped[str] = mapped_column(String(128), primary_key=True)
    client_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("oauth_clients.client_identifier"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(48), nullable=False)
    redirect_uri: Mapped[str] = mapped_column(String(2048), nullable=False)
    scope: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    state: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    code_challenge: Mapped[str] = mapped_column(String(128), nullable=False)
    code_challenge_method: Mapped[str] = mapped_column(
        String(10), nullable=False, default="S256"
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
