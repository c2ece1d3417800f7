"""Application settings loaded from environment variables."""

from datetime import timedelta

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

AUTH_CODE_TTL_MINUTES_DEFAULT = 1
CONSENT_TTL_DAYS_DEFAULT = 0
DB_POOL_SIZE_DEFAULT = 5
DB_MAX_OVERFLOW_DEFAULT = 10
DB_PORT_DEFAULT = 5432


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection settings."""

    model_config = SettingsConfigDict(env_prefix="AUTH_DB_")

    host: str = "localhost"
    port: int = DB_PORT_DEFAULT
    user: str = "codegrant"
    password: str = "codegrant"
    database: str = "codegrant"
    pool_size: int = DB_POOL_SIZE_DEFAULT
    max_overflow: int = DB_MAX_OVERFLOW_DEFAULT

    @property
    def async_url(self) -> str:
        """Build async PostgreSQL connection URL."""
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )


class AuthSettings(BaseSettings):
    """Authorization code, consent and system client settings."""

    model_config = SettingsConfigDict(env_prefix="AUTH_")

    cors_origins: str = ""
    auth_code_ttl_minutes: int = Field(default=AUTH_CODE_TTL_MINUTES_DEFAULT, ge=1)
    consent_ttl_days: int = Field(default=CONSENT_TTL_DAYS_DEFAULT, ge=0)

    bff_client_id: str = "bff"
    bff_client_name: str = "Backend for Frontend"
    bff_client_secret: str = ""
    bff_client_redirect_uris: str = ""

    def get_cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins."""
        return _split_csv(self.cors_origins)

    def get_bff_redirect_uri_list(self) -> list[str]:
        """Parse comma-separated BFF redirect URIs."""
        return _split_csv(self.bff_client_redirect_uris)

    @property
    def auth_code_ttl(self) -> timedelta:
        """Lifetime of an issued authorization code."""
        return timedelta(minutes=self.auth_code_ttl_minutes)

    @property
    def consent_ttl(self) -> timedelta | None:
        """Lifetime of a granted consent, or None when consents never expire."""
        if self.consent_ttl_days == 0:
            return None
        return timedelta(days=self.consent_ttl_days)
