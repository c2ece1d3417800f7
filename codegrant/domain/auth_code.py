"""Authorization code domain record."""

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict

from codegrant.core.errors import InvalidGrantError, InvalidRequestError
from codegrant.domain.value_objects import ClientIdentifier, CodeChallenge


class AuthorizationCode(BaseModel):
    """Single-use, short-lived code bound to a user, client and PKCE challenge."""

    model_config = ConfigDict(frozen=True)

    code: str
    user_id: str
    client_id: ClientIdentifier
    redirect_uri: str
    code_challenge: CodeChallenge
    scope: str | None = None
    state: str | None = None
    expires_at: datetime
    used: bool = False
    used_at: datetime | None = None
    created_at: datetime

    @classmethod
    def issue(
        cls,
        *,
        code: str,
        user_id: str,
        client_id: ClientIdentifier,
        redirect_uri: str,
        code_challenge: CodeChallenge,
        created_at: datetime,
        ttl: timedelta,
        scope: str | None = None,
        state: str | None = None,
    ) -> "AuthorizationCode":
        """Build a fresh, unused code expiring ``ttl`` after ``created_at``."""
        if not code:
            raise InvalidRequestError("authorization code token must not be empty")
        if not user_id:
            raise InvalidRequestError("authorization code needs a user")
        if ttl <= timedelta(0):
            raise InvalidRequestError("authorization code ttl must be positive")
        return cls(
            code=code,
            user_id=user_id,
            client_id=client_id,
            redirect_uri=redirect_uri,
            code_challenge=code_challenge,
            scope=scope or None,
            state=state,
            expires_at=created_at + ttl,
            used=False,
            used_at=None,
            created_at=created_at,
        )

    @property
    def scopes(self) -> list[str]:
        return self.scope.split() if self.scope else []

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_redeemable(self, now: datetime) -> bool:
        return not self.used and not self.is_expired(now)

    def mark_used(self, now: datetime) -> "AuthorizationCode":
        """Terminal transition; a used code can never be used again."""
        if self.used:
            raise InvalidGrantError()
        return self.model_copy(update={"used": True, "used_at": now})
