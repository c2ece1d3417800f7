"""User consent domain record."""

from collections.abc import Iterable
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from codegrant.core.errors import InvalidRequestError


class Consent(BaseModel):
    """A user's approval of a client's access to a set of scopes.

    Records are never edited: re-approval inserts a new record and the old
    one is revoked.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    client_id: str
    scopes: frozenset[str]
    granted_at: datetime
    expires_at: datetime | None = None
    revoked_at: datetime | None = None

    @classmethod
    def grant(
        cls,
        *,
        id: str,
        user_id: str,
        client_id: str,
        scopes: Iterable[str],
        granted_at: datetime,
        expires_at: datetime | None = None,
    ) -> "Consent":
        if not user_id or not client_id:
            raise InvalidRequestError("consent needs a user and a client")
        if expires_at is not None and expires_at <= granted_at:
            raise InvalidRequestError("consent must expire after it is granted")
        return cls(
            id=id,
            user_id=user_id,
            client_id=client_id,
            scopes=frozenset(scopes),
            granted_at=granted_at,
            expires_at=expires_at,
            revoked_at=None,
        )

    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: datetime) -> bool:
        if self.expires_at is None:
            return False
        return now > self.expires_at

    def is_active(self, now: datetime) -> bool:
        return not self.is_revoked() and not self.is_expired(now)

    def covers(self, requested: Iterable[str]) -> bool:
        """True when every requested scope was granted."""
        return all(scope in self.scopes for scope in requested)

    def revoked(self, now: datetime) -> "Consent":
        if self.is_revoked():
            return self
        return self.model_copy(update={"revoked_at": now})
