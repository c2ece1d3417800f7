"""Collaborator interfaces consumed by the authorization code engine."""

import secrets
from datetime import UTC, datetime
from typing import Protocol

import uuid_utils

from codegrant.domain.auth_code import AuthorizationCode
from codegrant.domain.client import Client
from codegrant.domain.consent import Consent


class ClientRepository(Protocol):
    async def find_by_identifier(self, client_identifier: str) -> Client | None: ...

    async def find_by_system_role(self, role: str) -> Client | None: ...

    async def list_by_owner(self, owner_user_id: str) -> list[Client]: ...

    async def save(self, client: Client) -> None: ...

    async def update(self, client: Client) -> None: ...


class ConsentRepository(Protocol):
    async def find_active_by_user_and_client(
        self, user_id: str, client_id: str
    ) -> Consent | None:
        """Latest non-revoked consent for the pair; expiry is not applied."""
        ...

    async def find_by_id(self, consent_id: str) -> Consent | None: ...

    async def find_all_active_by_user(self, user_id: str) -> list[Consent]: ...

    async def save(self, consent: Consent) -> None: ...

    async def revoke(self, consent_id: str, revoked_at: datetime) -> None:
        """Set revoked_at unless already set."""
        ...


class CodeRepository(Protocol):
    async def save(self, code: AuthorizationCode) -> None: ...

    async def find_by_token(self, token: str) -> AuthorizationCode | None: ...

    async def mark_used_if_unused(self, token: str, used_at: datetime) -> bool:
        """Atomically flip ``used``; False when another caller got there first."""
        ...


class Clock(Protocol):
    def now(self) -> datetime: ...


class RandomSource(Protocol):
    def generate_bytes(self, n: int) -> bytes: ...


class IdGenerator(Protocol):
    def generate(self) -> str: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class SystemRandomSource:
    """Operating system CSPRNG."""

    def generate_bytes(self, n: int) -> bytes:
        return secrets.token_bytes(n)


class Uuid7Generator:
    """Time-ordered UUIDv7 identifiers."""

    def generate(self) -> str:
        return str(uuid_utils.uuid7())
