"""In-memory ports and wired services for engine unit tests."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from codegrant.domain.auth_code import AuthorizationCode
from codegrant.domain.client import Client
from codegrant.domain.consent import Consent
from codegrant.oauth.client_validator import ClientValidator
from codegrant.oauth.code_issuer import CodeIssuer
from codegrant.oauth.consent_gate import ConsentGate
from codegrant.oauth.token_exchanger import TokenExchanger

START = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, current: datetime = START) -> None:
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> None:
        self.current += delta


class CountingRandom:
    """Deterministic, distinct byte strings."""

    def __init__(self) -> None:
        self.calls: list[int] = []

    def generate_bytes(self, n: int) -> bytes:
        self.calls.append(n)
        return len(self.calls).to_bytes(n, "big")


class SequentialIds:
    def __init__(self, prefix: str = "id") -> None:
        self._prefix = prefix
        self._next = 0

    def generate(self) -> str:
        self._next += 1
        return f"{self._prefix}-{self._next}"


class InMemoryClientRepository:
    def __init__(self) -> None:
        self.clients: dict[str, Client] = {}

    async def find_by_identifier(self, client_identifier: str) -> Client | None:
        return self.clients.get(client_identifier)

    async def find_by_system_role(self, role: str) -> Client | None:
        for client in self.clients.values():
            if client.is_system_client and client.system_role == role:
                return client
        return None

    async def list_by_owner(self, owner_user_id: str) -> list[Client]:
        return [c for c in self.clients.values() if c.is_owned_by(owner_user_id)]

    async def save(self, client: Client) -> None:
        self.clients[client.client_identifier.value] = client

    async def update(self, client: Client) -> None:
        self.clients[client.client_identifier.value] = client


class InMemoryConsentRepository:
    """Mirrors the store's rule of one non-revoked consent per pair."""

    def __init__(self) -> None:
        self.consents: dict[str, Consent] = {}
        self.saves = 0

    def _open(self, user_id: str, client_id: str) -> list[Consent]:
        return [
            c
            for c in self.consents.values()
            if c.user_id == user_id and c.client_id == client_id and not c.is_revoked()
        ]

    async def find_active_by_user_and_client(
        self, user_id: str, client_id: str
    ) -> Consent | None:
        found = sorted(self._open(user_id, client_id), key=lambda c: c.granted_at)
        return found[-1] if found else None

    async def find_by_id(self, consent_id: str) -> Consent | None:
        return self.consents.get(consent_id)

    async def find_all_active_by_user(self, user_id: str) -> list[Consent]:
        return [
            c
            for c in self.consents.values()
            if c.user_id == user_id and not c.is_revoked()
        ]

    async def save(self, consent: Consent) -> None:
        if self._open(consent.user_id, consent.client_id):
            raise ValueError("duplicate active consent")
        self.saves += 1
        self.consents[consent.id] = consent

    async def revoke(self, consent_id: str, revoked_at: datetime) -> None:
        current = self.consents[consent_id]
        self.consents[consent_id] = current.revoked(revoked_at)


class InMemoryCodeRepository:
    """Yields on every read so concurrent redemptions interleave."""

    def __init__(self) -> None:
        self.codes: dict[str, AuthorizationCode] = {}

    async def save(self, code: AuthorizationCode) -> None:
        self.codes[code.code] = code

    async def find_by_token(self, token: str) -> AuthorizationCode | None:
        found = self.codes.get(token)
        await asyncio.sleep(0)
        return found

    async def mark_used_if_unused(self, token: str, used_at: datetime) -> bool:
        current = self.codes.get(token)
        if current is None or current.used:
            return False
        self.codes[token] = current.mark_used(used_at)
        return True


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def random_source() -> CountingRandom:
    return CountingRandom()


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
async def clients(client_factory) -> InMemoryClientRepository:
    repo = InMemoryClientRepository()
    await repo.save(client_factory())
    return repo


@pytest.fixture
def consents() -> InMemoryConsentRepository:
    return InMemoryConsentRepository()


@pytest.fixture
def codes() -> InMemoryCodeRepository:
    return InMemoryCodeRepository()


@pytest.fixture
def validator(clients: InMemoryClientRepository) -> ClientValidator:
    return ClientValidator(clients)


@pytest.fixture
def gate(
    consents: InMemoryConsentRepository, clock: FixedClock, ids: SequentialIds
) -> ConsentGate:
    return ConsentGate(consents, clock, ids)


@pytest.fixture
def issuer(
    validator: ClientValidator,
    gate: ConsentGate,
    codes: InMemoryCodeRepository,
    clock: FixedClock,
    random_source: CountingRandom,
) -> CodeIssuer:
    return CodeIssuer(validator, gate, codes, clock, random_source)


@pytest.fixture
def exchanger(codes: InMemoryCodeRepository, clock: FixedClock) -> TokenExchanger:
    return TokenExchanger(codes, clock)
