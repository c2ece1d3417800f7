"""Shared test fixtures for codegrant."""

from collections.abc import AsyncIterator
from datetime import UTC, datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from codegrant.core.app import create_app
from codegrant.db.base import BaseEntity
from codegrant.db.engine import get_session
from codegrant.db.repo_client import SqlClientRepository
from codegrant.domain.client import Client
from codegrant.domain.value_objects import s256_challenge

CLIENT_ID = "acme"
REDIRECT_URI = "https://acme.example/cb"
VERIFIER = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
CHALLENGE = s256_challenge(VERIFIER)


def make_client(
    client_identifier: str = CLIENT_ID,
    *,
    redirect_uris: list[str] | None = None,
    grant_types: list[str] | None = None,
    is_active: bool = True,
    owner_user_id: str | None = "owner-1",
    is_system_client: bool = False,
    system_role: str | None = None,
) -> Client:
    """Build a client record with sensible defaults."""
    return Client.create(
        id=f"id-{client_identifier}",
        client_identifier=client_identifier,
        secret_hash="not-a-real-hash",
        display_name=f"{client_identifier.title()} App",
        redirect_uris=redirect_uris or [REDIRECT_URI],
        grant_types=grant_types or ["authorization_code"],
        is_active=is_active,
        owner_user_id=None if is_system_client else owner_user_id,
        is_system_client=is_system_client,
        system_role=system_role,
        created_at=datetime(2026, 1, 1, tzinfo=UTC),
    )


@pytest.fixture(autouse=True)
def _set_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep environment-driven settings deterministic."""
    monkeypatch.setenv("AUTH_AUTH_CODE_TTL_MINUTES", "1")
    monkeypatch.delenv("AUTH_BFF_CLIENT_SECRET", raising=False)


@pytest.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    """Create an in-memory SQLite async session for tests."""
    engine = create_async_engine("sqlite+aiosqlite://", echo=False)

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, _rec) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(BaseEntity.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
async def acme_client(db_session: AsyncSession) -> Client:
    """Persist the "acme" client used across tests."""
    client = make_client()
    await SqlClientRepository(db_session).save(client)
    return client


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Create an httpx test client with DB session override."""
    app = create_app()

    async def _override_session() -> AsyncIterator[AsyncSession]:
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_session] = _override_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def client_factory():
    """Expose make_client to test modules."""
    return make_client


@pytest.fixture
def pkce() -> tuple[str, str]:
    """A (verifier, S256 challenge) pair."""
    return VERIFIER, CHALLENGE
