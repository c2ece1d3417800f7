"""Tests for SqlConsentRepository."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from codegrant.db.repo_consent import SqlConsentRepository
from codegrant.domain.client import Client
from codegrant.domain.consent import Consent

GRANTED = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _consent(consent_id: str, user_id: str = "u1", offset: int = 0) -> Consent:
    return Consent.grant(
        id=consent_id,
        user_id=user_id,
        client_id="acme",
        scopes=["read", "profile"],
        granted_at=GRANTED + timedelta(minutes=offset),
    )


@pytest.fixture
def repo(db_session: AsyncSession) -> SqlConsentRepository:
    return SqlConsentRepository(db_session)


class TestFind:
    """Lookups."""

    async def test_round_trip(
        self, repo: SqlConsentRepository, acme_client: Client
    ) -> None:
        consent = _consent("c1")
        await repo.save(consent)

        assert await repo.find_by_id("c1") == consent
        assert await repo.find_active_by_user_and_client("u1", "acme") == consent

    async def test_missing(self, repo: SqlConsentRepository) -> None:
        assert await repo.find_by_id("nope") is None
        assert await repo.find_active_by_user_and_client("u1", "acme") is None

    async def test_all_active_by_user(
        self, repo: SqlConsentRepository, acme_client: Client
    ) -> None:
        await repo.save(_consent("c1"))
        await repo.save(_consent("c2", user_id="u2"))

        found = await repo.find_all_active_by_user("u1")
        assert [c.id for c in found] == ["c1"]


class TestRevoke:
    """Revocation and the one-active-consent rule."""

    async def test_revoke_hides_from_active_lookups(
        self, repo: SqlConsentRepository, acme_client: Client
    ) -> None:
        await repo.save(_consent("c1"))
        at = GRANTED + timedelta(hours=1)

        await repo.revoke("c1", at)

        assert await repo.find_active_by_user_and_client("u1", "acme") is None
        assert await repo.find_all_active_by_user("u1") == []
        revoked = await repo.find_by_id("c1")
        assert revoked is not None
        assert revoked.revoked_at == at

    async def test_revoke_keeps_first_timestamp(
        self, repo: SqlConsentRepository, acme_client: Client
    ) -> None:
        await repo.save(_consent("c1"))
        first = GRANTED + timedelta(hours=1)
        await repo.revoke("c1", first)
        await repo.revoke("c1", first + timedelta(hours=1))

        revoked = await repo.find_by_id("c1")
        assert revoked is not None
        assert revoked.revoked_at == first

    async def test_replacement_after_revoke(
        self, repo: SqlConsentRepository, acme_client: Client
    ) -> None:
        await repo.save(_consent("c1"))
        await repo.revoke("c1", GRANTED + timedelta(minutes=1))
        await repo.save(_consent("c2", offset=1))

        active = await repo.find_active_by_user_and_client("u1", "acme")
        assert active is not None
        assert active.id == "c2"

    async def test_second_active_consent_rejected(
        self, repo: SqlConsentRepository, acme_client: Client
    ) -> None:
        await repo.save(_consent("c1"))
        with pytest.raises(IntegrityError):
            await repo.save(_consent("c2", offset=1))
