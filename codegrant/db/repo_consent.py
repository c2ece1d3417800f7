"""Repository for user consent records."""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from codegrant.db.base import as_utc, as_utc_or_none
from codegrant.db.models_oauth import UserConsentEntity
from codegrant.domain.consent import Consent


def _to_domain(entity: UserConsentEntity) -> Consent:
    return Consent(
        id=entity.id,
        user_id=entity.user_id,
        client_id=entity.client_id,
        scopes=frozenset(entity.scopes or []),
        granted_at=as_utc(entity.granted_at),
        expires_at=as_utc_or_none(entity.expires_at),
        revoked_at=as_utc_or_none(entity.revoked_at),
    )


class SqlConsentRepository:
    """Consents stored in the ``user_consents`` table.

    Writes are flushed into the caller's session and become visible to
    other sessions only when that session commits, so a revoke followed by
    a save commits or rolls back together.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_active_by_user_and_client(
        self, user_id: str, client_id: str
    ) -> Consent | None:
        stmt = (
            select(UserConsentEntity)
            .where(
                UserConsentEntity.user_id == user_id,
                UserConsentEntity.client_id == client_id,
                UserConsentEntity.revoked_at.is_(None),
            )
            .order_by(UserConsentEntity.granted_at.desc())
        )
        result = await self._session.execute(stmt)
        entity = result.scalars().first()
        return _to_domain(entity) if entity is not None else None

    async def find_by_id(self, consent_id: str) -> Consent | None:
        entity = await self._session.get(UserConsentEntity, consent_id)
        return _to_domain(entity) if entity is not None else None

    async def find_all_active_by_user(self, user_id: str) -> list[Consent]:
        stmt = (
            select(UserConsentEntity)
            .where(
                UserConsentEntity.user_id == user_id,
                UserConsentEntity.revoked_at.is_(None),
            )
            .order_by(UserConsentEntity.granted_at.desc())
        )
        result = await self._session.execute(stmt)
        return [_to_domain(e) for e in result.scalars().all()]

    async def save(self, consent: Consent) -> None:
        self._session.add(
            UserConsentEntity(
                id=consent.id,
                user_id=consent.user_id,
                client_id=consent.client_id,
                scopes=sorted(consent.scopes),
                granted_at=consent.granted_at,
                expires_at=consent.expires_at,
                revoked_at=consent.revoked_at,
            )
        )
        await self._session.flush()

    async def revoke(self, consent_id: str, revoked_at: datetime) -> None:
        stmt = (
            update(UserConsentEntity)
            .where(
                UserConsentEntity.id == consent_id,
                UserConsentEntity.revoked_at.is_(None),
            )
            .values(revoked_at=revoked_at)
        )
        await self._session.execute(stmt)
        await self._session.flush()
