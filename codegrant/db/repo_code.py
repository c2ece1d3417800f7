"""Repository for authorization codes."""

from datetime import datetime
from typing import Any, cast

from sqlalchemy import select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession

from codegrant.db.base import as_utc, as_utc_or_none
from codegrant.db.models_oauth import AuthorizationCodeEntity
from codegrant.domain.auth_code import AuthorizationCode
from codegrant.domain.value_objects import ClientIdentifier, CodeChallenge


def _to_domain(entity: AuthorizationCodeEntity) -> AuthorizationCode:
    return AuthorizationCode(
        code=entity.code,
        user_id=entity.user_id,
        client_id=ClientIdentifier.create(entity.client_id),
        redirect_uri=entity.redirect_uri,
        code_challenge=CodeChallenge.create(
            entity.code_challenge, entity.code_challenge_method
        ),
        scope=entity.scope,
        state=entity.state,
        expires_at=as_utc(entity.expires_at),
        used=entity.used,
        used_at=as_utc_or_none(entity.used_at),
        created_at=as_utc(entity.created_at),
    )


class SqlCodeRepository:
    """Authorization codes stored in the ``authorization_codes`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, code: AuthorizationCode) -> None:
        self._session.add(
            AuthorizationCodeEntity(
                code=code.code,
                client_id=code.client_id.value,
                user_id=code.user_id,
                redirect_uri=code.redirect_uri,
                scope=code.scope,
                state=code.state,
                code_challenge=code.code_challenge.challenge,
                code_challenge_method=code.code_challenge.method.value,
                expires_at=code.expires_at,
                used=code.used,
                used_at=code.used_at,
                created_at=code.created_at,
            )
        )
        await self._session.flush()

    async def find_by_token(self, token: str) -> AuthorizationCode | None:
        stmt = select(AuthorizationCodeEntity).where(
            AuthorizationCodeEntity.code == token
        )
        result = await self._session.execute(stmt)
        entity = result.scalar_one_or_none()
        return _to_domain(entity) if entity is not None else None

    async def mark_used_if_unused(self, token: str, used_at: datetime) -> bool:
        """Flip ``used`` with a single conditional UPDATE.

        The ``used = false`` guard lets exactly one of several concurrent
        redemptions affect the row.
        """
        stmt = (
            update(AuthorizationCodeEntity)
            .where(
                AuthorizationCodeEntity.code == token,
                AuthorizationCodeEntity.used.is_(False),
            )
            .values(used=True, used_at=used_at)
        )
        result = cast("CursorResult[Any]", await self._session.execute(stmt))
        await self._session.flush()
        return result.rowcount == 1
