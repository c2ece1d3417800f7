"""Repository for OAuth client records."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from codegrant.db.base import as_utc
from codegrant.db.models_oauth import OAuthClientEntity
from codegrant.domain.client import Client


def _to_domain(entity: OAuthClientEntity) -> Client:
    return Client.create(
        id=entity.id,
        client_identifier=entity.client_identifier,
        secret_hash=entity.client_secret_hash,
        display_name=entity.client_name,
        redirect_uris=entity.redirect_uris or [],
        grant_types=entity.grant_types or [],
        is_public=entity.is_public,
        is_active=entity.is_active,
        owner_user_id=entity.owner_user_id,
        is_system_client=entity.is_system_client,
        system_role=entity.system_role,
        created_at=as_utc(entity.created_at),
        updated_at=as_utc(entity.updated_at),
    )


def _apply(entity: OAuthClientEntity, client: Client) -> None:
    entity.client_secret_hash = client.secret_hash
    entity.client_name = client.display_name
    entity.redirect_uris = sorted(client.redirect_uris)
    entity.grant_types = sorted(client.grant_types)
    entity.is_public = client.is_public
    entity.is_active = client.is_active
    entity.owner_user_id = client.owner_user_id
    entity.is_system_client = client.is_system_client
    entity.system_role = client.system_role
    entity.updated_at = client.updated_at


class SqlClientRepository:
    """OAuth clients stored in the ``oauth_clients`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get_entity(self, client_identifier: str) -> OAuthClientEntity | None:
        stmt = select(OAuthClientEntity).where(
            OAuthClientEntity.client_identifier == client_identifier
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_identifier(self, client_identifier: str) -> Client | None:
        """Look up a client by its public identifier, active or not."""
        entity = await self._get_entity(client_identifier)
        return _to_domain(entity) if entity is not None else None

    async def find_by_system_role(self, role: str) -> Client | None:
        stmt = select(OAuthClientEntity).where(
            OAuthClientEntity.is_system_client.is_(True),
            OAuthClientEntity.system_role == role,
        )
        result = await self._session.execute(stmt)
        entity = result.scalars().first()
        return _to_domain(entity) if entity is not None else None

    async def list_by_owner(self, owner_user_id: str) -> list[Client]:
        stmt = (
            select(OAuthClientEntity)
            .where(OAuthClientEntity.owner_user_id == owner_user_id)
            .order_by(OAuthClientEntity.created_at)
        )
        result = await self._session.execute(stmt)
        return [_to_domain(e) for e in result.scalars().all()]

    async def save(self, client: Client) -> None:
        """Persist a new client."""
        entity = OAuthClientEntity(
            id=client.id,
            client_identifier=client.client_identifier.value,
            created_at=client.created_at,
        )
        _apply(entity, client)
        self._session.add(entity)
        await self._session.flush()

    async def update(self, client: Client) -> None:
        """Overwrite the mutable fields of an existing client."""
        entity = await self._get_entity(client.client_identifier.value)
        if entity is None:
            raise LookupError(f"client {client.client_identifier} does not exist")
        _apply(entity, client)
        await self._session.flush()
