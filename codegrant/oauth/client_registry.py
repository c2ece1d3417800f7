"""Owner-initiated client registration and lifecycle."""

import logging

from codegrant.core.errors import ClientNotFoundError, ForbiddenError
from codegrant.core.ports import Clock, ClientRepository, IdGenerator
from codegrant.crypto.password import generate_client_secret, hash_secret
from codegrant.domain.client import DEFAULT_GRANT_TYPES, Client
from codegrant.oauth.types import RegisteredClient

logger = logging.getLogger(__name__)


class ClientRegistry:
    """Creates, updates and soft-deletes clients on behalf of their owners."""

    def __init__(
        self, clients: ClientRepository, clock: Clock, ids: IdGenerator
    ) -> None:
        self._clients = clients
        self._clock = clock
        self._ids = ids

    async def register(
        self,
        owner_user_id: str,
        display_name: str,
        redirect_uris: list[str],
        grant_types: list[str] | None = None,
        is_public: bool = False,
    ) -> RegisteredClient:
        """Register a client; the plaintext secret is only returned here."""
        secret = generate_client_secret()
        client = Client.create(
            id=self._ids.generate(),
            client_identifier=self._ids.generate(),
            secret_hash=hash_secret(secret),
            display_name=display_name,
            redirect_uris=redirect_uris,
            grant_types=grant_types or DEFAULT_GRANT_TYPES,
            is_public=is_public,
            owner_user_id=owner_user_id,
            created_at=self._clock.now(),
        )
        await self._clients.save(client)
        logger.info(
            "Client %s (%s) registered by user %s",
            client.client_identifier,
            display_name,
            owner_user_id,
        )
        return RegisteredClient(client=client, client_secret=secret)

    async def list_for_owner(self, owner_user_id: str) -> list[Client]:
        return await self._clients.list_by_owner(owner_user_id)

    async def _owned(self, owner_user_id: str, client_identifier: str) -> Client:
        client = await self._clients.find_by_identifier(client_identifier)
        if client is None:
            raise ClientNotFoundError("Client not found")
        if not client.is_owned_by(owner_user_id) or not client.can_be_modified():
            logger.warning(
                "User %s attempted to modify client %s they do not own",
                owner_user_id,
                client_identifier,
            )
            raise ForbiddenError("You do not have permission to modify this client")
        return client

    async def update(
        self,
        owner_user_id: str,
        client_identifier: str,
        *,
        display_name: str | None = None,
        redirect_uris: list[str] | None = None,
        grant_types: list[str] | None = None,
        is_public: bool | None = None,
    ) -> Client:
        client = await self._owned(owner_user_id, client_identifier)
        updated = client.with_changes(
            self._clock.now(),
            display_name=display_name,
            redirect_uris=redirect_uris,
            grant_types=grant_types,
            is_public=is_public,
        )
        await self._clients.update(updated)
        logger.info("Client %s updated by user %s", client_identifier, owner_user_id)
        return updated

    async def deactivate(self, owner_user_id: str, client_identifier: str) -> None:
        """Soft delete. Codes and consents keep referencing the row."""
        client = await self._owned(owner_user_id, client_identifier)
        if not client.is_active:
            logger.debug("Client %s already inactive", client_identifier)
            return
        await self._clients.update(client.deactivated(self._clock.now()))
        logger.info(
            "Client %s deactivated by user %s", client_identifier, owner_user_id
        )
