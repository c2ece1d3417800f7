"""Client lookup and authorization-request validation."""

import logging

from codegrant.core.errors import (
    ClientNotFoundError,
    RedirectUriMismatchError,
    UnsupportedGrantTypeError,
)
from codegrant.core.ports import ClientRepository
from codegrant.domain.client import Client

logger = logging.getLogger(__name__)


class ClientValidator:
    """Checks that a client is known, active and allowed to make a request."""

    def __init__(self, clients: ClientRepository) -> None:
        self._clients = clients

    async def validate(
        self, client_identifier: str, redirect_uri: str, grant_type: str
    ) -> Client:
        """Return the client or raise; never writes."""
        client = await self._clients.find_by_identifier(client_identifier)
        if client is None or not client.is_active:
            logger.debug("Client %s unknown or inactive", client_identifier)
            raise ClientNotFoundError("Client not found")

        if not client.allows_redirect_uri(redirect_uri):
            logger.debug(
                "Redirect URI %s not registered for client %s",
                redirect_uri,
                client_identifier,
            )
            raise RedirectUriMismatchError("redirect_uri is not registered")

        if not client.supports_grant_type(grant_type):
            logger.debug(
                "Grant type %s not allowed for client %s",
                grant_type,
                client_identifier,
            )
            raise UnsupportedGrantTypeError(
                f"Client may not use grant type {grant_type}"
            )

        return client
