"""Startup provisioning of consent-exempt system clients."""

import logging

from codegrant.core.errors import BootstrapError
from codegrant.core.ports import Clock, ClientRepository, IdGenerator
from codegrant.core.settings import AuthSettings
from codegrant.crypto.password import hash_secret, verify_secret
from codegrant.domain.client import BFF_ROLE, DEFAULT_GRANT_TYPES, Client

logger = logging.getLogger(__name__)

MIN_SYSTEM_SECRET_LENGTH = 32


async def ensure_system_clients(
    clients: ClientRepository,
    settings: AuthSettings,
    clock: Clock,
    ids: IdGenerator,
) -> Client:
    """Return the BFF system client, creating it on first start."""
    secret = settings.bff_client_secret
    if len(secret) < MIN_SYSTEM_SECRET_LENGTH:
        raise BootstrapError(
            f"AUTH_BFF_CLIENT_SECRET must be at least "
            f"{MIN_SYSTEM_SECRET_LENGTH} characters long"
        )

    existing = await clients.find_by_system_role(BFF_ROLE)
    if existing is not None:
        if not verify_secret(secret, existing.secret_hash):
            logger.warning(
                "Stored secret of BFF client %s does not match AUTH_BFF_CLIENT_SECRET",
                existing.client_identifier,
            )
        return existing

    client = Client.create(
        id=ids.generate(),
        client_identifier=settings.bff_client_id,
        secret_hash=hash_secret(secret),
        display_name=settings.bff_client_name,
        redirect_uris=settings.get_bff_redirect_uri_list(),
        grant_types=DEFAULT_GRANT_TYPES,
        is_public=False,
        is_system_client=True,
        system_role=BFF_ROLE,
        created_at=clock.now(),
    )
    await clients.save(client)
    logger.info("BFF system client %s created", client.client_identifier)
    return client
