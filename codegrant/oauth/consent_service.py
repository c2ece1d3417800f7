"""User-facing consent management: consent screen, listing, revocation."""

import logging

from codegrant.core.errors import ConsentNotFoundError, ForbiddenError
from codegrant.core.ports import Clock, ClientRepository, ConsentRepository
from codegrant.domain.client import AUTHORIZATION_CODE_GRANT
from codegrant.oauth.client_validator import ClientValidator
from codegrant.oauth.scopes import describe_scopes, split_scope
from codegrant.oauth.types import CodeRequest, ConsentScreen, ConsentSummary

logger = logging.getLogger(__name__)


class ConsentService:
    def __init__(
        self,
        validator: ClientValidator,
        clients: ClientRepository,
        consents: ConsentRepository,
        clock: Clock,
    ) -> None:
        self._validator = validator
        self._clients = clients
        self._consents = consents
        self._clock = clock

    async def prepare_screen(self, request: CodeRequest) -> ConsentScreen:
        """Validate the client and describe what it is asking for."""
        client = await self._validator.validate(
            request.client_identifier,
            request.redirect_uri,
            AUTHORIZATION_CODE_GRANT,
        )
        scopes = split_scope(request.scope)
        return ConsentScreen(
            client_id=client.client_identifier.value,
            client_name=client.display_name,
            scopes=describe_scopes(scopes),
            redirect_uri=request.redirect_uri,
            scope=request.scope,
            state=request.state,
            code_challenge=request.code_challenge,
            code_challenge_method=request.code_challenge_method,
        )

    async def list_for_user(self, user_id: str) -> list[ConsentSummary]:
        """Active consents of a user, with client display names."""
        now = self._clock.now()
        consents = [
            c
            for c in await self._consents.find_all_active_by_user(user_id)
            if c.is_active(now)
        ]
        names: dict[str, str] = {}
        for consent in consents:
            if consent.client_id in names:
                continue
            client = await self._clients.find_by_identifier(consent.client_id)
            names[consent.client_id] = (
                client.display_name if client is not None else consent.client_id
            )

        logger.debug("User %s has %d active consents", user_id, len(consents))
        return [
            ConsentSummary(
                id=c.id,
                client_id=c.client_id,
                client_name=names[c.client_id],
                scopes=sorted(c.scopes),
                granted_at=c.granted_at,
                expires_at=c.expires_at,
            )
            for c in consents
        ]

    async def revoke(self, user_id: str, consent_id: str) -> None:
        """Revoke one of the user's consents. Revoking twice is a no-op."""
        consent = await self._consents.find_by_id(consent_id)
        if consent is None:
            raise ConsentNotFoundError("Consent not found")

        if consent.user_id != user_id:
            logger.warning(
                "User %s attempted to revoke consent %s owned by %s",
                user_id,
                consent_id,
                consent.user_id,
            )
            raise ForbiddenError("You do not have permission to revoke this consent")

        if consent.is_revoked():
            logger.debug("Consent %s already revoked", consent_id)
            return

        await self._consents.revoke(consent_id, self._clock.now())
        logger.info(
            "Consent %s revoked by user %s for client %s",
            consent_id,
            user_id,
            consent.client_id,
        )
