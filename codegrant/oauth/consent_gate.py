"""Consent checks and consent recording."""

import logging
from collections.abc import Iterable
from datetime import timedelta

from codegrant.core.errors import ConsentDeniedError, OAuthError
from codegrant.core.ports import Clock, ConsentRepository, IdGenerator
from codegrant.domain.consent import Consent
from codegrant.oauth.types import ConsentDecision

logger = logging.getLogger(__name__)


class ConsentGate:
    """Decides whether a user has consented, and records new decisions.

    ``record`` revokes the pair's current consent and inserts the new one
    through the same repository, so both writes land in one store
    transaction. The store's unique index on non-revoked pairs rejects a
    second active consent if two approvals race.
    """

    def __init__(
        self,
        consents: ConsentRepository,
        clock: Clock,
        ids: IdGenerator,
        consent_ttl: timedelta | None = None,
    ) -> None:
        self._consents = consents
        self._clock = clock
        self._ids = ids
        self._consent_ttl = consent_ttl

    async def check(
        self, user_id: str, client_id: str, requested_scopes: Iterable[str]
    ) -> bool:
        """True when an active consent covers every requested scope.

        An empty request only needs some active consent to exist.
        """
        requested = list(requested_scopes)
        consent = await self._consents.find_active_by_user_and_client(
            user_id, client_id
        )
        if consent is None:
            logger.debug("No consent for user %s and client %s", user_id, client_id)
            return False

        if not consent.is_active(self._clock.now()):
            logger.debug(
                "Consent %s for user %s is revoked or expired", consent.id, user_id
            )
            return False

        if requested and not consent.covers(requested):
            logger.debug(
                "Consent %s does not cover scopes %s", consent.id, sorted(requested)
            )
            return False

        return True

    async def record(
        self,
        user_id: str,
        client_id: str,
        scopes: Iterable[str],
        decision: ConsentDecision,
    ) -> Consent:
        """Store an approval, replacing any current consent for the pair.

        A denial writes nothing and raises ``ConsentDeniedError``.
        """
        try:
            return await self._record(user_id, client_id, scopes, decision)
        except OAuthError:
            raise
        except Exception:
            logger.exception(
                "Unexpected error recording consent of user %s for client %s",
                user_id,
                client_id,
            )
            raise

    async def _record(
        self,
        user_id: str,
        client_id: str,
        scopes: Iterable[str],
        decision: ConsentDecision,
    ) -> Consent:
        if decision is not ConsentDecision.APPROVE:
            logger.info("User %s denied consent for client %s", user_id, client_id)
            raise ConsentDeniedError("User denied consent")

        now = self._clock.now()
        existing = await self._consents.find_active_by_user_and_client(
            user_id, client_id
        )
        if existing is not None:
            await self._consents.revoke(existing.id, now)

        consent = Consent.grant(
            id=self._ids.generate(),
            user_id=user_id,
            client_id=client_id,
            scopes=scopes,
            granted_at=now,
            expires_at=now + self._consent_ttl if self._consent_ttl else None,
        )
        await self._consents.save(consent)

        logger.info(
            "Consent %s recorded for user %s and client %s (replaced %s)",
            consent.id,
            user_id,
            client_id,
            existing.id if existing else None,
        )
        return consent
