"""Authorization code redemption."""

import logging

from codegrant.core.errors import InvalidGrantError, OAuthError
from codegrant.core.ports import Clock, CodeRepository
from codegrant.oauth.types import RedemptionResult

logger = logging.getLogger(__name__)


class TokenExchanger:
    """Redeems an authorization code exactly once.

    Every rejection raises the same ``InvalidGrantError``; the specific
    reason is only written to the debug log.
    """

    def __init__(self, codes: CodeRepository, clock: Clock) -> None:
        self._codes = codes
        self._clock = clock

    async def redeem(
        self,
        code: str,
        verifier: str | None,
        client_identifier: str,
        redirect_uri: str,
    ) -> RedemptionResult:
        try:
            return await self._redeem(code, verifier, client_identifier, redirect_uri)
        except OAuthError:
            raise
        except Exception:
            logger.exception(
                "Unexpected error redeeming authorization code for client %s",
                client_identifier,
            )
            raise

    async def _redeem(
        self,
        code: str,
        verifier: str | None,
        client_identifier: str,
        redirect_uri: str,
    ) -> RedemptionResult:
        prefix = code[:8]
        auth_code = await self._codes.find_by_token(code)
        if auth_code is None:
            logger.debug("Code %s... not found", prefix)
            raise InvalidGrantError()

        now = self._clock.now()
        if not auth_code.is_redeemable(now):
            logger.debug("Code %s... already used or expired", prefix)
            raise InvalidGrantError()

        if (
            auth_code.client_id.value != client_identifier
            or auth_code.redirect_uri != redirect_uri
        ):
            logger.debug("Code %s... presented with mismatched client", prefix)
            raise InvalidGrantError()

        if not auth_code.code_challenge.verify(verifier):
            logger.debug("Code %s... failed PKCE verification", prefix)
            raise InvalidGrantError()

        if not await self._codes.mark_used_if_unused(code, now):
            logger.info("Code %s... lost a concurrent redemption race", prefix)
            raise InvalidGrantError()

        logger.info(
            "Code %s... redeemed by client %s for user %s",
            prefix,
            client_identifier,
            auth_code.user_id,
        )
        return RedemptionResult(
            user_id=auth_code.user_id,
            client_id=auth_code.client_id.value,
            scope=auth_code.scope,
        )
