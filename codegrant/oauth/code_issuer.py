"""Authorization code issuance with PKCE binding."""

import logging
from base64 import urlsafe_b64encode
from datetime import timedelta

from codegrant.core.errors import ConsentRequiredError, OAuthError
from codegrant.core.ports import Clock, CodeRepository, RandomSource
from codegrant.domain.auth_code import AuthorizationCode
from codegrant.domain.client import AUTHORIZATION_CODE_GRANT
from codegrant.domain.value_objects import ClientIdentifier, CodeChallenge
from codegrant.oauth.client_validator import ClientValidator
from codegrant.oauth.consent_gate import ConsentGate
from codegrant.oauth.scopes import split_scope
from codegrant.oauth.types import CodeRequest

logger = logging.getLogger(__name__)

CODE_ENTROPY_BYTES = 32
DEFAULT_CODE_TTL = timedelta(minutes=1)


def encode_code(raw: bytes) -> str:
    """URL-safe text form of a random code token."""
    return urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


class CodeIssuer:
    """Mints single-use authorization codes for consented requests."""

    def __init__(
        self,
        validator: ClientValidator,
        consent_gate: ConsentGate,
        codes: CodeRepository,
        clock: Clock,
        random: RandomSource,
        ttl: timedelta = DEFAULT_CODE_TTL,
    ) -> None:
        self._validator = validator
        self._consent_gate = consent_gate
        self._codes = codes
        self._clock = clock
        self._random = random
        self._ttl = ttl

    async def issue(self, user_id: str, request: CodeRequest) -> AuthorizationCode:
        """Validate the request and persist a fresh authorization code.

        Raises ``ConsentRequiredError`` when the user still has to approve
        the requested scopes; client and PKCE failures propagate as their
        own ``OAuthError`` types.
        """
        logger.debug(
            "Issuing authorization code for user %s, client %s",
            user_id,
            request.client_identifier,
        )
        try:
            return await self._issue(user_id, request)
        except OAuthError:
            raise
        except Exception:
            logger.exception(
                "Unexpected error issuing authorization code for client %s",
                request.client_identifier,
            )
            raise

    async def _issue(self, user_id: str, request: CodeRequest) -> AuthorizationCode:
        client = await self._validator.validate(
            request.client_identifier,
            request.redirect_uri,
            AUTHORIZATION_CODE_GRANT,
        )

        scopes = split_scope(request.scope)
        if client.requires_consent():
            has_consent = await self._consent_gate.check(
                user_id, request.client_identifier, scopes
            )
            if not has_consent:
                logger.info(
                    "Consent required for user %s, client %s, scopes %s",
                    user_id,
                    request.client_identifier,
                    scopes,
                )
                raise ConsentRequiredError("User consent required")

        client_id = ClientIdentifier.create(client.client_identifier.value)
        challenge = CodeChallenge.create(
            request.code_challenge, request.code_challenge_method
        )

        token = encode_code(self._random.generate_bytes(CODE_ENTROPY_BYTES))
        auth_code = AuthorizationCode.issue(
            code=token,
            user_id=user_id,
            client_id=client_id,
            redirect_uri=request.redirect_uri,
            code_challenge=challenge,
            created_at=self._clock.now(),
            ttl=self._ttl,
            scope=" ".join(scopes) or None,
            state=request.state,
        )
        await self._codes.save(auth_code)

        logger.info(
            "Authorization code %s... issued for user %s, client %s, expires %s",
            token[:8],
            user_id,
            client_id,
            auth_code.expires_at.isoformat(),
        )
        return auth_code
