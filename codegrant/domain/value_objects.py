"""Self-validating value objects: client identifier and PKCE challenge."""

import hashlib
import re
import secrets
from base64 import urlsafe_b64encode
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from codegrant.core.errors import InvalidRequestError

S256_CHALLENGE_LENGTH = 43
PLAIN_CHALLENGE_MIN = 43
PLAIN_CHALLENGE_MAX = 128

_S256_PATTERN = re.compile(r"[A-Za-z0-9_-]+")
_UNRESERVED_PATTERN = re.compile(r"[A-Za-z0-9._~-]+")


class ChallengeMethod(StrEnum):
    """PKCE transformation applied to the verifier."""

    S256 = "S256"
    PLAIN = "plain"


def s256_challenge(verifier: str) -> str:
    """base64url(SHA256(verifier)) without padding."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


class ClientIdentifier(BaseModel):
    """Public identifier of an OAuth client."""

    model_config = ConfigDict(frozen=True)

    value: str

    @classmethod
    def create(cls, value: str | None) -> "ClientIdentifier":
        if value is None or not value.strip():
            raise InvalidRequestError("client_id must not be empty")
        return cls(value=value)

    def __str__(self) -> str:
        return self.value


class CodeChallenge(BaseModel):
    """PKCE challenge bound to an authorization code."""

    model_config = ConfigDict(frozen=True)

    challenge: str
    method: ChallengeMethod

    @classmethod
    def create(cls, challenge: str | None, method: str | None) -> "CodeChallenge":
        """Validate a challenge string and its method.

        An absent method means S256. S256 challenges must be a 43 character
        base64url digest; plain challenges follow the RFC 7636 verifier
        alphabet and length.
        """
        if not challenge:
            raise InvalidRequestError("code_challenge is required")
        try:
            parsed = ChallengeMethod(method or ChallengeMethod.S256)
        except ValueError:
            raise InvalidRequestError(
                f"Unsupported code_challenge_method: {method}"
            ) from None

        if parsed is ChallengeMethod.S256:
            if len(challenge) != S256_CHALLENGE_LENGTH or not _S256_PATTERN.fullmatch(
                challenge
            ):
                raise InvalidRequestError("Malformed S256 code_challenge")
        elif not (
            PLAIN_CHALLENGE_MIN <= len(challenge) <= PLAIN_CHALLENGE_MAX
            and _UNRESERVED_PATTERN.fullmatch(challenge)
        ):
            raise InvalidRequestError("Malformed plain code_challenge")

        return cls(challenge=challenge, method=parsed)

    def verify(self, verifier: str | None) -> bool:
        """Check a code_verifier against this challenge."""
        if not verifier:
            return False
        if self.method is ChallengeMethod.S256:
            try:
                computed = s256_challenge(verifier)
            except UnicodeEncodeError:
                return False
            return secrets.compare_digest(computed, self.challenge)
        return secrets.compare_digest(
            verifier.encode("utf-8"), self.challenge.encode("utf-8")
        )
