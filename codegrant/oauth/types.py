"""Request and result types exchanged with callers of the engine."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from codegrant.domain.client import Client


class ConsentDecision(StrEnum):
    """Answer given on the consent screen."""

    APPROVE = "approve"
    DENY = "deny"


class CodeRequest(BaseModel):
    """Parameters of an authorization request, after login."""

    client_identifier: str
    redirect_uri: str
    scope: str | None = None
    code_challenge: str | None = None
    code_challenge_method: str | None = None
    state: str | None = None


class RedemptionResult(BaseModel):
    """What the token-issuance step needs after a successful redemption."""

    user_id: str
    client_id: str
    scope: str | None = None


class ScopeDisplay(BaseModel):
    """A requested scope as shown to the user."""

    name: str
    description: str


class ConsentScreen(BaseModel):
    """Data a consent UI needs to ask the user."""

    client_id: str
    client_name: str
    scopes: list[ScopeDisplay] = Field(default_factory=list)
    redirect_uri: str
    scope: str | None = None
    state: str | None = None
    code_challenge: str | None = None
    code_challenge_method: str | None = None


class ConsentSummary(BaseModel):
    """An active consent as listed to its owner."""

    id: str
    client_id: str
    client_name: str
    scopes: list[str]
    granted_at: datetime
    expires_at: datetime | None = None


class RegisteredClient(BaseModel):
    """A newly registered client with its one-time plaintext secret."""

    client: Client
    client_secret: str


class ClientView(BaseModel):
    """A client as shown to its owner; never carries the secret hash."""

    client_id: str
    client_name: str
    redirect_uris: list[str]
    grant_types: list[str]
    is_public: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_client(cls, client: Client) -> "ClientView":
        return cls(
            client_id=client.client_identifier.value,
            client_name=client.display_name,
            redirect_uris=sorted(client.redirect_uris),
            grant_types=sorted(client.grant_types),
            is_public=client.is_public,
            is_active=client.is_active,
            created_at=client.created_at,
            updated_at=client.updated_at,
        )


class ClientCreated(ClientView):
    """Registration response; the only time the plaintext secret is shown."""

    client_secret: str
