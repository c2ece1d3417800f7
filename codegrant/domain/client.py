"""OAuth client domain record."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from codegrant.core.errors import InvalidRequestError
from codegrant.domain.value_objects import ClientIdentifier

AUTHORIZATION_CODE_GRANT = "authorization_code"
REFRESH_TOKEN_GRANT = "refresh_token"
DEFAULT_GRANT_TYPES = frozenset({AUTHORIZATION_CODE_GRANT, REFRESH_TOKEN_GRANT})
BFF_ROLE = "bff"


class Client(BaseModel):
    """Registered client application (relying party)."""

    model_config = ConfigDict(frozen=True)

    id: str
    client_identifier: ClientIdentifier
    secret_hash: str
    display_name: str
    redirect_uris: frozenset[str]
    grant_types: frozenset[str]
    is_public: bool
    is_active: bool
    owner_user_id: str | None
    is_system_client: bool
    system_role: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(
        cls,
        *,
        id: str,
        client_identifier: str,
        secret_hash: str,
        display_name: str,
        redirect_uris: list[str] | frozenset[str],
        grant_types: list[str] | frozenset[str],
        created_at: datetime,
        updated_at: datetime | None = None,
        is_public: bool = False,
        is_active: bool = True,
        owner_user_id: str | None = None,
        is_system_client: bool = False,
        system_role: str | None = None,
    ) -> "Client":
        """Build a client, enforcing the system-client invariants."""
        if not display_name.strip():
            raise InvalidRequestError("client name must not be empty")
        if is_system_client and owner_user_id is not None:
            raise InvalidRequestError("system clients cannot have an owner")
        if not is_system_client and system_role is not None:
            raise InvalidRequestError("only system clients carry a system role")
        return cls(
            id=id,
            client_identifier=ClientIdentifier.create(client_identifier),
            secret_hash=secret_hash,
            display_name=display_name,
            redirect_uris=frozenset(redirect_uris),
            grant_types=frozenset(grant_types),
            is_public=is_public,
            is_active=is_active,
            owner_user_id=owner_user_id,
            is_system_client=is_system_client,
            system_role=system_role,
            created_at=created_at,
            updated_at=updated_at or created_at,
        )

    def is_owned_by(self, user_id: str) -> bool:
        return self.owner_user_id == user_id

    def allows_redirect_uri(self, uri: str) -> bool:
        return uri in self.redirect_uris

    def supports_grant_type(self, grant_type: str) -> bool:
        return grant_type in self.grant_types

    def requires_consent(self) -> bool:
        """System clients act for the platform itself and skip consent."""
        return not self.is_system_client

    def is_bff(self) -> bool:
        return self.is_system_client and self.system_role == BFF_ROLE

    def can_be_modified(self) -> bool:
        return not self.is_system_client

    def with_changes(
        self,
        now: datetime,
        *,
        display_name: str | None = None,
        redirect_uris: list[str] | None = None,
        grant_types: list[str] | None = None,
        is_public: bool | None = None,
    ) -> "Client":
        """Return a copy with the given fields replaced."""
        if display_name is not None and not display_name.strip():
            raise InvalidRequestError("client name must not be empty")
        changes: dict[str, object] = {"updated_at": now}
        if display_name is not None:
            changes["display_name"] = display_name
        if redirect_uris is not None:
            changes["redirect_uris"] = frozenset(redirect_uris)
        if grant_types is not None:
            changes["grant_types"] = frozenset(grant_types)
        if is_public is not None:
            changes["is_public"] = is_public
        return self.model_copy(update=changes)

    def deactivated(self, now: datetime) -> "Client":
        """Soft-deleted copy of this client."""
        return self.model_copy(update={"is_active": False, "updated_at": now})
