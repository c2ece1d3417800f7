"""Typed failures raised by the authorization code engine.

Every ``OAuthError`` carries the OAuth ``error`` code and the HTTP status an
adapter should answer with. Callers branch on the exception type; only
exceptions outside this hierarchy are treated as unexpected.
"""

HTTP_BAD_REQUEST = 400
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404


class OAuthError(Exception):
    """Base class for expected, typed failures."""

    error = "server_error"
    status_code = HTTP_BAD_REQUEST

    def __init__(self, description: str = "") -> None:
        super().__init__(description or self.error)
        self.description = description or self.error


class InvalidRequestError(OAuthError):
    """Malformed input, e.g. a bad PKCE challenge or an unsupported method."""

    error = "invalid_request"


class RedirectUriMismatchError(InvalidRequestError):
    """Redirect URI is not registered for the client."""

    error = "invalid_redirect_uri"


class UnsupportedGrantTypeError(InvalidRequestError):
    """Client is not permitted to use the requested grant type."""

    error = "unauthorized_client"


class NotFoundError(OAuthError):
    """A referenced record does not exist."""

    error = "not_found"
    status_code = HTTP_NOT_FOUND


class ClientNotFoundError(NotFoundError):
    """Unknown or inactive client."""

    error = "invalid_client"


class ConsentNotFoundError(NotFoundError):
    """Unknown consent record."""


class ForbiddenError(OAuthError):
    """Acting user does not own the record."""

    error = "forbidden"
    status_code = HTTP_FORBIDDEN


class ConsentRequiredError(OAuthError):
    """User has not granted consent for the requested scopes yet."""

    error = "consent_required"
    status_code = HTTP_FORBIDDEN


class ConsentDeniedError(OAuthError):
    """User declined the consent screen."""

    error = "access_denied"
    status_code = HTTP_FORBIDDEN


class InvalidGrantError(OAuthError):
    """Authorization code cannot be redeemed.

    Raised with the same description for unknown, used, expired, mismatched
    and PKCE-failed codes.
    """

    error = "invalid_grant"

    def __init__(self) -> None:
        super().__init__("Invalid authorization code")


class BootstrapError(Exception):
    """Startup provisioning cannot continue."""
