"""OAuth authorization endpoint."""

from typing import Annotated
from urllib.parse import urlencode

from fastapi import APIRouter, Query
from fastapi.responses import RedirectResponse
from pydantic import BaseModel
from starlette.responses import JSONResponse

from codegrant.api.deps import Consents, Issuer
from codegrant.core.errors import ConsentRequiredError, OAuthError
from codegrant.oauth.types import CodeRequest

router = APIRouter()

HTTP_BAD_REQUEST = 400
HTTP_FOUND = 302


class _AuthQuery(BaseModel):
    """Bundle query params for the authorize endpoint."""

    client_id: str
    redirect_uri: str
    response_type: str
    scope: str | None = None
    state: str | None = None
    code_challenge: str | None = None
    code_challenge_method: str | None = None
    user_id: str | None = None

    def to_code_request(self) -> CodeRequest:
        return CodeRequest(
            client_identifier=self.client_id,
            redirect_uri=self.redirect_uri,
            scope=self.scope,
            code_challenge=self.code_challenge,
            code_challenge_method=self.code_challenge_method,
            state=self.state,
        )


def error_response(error: OAuthError) -> JSONResponse:
    """Render a typed failure as an OAuth error body."""
    return JSONResponse(
        {"error": error.error, "error_description": error.description},
        status_code=error.status_code,
    )


def redirect_with(redirect_uri: str, params: dict[str, str | None]) -> RedirectResponse:
    """302 to the client with the non-empty params appended."""
    query = urlencode({k: v for k, v in params.items() if v})
    separator = "&" if "?" in redirect_uri else "?"
    return RedirectResponse(
        url=f"{redirect_uri}{separator}{query}", status_code=HTTP_FOUND
    )


def _validate_request(q: _AuthQuery) -> JSONResponse | None:
    """Return an error response if the request is invalid, else None."""
    if q.response_type != "code":
        return JSONResponse(
            {"error": "unsupported_response_type"},
            status_code=HTTP_BAD_REQUEST,
        )
    if not q.user_id:
        return JSONResponse(
            {"error": "login_required"},
            status_code=HTTP_BAD_REQUEST,
        )
    return None


@router.get("/oauth/authorize", response_model=None)
async def authorize(
    issuer: Issuer,
    consents: Consents,
    q: Annotated[_AuthQuery, Query()],
) -> RedirectResponse | JSONResponse:
    """GET /oauth/authorize -- issue a code or ask for consent."""
    error = _validate_request(q)
    if error is not None:
        return error

    request = q.to_code_request()
    try:
        code = await issuer.issue(q.user_id or "", request)
    except ConsentRequiredError as exc:
        screen = await consents.prepare_screen(request)
        return JSONResponse(
            {
                "error": exc.error,
                "error_description": exc.description,
                "consent": screen.model_dump(mode="json"),
            },
            status_code=exc.status_code,
        )
    except OAuthError as exc:
        return error_response(exc)

    return redirect_with(q.redirect_uri, {"code": code.code, "state": code.state})
