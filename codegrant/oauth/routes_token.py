"""Authorization code redemption endpoint."""

from typing import Annotated

from fastapi import APIRouter, Form
from pydantic import BaseModel
from starlette.responses import JSONResponse

from codegrant.api.deps import Exchanger
from codegrant.core.errors import InvalidRequestError, OAuthError
from codegrant.domain.client import AUTHORIZATION_CODE_GRANT
from codegrant.oauth.routes_authorize import error_response
from codegrant.oauth.types import RedemptionResult

router = APIRouter()

HTTP_BAD_REQUEST = 400


class _TokenForm(BaseModel):
    """Bundle form fields for the token endpoint."""

    grant_type: str
    code: str | None = None
    redirect_uri: str | None = None
    client_id: str | None = None
    code_verifier: str | None = None


@router.post("/oauth/token", response_model=None)
async def token_endpoint(
    exchanger: Exchanger,
    form: Annotated[_TokenForm, Form()],
) -> RedemptionResult | JSONResponse:
    """POST /oauth/token -- redeem an authorization code.

    Returns the grant the code carried; turning it into access and refresh
    tokens is left to the token-issuance service in front of this one.
    """
    if form.grant_type != AUTHORIZATION_CODE_GRANT:
        return JSONResponse(
            {"error": "unsupported_grant_type"},
            status_code=HTTP_BAD_REQUEST,
        )
    if not form.code or not form.client_id or not form.redirect_uri:
        return error_response(
            InvalidRequestError("code, client_id and redirect_uri are required")
        )

    try:
        return await exchanger.redeem(
            form.code, form.code_verifier, form.client_id, form.redirect_uri
        )
    except OAuthError as exc:
        return error_response(exc)
