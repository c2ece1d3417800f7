"""Consent decision and consent management endpoints."""

from typing import Annotated

from fastapi import APIRouter, Form, Query, Response
from fastapi.responses import RedirectResponse
from pydantic import BaseModel
from starlette.responses import JSONResponse

from codegrant.api.deps import Consents, Gate, Issuer, Validator
from codegrant.core.errors import ConsentDeniedError, OAuthError
from codegrant.domain.client import AUTHORIZATION_CODE_GRANT
from codegrant.oauth.routes_authorize import error_response, redirect_with
from codegrant.oauth.scopes import split_scope
from codegrant.oauth.types import CodeRequest, ConsentDecision, ConsentSummary

router = APIRouter()

HTTP_NO_CONTENT = 204


class _ConsentForm(BaseModel):
    """Bundle form fields posted by the consent screen."""

    decision: ConsentDecision
    user_id: str
    client_id: str
    redirect_uri: str
    scope: str | None = None
    state: str | None = None
    code_challenge: str | None = None
    code_challenge_method: str | None = None


@router.post("/oauth/consent", response_model=None)
async def submit_consent(
    validator: Validator,
    gate: Gate,
    issuer: Issuer,
    form: Annotated[_ConsentForm, Form()],
) -> RedirectResponse | JSONResponse:
    """POST /oauth/consent -- record the user's decision and continue the flow."""
    try:
        # Never redirect to an unregistered URI, even to report a denial.
        await validator.validate(
            form.client_id, form.redirect_uri, AUTHORIZATION_CODE_GRANT
        )
        await gate.record(
            form.user_id,
            form.client_id,
            split_scope(form.scope),
            form.decision,
        )
        code = await issuer.issue(
            form.user_id,
            CodeRequest(
                client_identifier=form.client_id,
                redirect_uri=form.redirect_uri,
                scope=form.scope,
                code_challenge=form.code_challenge,
                code_challenge_method=form.code_challenge_method,
                state=form.state,
            ),
        )
    except ConsentDeniedError as exc:
        return redirect_with(
            form.redirect_uri, {"error": exc.error, "state": form.state}
        )
    except OAuthError as exc:
        return error_response(exc)

    return redirect_with(form.redirect_uri, {"code": code.code, "state": code.state})


@router.get("/oauth/consents")
async def list_consents(
    consents: Consents,
    user_id: Annotated[str, Query()],
) -> list[ConsentSummary]:
    """GET /oauth/consents -- active consents of the user."""
    return await consents.list_for_user(user_id)


@router.delete("/oauth/consents/{consent_id}", response_model=None)
async def revoke_consent(
    consent_id: str,
    consents: Consents,
    user_id: Annotated[str, Query()],
) -> Response:
    """DELETE /oauth/consents/{id} -- revoke a consent (idempotent)."""
    try:
        await consents.revoke(user_id, consent_id)
    except OAuthError as exc:
        return error_response(exc)
    return Response(status_code=HTTP_NO_CONTENT)
