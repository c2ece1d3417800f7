"""Owner-facing client management endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, Response
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from codegrant.api.deps import Registry
from codegrant.core.errors import OAuthError
from codegrant.oauth.routes_authorize import error_response
from codegrant.oauth.types import ClientCreated, ClientView

router = APIRouter()

HTTP_CREATED = 201
HTTP_NO_CONTENT = 204


class _ClientCreateBody(BaseModel):
    client_name: str
    redirect_uris: list[str] = Field(min_length=1)
    grant_types: list[str] | None = None
    is_public: bool = False


class _ClientUpdateBody(BaseModel):
    client_name: str | None = None
    redirect_uris: list[str] | None = Field(default=None, min_length=1)
    grant_types: list[str] | None = Field(default=None, min_length=1)
    is_public: bool | None = None


@router.post("/oauth/clients", response_model=None)
async def register_client(
    registry: Registry,
    user_id: Annotated[str, Query()],
    body: _ClientCreateBody,
) -> JSONResponse:
    """POST /oauth/clients -- register a client owned by the caller."""
    try:
        registered = await registry.register(
            user_id,
            body.client_name,
            body.redirect_uris,
            grant_types=body.grant_types,
            is_public=body.is_public,
        )
    except OAuthError as exc:
        return error_response(exc)

    view = ClientView.from_client(registered.client)
    created = ClientCreated(
        **view.model_dump(), client_secret=registered.client_secret
    )
    return JSONResponse(created.model_dump(mode="json"), status_code=HTTP_CREATED)


@router.get("/oauth/clients")
async def list_clients(
    registry: Registry,
    user_id: Annotated[str, Query()],
) -> list[ClientView]:
    """GET /oauth/clients -- clients owned by the caller."""
    clients = await registry.list_for_owner(user_id)
    return [ClientView.from_client(c) for c in clients]


@router.patch("/oauth/clients/{client_id}", response_model=None)
async def update_client(
    client_id: str,
    registry: Registry,
    user_id: Annotated[str, Query()],
    body: _ClientUpdateBody,
) -> ClientView | JSONResponse:
    """PATCH /oauth/clients/{id} -- change name, redirect URIs or grants."""
    try:
        updated = await registry.update(
            user_id,
            client_id,
            display_name=body.client_name,
            redirect_uris=body.redirect_uris,
            grant_types=body.grant_types,
            is_public=body.is_public,
        )
    except OAuthError as exc:
        return error_response(exc)
    return ClientView.from_client(updated)


@router.delete("/oauth/clients/{client_id}", response_model=None)
async def deactivate_client(
    client_id: str,
    registry: Registry,
    user_id: Annotated[str, Query()],
) -> Response:
    """DELETE /oauth/clients/{id} -- soft delete (idempotent)."""
    try:
        await registry.deactivate(user_id, client_id)
    except OAuthError as exc:
        return error_response(exc)
    return Response(status_code=HTTP_NO_CONTENT)
