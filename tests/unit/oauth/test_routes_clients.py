"""Tests for the client management endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from codegrant.crypto.password import verify_secret
from codegrant.db.repo_client import SqlClientRepository
from codegrant.domain.client import Client

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_NO_CONTENT = 204
HTTP_BAD_REQUEST = 400
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_UNPROCESSABLE = 422
OWNER = "owner-9"


@pytest.fixture
async def registered(client: AsyncClient) -> dict:
    resp = await client.post(
        "/oauth/clients",
        params={"user_id": OWNER},
        json={
            "client_name": "Widget",
            "redirect_uris": ["https://widget.example/cb"],
        },
    )
    assert resp.status_code == HTTP_CREATED
    return resp.json()


class TestRegisterClient:
    """Tests for POST /oauth/clients."""

    async def test_returns_secret_once(
        self, registered: dict, db_session: AsyncSession
    ) -> None:
        assert registered["client_name"] == "Widget"
        assert registered["grant_types"] == ["authorization_code", "refresh_token"]
        assert registered["is_active"] is True
        assert "secret_hash" not in registered

        stored = await SqlClientRepository(db_session).find_by_identifier(
            registered["client_id"]
        )
        assert stored is not None
        assert stored.owner_user_id == OWNER
        assert verify_secret(registered["client_secret"], stored.secret_hash)

    async def test_blank_name(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/oauth/clients",
            params={"user_id": OWNER},
            json={"client_name": "  ", "redirect_uris": ["https://x.example/cb"]},
        )
        assert resp.status_code == HTTP_BAD_REQUEST
        assert resp.json()["error"] == "invalid_request"

    async def test_redirect_uris_required(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/oauth/clients",
            params={"user_id": OWNER},
            json={"client_name": "Widget", "redirect_uris": []},
        )
        assert resp.status_code == HTTP_UNPROCESSABLE


class TestListClients:
    """Tests for GET /oauth/clients."""

    async def test_lists_own_clients(
        self, client: AsyncClient, registered: dict
    ) -> None:
        resp = await client.get("/oauth/clients", params={"user_id": OWNER})
        assert resp.status_code == HTTP_OK
        body = resp.json()
        assert [c["client_id"] for c in body] == [registered["client_id"]]
        assert "client_secret" not in body[0]

    @pytest.mark.usefixtures("registered")
    async def test_other_owner_sees_nothing(self, client: AsyncClient) -> None:
        resp = await client.get("/oauth/clients", params={"user_id": "someone"})
        assert resp.json() == []


class TestUpdateClient:
    """Tests for PATCH /oauth/clients/{id}."""

    async def test_updates_fields(
        self, client: AsyncClient, registered: dict
    ) -> None:
        resp = await client.patch(
            f"/oauth/clients/{registered['client_id']}",
            params={"user_id": OWNER},
            json={"redirect_uris": ["https://widget.example/new"]},
        )
        assert resp.status_code == HTTP_OK
        body = resp.json()
        assert body["redirect_uris"] == ["https://widget.example/new"]
        assert body["client_name"] == "Widget"

    async def test_non_owner_forbidden(
        self, client: AsyncClient, registered: dict
    ) -> None:
        resp = await client.patch(
            f"/oauth/clients/{registered['client_id']}",
            params={"user_id": "intruder"},
            json={"client_name": "Mine"},
        )
        assert resp.status_code == HTTP_FORBIDDEN

    async def test_unknown_client(self, client: AsyncClient) -> None:
        resp = await client.patch(
            "/oauth/clients/nope",
            params={"user_id": OWNER},
            json={"client_name": "x"},
        )
        assert resp.status_code == HTTP_NOT_FOUND


class TestDeactivateClient:
    """Tests for DELETE /oauth/clients/{id}."""

    async def test_deactivates_idempotently(
        self, client: AsyncClient, registered: dict
    ) -> None:
        url = f"/oauth/clients/{registered['client_id']}"
        first = await client.delete(url, params={"user_id": OWNER})
        again = await client.delete(url, params={"user_id": OWNER})
        assert first.status_code == HTTP_NO_CONTENT
        assert again.status_code == HTTP_NO_CONTENT

        listed = await client.get("/oauth/clients", params={"user_id": OWNER})
        assert listed.json()[0]["is_active"] is False

    async def test_system_client_refused(
        self, client: AsyncClient, db_session: AsyncSession, client_factory
    ) -> None:
        bff: Client = client_factory(
            "bff", is_system_client=True, system_role="bff"
        )
        await SqlClientRepository(db_session).save(bff)
        resp = await client.delete("/oauth/clients/bff", params={"user_id": OWNER})
        assert resp.status_code == HTTP_FORBIDDEN
