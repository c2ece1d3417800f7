"""FastAPI application factory for the codegrant authorization server."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from codegrant.bootstrap.system_clients import ensure_system_clients
from codegrant.core.ports import SystemClock, Uuid7Generator
from codegrant.core.settings import AuthSettings
from codegrant.db.engine import session_scope
from codegrant.db.repo_client import SqlClientRepository
from codegrant.oauth.routes_authorize import router as authorize_router
from codegrant.oauth.routes_clients import router as clients_router
from codegrant.oauth.routes_consent import router as consent_router
from codegrant.oauth.routes_token import router as token_router


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    settings = AuthSettings()

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if settings.bff_client_secret:
            async with session_scope() as session:
                await ensure_system_clients(
                    SqlClientRepository(session),
                    settings,
                    SystemClock(),
                    Uuid7Generator(),
                )
        yield

    app = FastAPI(
        title="codegrant authorization server",
        version="0.1.0",
        lifespan=lifespan,
    )

    origins = settings.get_cors_origin_list()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "DELETE"],
            allow_headers=["Authorization", "Content-Type"],
        )

    app.include_router(authorize_router)
    app.include_router(consent_router)
    app.include_router(token_router)
    app.include_router(clients_router)

    return app
