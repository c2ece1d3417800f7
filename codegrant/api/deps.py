"""FastAPI dependencies wiring repositories and services per request."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from codegrant.core.ports import (
    Clock,
    IdGenerator,
    RandomSource,
    SystemClock,
    SystemRandomSource,
    Uuid7Generator,
)
from codegrant.core.settings import AuthSettings
from codegrant.db.engine import get_session
from codegrant.db.repo_client import SqlClientRepository
from codegrant.db.repo_code import SqlCodeRepository
from codegrant.db.repo_consent import SqlConsentRepository
from codegrant.oauth.client_registry import ClientRegistry
from codegrant.oauth.client_validator import ClientValidator
from codegrant.oauth.code_issuer import CodeIssuer
from codegrant.oauth.consent_gate import ConsentGate
from codegrant.oauth.consent_service import ConsentService
from codegrant.oauth.token_exchanger import TokenExchanger

DbSession = Annotated[AsyncSession, Depends(get_session)]


def load_settings() -> AuthSettings:
    return AuthSettings()


def get_clock() -> Clock:
    return SystemClock()


def get_random_source() -> RandomSource:
    return SystemRandomSource()


def get_id_generator() -> IdGenerator:
    return Uuid7Generator()


Settings = Annotated[AuthSettings, Depends(load_settings)]
ClockDep = Annotated[Clock, Depends(get_clock)]


def get_client_validator(db: DbSession) -> ClientValidator:
    return ClientValidator(SqlClientRepository(db))


Validator = Annotated[ClientValidator, Depends(get_client_validator)]


def get_consent_gate(
    db: DbSession,
    settings: Settings,
    clock: ClockDep,
    ids: Annotated[IdGenerator, Depends(get_id_generator)],
) -> ConsentGate:
    return ConsentGate(
        SqlConsentRepository(db), clock, ids, consent_ttl=settings.consent_ttl
    )


Gate = Annotated[ConsentGate, Depends(get_consent_gate)]


def get_code_issuer(
    db: DbSession,
    settings: Settings,
    validator: Validator,
    gate: Gate,
    clock: ClockDep,
    random: Annotated[RandomSource, Depends(get_random_source)],
) -> CodeIssuer:
    return CodeIssuer(
        validator,
        gate,
        SqlCodeRepository(db),
        clock,
        random,
        ttl=settings.auth_code_ttl,
    )


def get_consent_service(
    db: DbSession, validator: Validator, clock: ClockDep
) -> ConsentService:
    return ConsentService(
        validator, SqlClientRepository(db), SqlConsentRepository(db), clock
    )


Issuer = Annotated[CodeIssuer, Depends(get_code_issuer)]
Consents = Annotated[ConsentService, Depends(get_consent_service)]


def get_token_exchanger(db: DbSession, clock: ClockDep) -> TokenExchanger:
    return TokenExchanger(SqlCodeRepository(db), clock)


def get_client_registry(
    db: DbSession,
    clock: ClockDep,
    ids: Annotated[IdGenerator, Depends(get_id_generator)],
) -> ClientRegistry:
    return ClientRegistry(SqlClientRepository(db), clock, ids)


Exchanger = Annotated[TokenExchanger, Depends(get_token_exchanger)]
Registry = Annotated[ClientRegistry, Depends(get_client_registry)]
