"""Request-scoped service providers built from the application runtime."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from eth_fetcher.core.config import Settings
from eth_fetcher.infrastructure.database.session import get_async_db
from eth_fetcher.repositories.transaction import TransactionRepository
from eth_fetcher.runtime import Runtime
from eth_fetcher.services.auth.jwt_service import JWTService, get_jwt_service
from eth_fetcher.services.auth.service import AuthService
from eth_fetcher.services.persons.service import PersonInfoService
from eth_fetcher.services.resolver.resolver import TransactionResolver


def get_runtime(request: Request) -> Runtime:
    """Get the application runtime."""
    return request.app.state.runtime


def get_app_settings(request: Request) -> Settings:
    """Get the application settings."""
    return request.app.state.settings


DbSession = Annotated[AsyncSession, Depends(get_async_db)]


def get_transaction_resolver(
    runtime: Annotated[Runtime, Depends(get_runtime)],
    session: DbSession,
) -> TransactionResolver:
    """Resolver bound to the request's session."""
    return TransactionResolver(runtime.client, TransactionRepository(session))


def get_person_info_service(
    runtime: Annotated[Runtime, Depends(get_runtime)],
) -> PersonInfoService:
    """Person info service over the runtime's contract gateway."""
    return PersonInfoService(runtime.contract, runtime.waiter)


def get_auth_service(
    session: DbSession,
    jwt_service: Annotated[JWTService, Depends(get_jwt_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AuthService:
    """Auth service bound to the request's session."""
    return AuthService(session, jwt_service, settings.jwt_secret)
