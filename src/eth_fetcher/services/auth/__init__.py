"""Authentication services module."""

from eth_fetcher.services.auth.dependencies import (
    AuthenticatedUser,
    CurrentUser,
    OptionalUser,
    get_current_user,
    get_current_user_optional,
)
from eth_fetcher.services.auth.jwt_service import (
    JWTService,
    TokenPayload,
    get_jwt_service,
)
from eth_fetcher.services.auth.passwords import hash_password, verify_password
from eth_fetcher.services.auth.service import AuthService, seed_users

__all__ = [
    # JWT
    "JWTService",
    "TokenPayload",
    "get_jwt_service",
    # Passwords
    "hash_password",
    "verify_password",
    # Users
    "AuthService",
    "seed_users",
    # Dependencies
    "AuthenticatedUser",
    "get_current_user",
    "get_current_user_optional",
    # Type aliases
    "CurrentUser",
    "OptionalUser",
]
