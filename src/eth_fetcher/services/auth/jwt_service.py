"""JWT token service for authentication."""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import Request
from jose import JWTError, jwt
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """JWT token payload."""

    sub: str  # Subject (username)
    username: str
    exp: datetime  # Expiration time
    iat: datetime  # Issued at time


class JWTService:
    """Service for creating and validating JWT tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 24 * 60,
    ):
        """Initialize JWT service.

        Args:
            secret_key: Secret key for signing tokens
            algorithm: JWT algorithm (default: HS256)
            access_token_expire_minutes: Access token expiration in minutes
        """
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes

    def create_access_token(self, username: str) -> str:
        """Create an access token for a user.

        Args:
            username: Authenticated username

        Returns:
            Encoded JWT access token
        """
        now = datetime.now(timezone.utc)
        expire = now + timedelta(minutes=self.access_token_expire_minutes)

        payload = {
            "sub": username,
            "username": username,
            "exp": expire,
            "iat": now,
        }

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> TokenPayload | None:
        """Verify and decode a JWT token.

        Args:
            token: JWT token to verify

        Returns:
            TokenPayload if valid, None if invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
            )
            return TokenPayload(**payload)
        except (JWTError, ValueError) as e:
            logger.warning(f"JWT verification failed: {e}")
            return None


def get_jwt_service(request: Request) -> JWTService:
    """Get JWT service configured from application settings."""
    settings = request.app.state.settings
    return JWTService(
        secret_key=settings.jwt_secret,
        access_token_expire_minutes=settings.access_token_expire_minutes,
    )
