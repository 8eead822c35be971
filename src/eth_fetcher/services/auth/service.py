"""User authentication and seeding."""

import logging
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from eth_fetcher.core.errors import InvalidCredentialsError
from eth_fetcher.repositories.user import UserRepository
from eth_fetcher.services.auth.jwt_service import JWTService
from eth_fetcher.services.auth.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """Checks user credentials and issues access tokens."""

    def __init__(self, session: AsyncSession, jwt_service: JWTService, secret: str):
        self.users = UserRepository(session)
        self.jwt_service = jwt_service
        self.secret = secret

    async def authenticate(self, username: str, password: str) -> str:
        """Issue a token for valid credentials.

        Raises:
            NotFoundError: Unknown user
            InvalidCredentialsError: Wrong password
        """
        user = await self.users.get(username)
        if not verify_password(self.secret, password, user.password_hash):
            logger.info(f"Rejected credentials for user {username}")
            raise InvalidCredentialsError(f"invalid password for user {username}")
        return self.jwt_service.create_access_token(username)


async def seed_users(session: AsyncSession, secret: str, usernames: Iterable[str]) -> int:
    """Create missing users whose password equals their name.

    Returns:
        Number of users created
    """
    users = UserRepository(session)
    created = 0
    for username in usernames:
        if await users.insert_if_not_exists(username, hash_password(secret, username)):
            created += 1
    if created:
        logger.info(f"Seeded {created} default users")
    return created
