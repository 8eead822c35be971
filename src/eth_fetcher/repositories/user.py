"""Repository for API users."""

from typing import Sequence

from eth_fetcher.core.errors import DuplicateKeyError, NotFoundError
from eth_fetcher.models.user import User
from eth_fetcher.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User database operations."""

    model = User

    async def get(self, username: str) -> User:
        """Get user by name.

        @raises NotFoundError - Unknown user
        """
        user = await self.get_one_by_filter(username=username)
        if user is None:
            raise NotFoundError(f"user {username} not found")
        return user

    async def insert_if_not_exists(self, username: str, password_hash: str) -> bool:
        """Create a user unless one with this name exists.

        @returns True if created
        """
        if await self.get_one_by_filter(username=username) is not None:
            return False
        try:
            await self.insert(User(username=username, password_hash=password_hash))
        except DuplicateKeyError:
            return False
        return True

    async def add_searched_transaction_ids(
        self, username: str, transaction_ids: Sequence[int]
    ) -> User:
        """Merge transaction ids into the user's searched set.

        @returns Updated user
        """
        user = await self.get(username)
        known = set(user.searched_transaction_ids or [])
        merged = list(user.searched_transaction_ids or [])
        for tx_id in transaction_ids:
            if tx_id not in known:
                known.add(tx_id)
                merged.append(tx_id)
        user.searched_transaction_ids = merged
        await self.session.commit()
        return user
