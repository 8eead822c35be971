"""Repository for resolved transactions (the transaction store)."""

from typing import Sequence

from sqlalchemy import select

from eth_fetcher.core.errors import NotFoundError
from eth_fetcher.models.transaction import Transaction
from eth_fetcher.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for Transaction database operations.

    Uniqueness on transaction_hash is what makes concurrent resolution of
    the same hash safe without locks.
    """

    model = Transaction

    async def get(self, tx_hash: str) -> Transaction:
        """Get transaction by hash.

        @param tx_hash - Transaction hash
        @returns Stored transaction
        @raises NotFoundError - Hash not stored yet
        """
        tx = await self.get_one_by_filter(transaction_hash=tx_hash)
        if tx is None:
            raise NotFoundError(f"transaction {tx_hash} not found")
        return tx

    async def get_by_ids(self, ids: Sequence[int]) -> Sequence[Transaction]:
        """Get transactions by primary key.

        @param ids - Primary keys
        @returns Matching transactions ordered by id
        """
        if not ids:
            return []
        stmt = (
            select(self.model)
            .where(self.model.id.in_(list(ids)))
            .order_by(self.model.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
