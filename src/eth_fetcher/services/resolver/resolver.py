"""Cache-aside resolution of transaction hashes into stored records."""

import logging
from typing import Any, Sequence

from web3 import Web3

from eth_fetcher.core.errors import (
    DuplicateKeyError,
    FetchError,
    NotFoundError,
    PendingError,
)
from eth_fetcher.infrastructure.blockchain.client import ChainClient
from eth_fetcher.models.transaction import (
    STATUS_FAILED,
    STATUS_SUCCESSFUL,
    Transaction,
)
from eth_fetcher.repositories.transaction import TransactionRepository
from eth_fetcher.services.resolver.inputs import normalize_hashes
from eth_fetcher.services.resolver.schemas import Resolution, ResolutionOutcome
from eth_fetcher.services.resolver.sender import recover_sender

logger = logging.getLogger(__name__)


def _hex(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(value)
    return str(value)


def map_transaction(
    tx: dict[str, Any],
    receipt: dict[str, Any],
    header: dict[str, Any],
    sender: str,
) -> Transaction:
    """Build a Transaction row from node responses.

    Args:
        tx: eth_getTransactionByHash result
        receipt: eth_getTransactionReceipt result
        header: Header of the block containing the transaction
        sender: Address recovered from the transaction signature
    """
    contract_address = receipt.get("contractAddress")
    to_address = tx.get("to")
    call_data = tx.get("input", b"")

    return Transaction(
        transaction_hash=_hex(tx["hash"]),
        transaction_status=(
            STATUS_SUCCESSFUL if receipt.get("status") == 1 else STATUS_FAILED
        ),
        block_hash=_hex(header["hash"]),
        block_number=int(header["number"]),
        from_address=Web3.to_checksum_address(sender),
        to_address=Web3.to_checksum_address(to_address) if to_address else None,
        contract_address=(
            Web3.to_checksum_address(contract_address) if contract_address else ""
        ),
        logs_count=len(receipt.get("logs") or []),
        input=_hex(call_data).removeprefix("0x"),
        value=str(int(tx.get("value", 0))),
    )


class TransactionResolver:
    """Resolves transaction hashes, consulting the chain only on store misses.

    No locking: two resolvers racing on one hash both fetch, one insert
    wins, the other re-reads the winner's row.
    """

    def __init__(self, client: ChainClient, store: TransactionRepository):
        """Initialize resolver.

        Args:
            client: Chain client for transaction, receipt and header queries
            store: Transaction store checked before and written after fetching
        """
        self.client = client
        self.store = store

    async def resolve(self, tx_hash: str) -> Resolution:
        """Resolve one hash.

        Raises:
            PendingError: Transaction exists but is not mined yet
            FetchError: Transaction unknown or a node query failed
        """
        # Rows are keyed by the node's lowercase hex hash
        tx_hash = tx_hash.lower()
        try:
            record = await self.store.get(tx_hash)
            logger.debug(f"Transaction {tx_hash} served from store")
            return Resolution(record=record, outcome=ResolutionOutcome.CACHED)
        except NotFoundError:
            pass

        record = await self._fetch(tx_hash)

        try:
            record = await self.store.insert(record)
        except DuplicateKeyError:
            logger.info(f"Transaction {tx_hash} stored concurrently, re-reading")
            record = await self.store.get(record.transaction_hash)

        logger.info(
            f"Resolved transaction {tx_hash} in block {record.block_number} "
            f"(status {record.transaction_status})"
        )
        return Resolution(record=record, outcome=ResolutionOutcome.FETCHED)

    async def resolve_batch(
        self, hashes: Sequence[str], dedupe: bool = True
    ) -> list[Transaction]:
        """Resolve hashes in order; the first failure aborts the whole batch.

        Returns:
            Records in input order (after dedupe)
        """
        records: list[Transaction] = []
        for tx_hash in normalize_hashes(hashes, dedupe=dedupe):
            try:
                resolution = await self.resolve(tx_hash)
            except PendingError:
                logger.info(f"Batch aborted: {tx_hash} {ResolutionOutcome.PENDING.value}")
                raise
            except FetchError as e:
                logger.warning(f"Batch aborted: {tx_hash} {ResolutionOutcome.FAILED.value}: {e}")
                raise
            records.append(resolution.record)
        return records

    async def _fetch(self, tx_hash: str) -> Transaction:
        """Query the node and map the result without storing it."""
        try:
            tx = await self.client.get_transaction(tx_hash)
        except FetchError as e:
            e.tx_hash = tx_hash
            raise
        except Exception as e:
            raise FetchError(f"failed to fetch transaction {tx_hash}: {e}", tx_hash) from e

        if tx is None:
            raise FetchError(f"transaction {tx_hash} not found", tx_hash)

        if tx.get("blockHash") is None or tx.get("blockNumber") is None:
            raise PendingError(tx_hash)

        try:
            receipt = await self.client.get_transaction_receipt(tx_hash)
            if receipt is None:
                raise PendingError(tx_hash)
            header = await self.client.get_block_header(_hex(receipt["blockHash"]))
        except (PendingError, FetchError):
            raise
        except Exception as e:
            raise FetchError(
                f"failed to fetch receipt or block for transaction {tx_hash}: {e}", tx_hash
            ) from e

        try:
            sender = recover_sender(tx)
        except Exception as e:
            raise FetchError(
                f"failed to recover sender of transaction {tx_hash}: {e}", tx_hash
            ) from e

        return map_transaction(tx, receipt, header, sender)
