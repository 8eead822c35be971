"""Transaction signing, broadcasting and confirmation.

Provides:
- TransactionSigner: builds, signs and sends transactions with the single
  configured key (pending nonce, node gas price, fixed gas limit)
- ConfirmationWaiter: deadline-bounded, cancellable receipt polling
"""

import asyncio
import logging
from typing import Any

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

from eth_fetcher.core.errors import ConfirmationTimeoutError
from eth_fetcher.infrastructure.blockchain.client import ChainClient

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 300_000


class TransactionSigner:
    """Signs and sends transactions from one account.

    Nonce assignment is read-then-use, so submissions are serialised with a
    lock. Other processes sharing the key are not coordinated.
    """

    def __init__(
        self,
        client: ChainClient,
        private_key: str,
        gas_limit: int = DEFAULT_GAS_LIMIT,
    ):
        """Initialize signer.

        Args:
            client: Chain client for nonce, gas price and broadcasting
            private_key: Private key for signing (hex string with or without 0x)
            gas_limit: Fixed gas limit applied to every transaction
        """
        self.client = client
        self.gas_limit = gas_limit

        key = private_key if private_key.startswith("0x") else f"0x{private_key}"
        self.account: LocalAccount = Account.from_key(key)
        self._chain_id: int | None = None
        self._lock = asyncio.Lock()

        logger.info(f"TransactionSigner initialized for address: {self.account.address}")

    @property
    def address(self) -> str:
        """Get the signer address."""
        return self.account.address

    async def chain_id(self) -> int:
        """Get the chain id, fetched once."""
        if self._chain_id is None:
            self._chain_id = await self.client.get_chain_id()
        return self._chain_id

    async def build_transaction(self, to: str, data: bytes | str) -> dict[str, Any]:
        """Build an unsigned transaction for a contract call with zero value."""
        nonce = await self.client.get_pending_nonce(self.account.address)
        gas_price = await self.client.get_gas_price()
        logger.debug(f"Pending nonce: {nonce}, gas price: {gas_price}")

        return {
            "to": Web3.to_checksum_address(to),
            "data": data,
            "gas": self.gas_limit,
            "gasPrice": gas_price,
            "nonce": nonce,
            "chainId": await self.chain_id(),
            "value": 0,
        }

    async def send(self, to: str, data: bytes | str) -> str:
        """Sign and broadcast a contract call.

        Not retried on failure: a broadcast may have reached the network.

        Returns:
            Transaction hash
        """
        async with self._lock:
            tx = await self.build_transaction(to, data)
            signed_tx = self.account.sign_transaction(tx)
            tx_hash = await self.client.send_raw_transaction(signed_tx.raw_transaction)

        logger.info(f"Transaction sent: {tx_hash}, nonce: {tx['nonce']}, to: {to}")
        return tx_hash


class ConfirmationWaiter:
    """Polls for a receipt until mined, deadline expiry or cancellation."""

    def __init__(
        self,
        client: ChainClient,
        poll_interval: float = 1.0,
        timeout: float = 300.0,
    ):
        """Initialize waiter.

        Args:
            client: Chain client used for receipt lookups
            poll_interval: Seconds between receipt lookups
            timeout: Default deadline in seconds
        """
        self.client = client
        self.poll_interval = poll_interval
        self.timeout = timeout

    async def wait_for_receipt(
        self, tx_hash: str, timeout: float | None = None
    ) -> dict[str, Any]:
        """Wait for a transaction receipt.

        A missing receipt is retried; any other query error propagates at once.
        Cancelling the awaiting task stops the wait.

        Args:
            tx_hash: Transaction hash
            timeout: Deadline in seconds (defaults to the waiter's timeout)

        Returns:
            Transaction receipt

        Raises:
            ConfirmationTimeoutError: If no receipt before the deadline
        """
        timeout = self.timeout if timeout is None else timeout
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        while True:
            receipt = await self.client.get_transaction_receipt(tx_hash, retry=False)
            if receipt and receipt.get("blockNumber") is not None:
                return receipt

            remaining = deadline - loop.time()
            if remaining <= 0:
                raise ConfirmationTimeoutError(tx_hash, timeout)
            await asyncio.sleep(min(self.poll_interval, remaining))
