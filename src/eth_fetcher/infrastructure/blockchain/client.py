"""Ethereum node client over two transports: HTTP queries and WebSocket push."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from web3 import AsyncHTTPProvider, AsyncWeb3, WebSocketProvider
from web3.exceptions import BlockNotFound, TransactionNotFound, Web3RPCError
from web3.types import TxParams, Wei

from eth_fetcher.core.errors import ConfigurationError, FetchError, SubscriptionError

logger = logging.getLogger(__name__)


class ChainClient(ABC):
    """Abstract base class for chain node clients."""

    @abstractmethod
    async def get_transaction(self, tx_hash: str) -> dict[str, Any] | None:
        """Get transaction by hash, None if the node does not know it."""
        ...

    @abstractmethod
    async def get_transaction_receipt(
        self, tx_hash: str, retry: bool = True
    ) -> dict[str, Any] | None:
        """Get transaction receipt, None while not mined.

        With retry=False a failed query raises after a single attempt.
        """
        ...

    @abstractmethod
    async def get_block_header(self, block_hash: str) -> dict[str, Any]:
        """Get block header (hash, number) by block hash."""
        ...

    @abstractmethod
    async def get_pending_nonce(self, address: str) -> int:
        """Get the pending nonce for an address."""
        ...

    @abstractmethod
    async def get_gas_price(self) -> Wei:
        """Get the node-suggested gas price."""
        ...

    @abstractmethod
    async def get_chain_id(self) -> int:
        """Get the chain identifier."""
        ...

    @abstractmethod
    async def eth_call(self, transaction: TxParams) -> bytes:
        """Execute eth_call (read-only contract call)."""
        ...

    @abstractmethod
    async def send_raw_transaction(self, signed_tx: bytes) -> str:
        """Broadcast a signed transaction, returning its hash."""
        ...

    @abstractmethod
    async def subscribe_logs(
        self, address: str, topics: list[str]
    ) -> "LogSubscription":
        """Open a push subscription for logs of one contract."""
        ...

    @abstractmethod
    async def reconnect_ws(self) -> None:
        """Replace the push connection with a fresh one."""
        ...


class LogSubscription:
    """Cancellable async iterator over logs delivered for one subscription.

    Not restartable: once cancelled or failed, open a new one.
    """

    def __init__(self, w3: AsyncWeb3, subscription_id: str):
        self._w3 = w3
        self.subscription_id = subscription_id
        self._cancelled = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        try:
            async for payload in self._w3.socket.process_subscriptions():
                if self._cancelled:
                    return
                if payload.get("subscription") != self.subscription_id:
                    continue
                yield payload["result"]
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if self._cancelled:
                return
            raise SubscriptionError(f"log subscription {self.subscription_id} failed: {e}") from e

        if not self._cancelled:
            raise SubscriptionError(f"log subscription {self.subscription_id} closed by node")

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def cancel(self) -> None:
        """Unsubscribe. Safe to call more than once."""
        if self._cancelled:
            return
        self._cancelled = True
        try:
            await self._w3.eth.unsubscribe(self.subscription_id)
        except Exception as e:
            logger.warning(f"Unsubscribe {self.subscription_id} failed: {e}")


class EthereumClient(ChainClient):
    """Node client holding an HTTP connection for queries and a WebSocket for events."""

    def __init__(
        self,
        http_url: str,
        ws_url: str,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        """Initialize client.

        Args:
            http_url: Node HTTP endpoint for call/response queries
            ws_url: Node WebSocket endpoint for push subscriptions
            max_retries: Maximum attempts per read query
            retry_delay: Base delay between retries in seconds
        """
        self.http_url = http_url
        self.ws_url = ws_url
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.http = AsyncWeb3(AsyncHTTPProvider(http_url))
        self._ws: AsyncWeb3 | None = None

    @property
    def ws(self) -> AsyncWeb3:
        """Get the connected WebSocket Web3 instance."""
        if self._ws is None:
            raise SubscriptionError("WebSocket connection is not open")
        return self._ws

    async def connect(self) -> None:
        """Open and verify both connections.

        Raises:
            ConfigurationError: Either endpoint is unreachable
        """
        try:
            if not await self.http.is_connected():
                raise ConfigurationError(f"Node HTTP endpoint unreachable: {self.http_url}")
            chain_id = await self.http.eth.chain_id
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(
                f"Node HTTP endpoint unreachable: {self.http_url}: {e}"
            ) from e

        try:
            self._ws = await self._open_ws()
        except Exception as e:
            raise ConfigurationError(
                f"Node WebSocket endpoint unreachable: {self.ws_url}: {e}"
            ) from e

        logger.info(
            f"Connected to node (chain {chain_id}) via {self.http_url} and {self.ws_url}"
        )

    async def _open_ws(self) -> AsyncWeb3:
        return await AsyncWeb3(WebSocketProvider(self.ws_url))

    async def close(self) -> None:
        """Close the WebSocket connection."""
        if self._ws is not None:
            try:
                await self._ws.provider.disconnect()
            except Exception as e:
                logger.warning(f"WebSocket disconnect failed: {e}")
            self._ws = None

    async def reconnect_ws(self) -> None:
        """Drop the WebSocket connection and open a new one.

        The persistent provider does not reconnect a dead socket on its own,
        so re-subscribing needs a fresh connection.

        Raises:
            SubscriptionError: The endpoint cannot be reached
        """
        await self.close()
        try:
            self._ws = await self._open_ws()
        except Exception as e:
            raise SubscriptionError(f"WebSocket reconnect to {self.ws_url} failed: {e}") from e
        logger.info(f"Reconnected WebSocket to {self.ws_url}")

    async def _execute_with_retry(
        self, method: str, *args: Any, attempts: int | None = None
    ) -> Any:
        """Execute a read method on the HTTP connection with retries.

        "Not found" answers are propagated to the caller unchanged.

        Raises:
            FetchError: If every attempt failed
        """
        attempts = self.max_retries if attempts is None else attempts
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                web3_method = getattr(self.http.eth, method)
                return await web3_method(*args)

            except (TransactionNotFound, BlockNotFound):
                raise

            except Web3RPCError as e:
                last_error = e
                logger.warning(f"RPC {method} failed (attempt {attempt + 1}): {e}")

            except Exception as e:
                last_error = e
                logger.warning(f"RPC {method} error (attempt {attempt + 1}): {e}")

            if attempt < attempts - 1:
                await asyncio.sleep(self.retry_delay * (attempt + 1))

        raise FetchError(f"{method} failed after {attempts} attempts: {last_error}")

    async def get_transaction(self, tx_hash: str) -> dict[str, Any] | None:
        try:
            tx = await self._execute_with_retry("get_transaction", tx_hash)
        except TransactionNotFound:
            return None
        return dict(tx) if tx else None

    async def get_transaction_receipt(
        self, tx_hash: str, retry: bool = True
    ) -> dict[str, Any] | None:
        try:
            receipt = await self._execute_with_retry(
                "get_transaction_receipt", tx_hash, attempts=None if retry else 1
            )
        except TransactionNotFound:
            return None
        return dict(receipt) if receipt else None

    async def get_block_header(self, block_hash: str) -> dict[str, Any]:
        try:
            block = await self._execute_with_retry("get_block", block_hash, False)
        except BlockNotFound as e:
            raise FetchError(f"block {block_hash} not found") from e
        return dict(block)

    async def get_pending_nonce(self, address: str) -> int:
        return await self._execute_with_retry(
            "get_transaction_count", address, "pending"
        )

    async def get_gas_price(self) -> Wei:
        # AsyncWeb3 exposes gas price as an awaitable property
        return await self.http.eth.gas_price

    async def get_chain_id(self) -> int:
        return await self.http.eth.chain_id

    async def eth_call(self, transaction: TxParams) -> bytes:
        return await self._execute_with_retry("call", transaction)

    async def send_raw_transaction(self, signed_tx: bytes) -> str:
        """Send signed raw transaction. Never retried: a retry could double-submit.

        Returns:
            Transaction hash as 0x-prefixed hex string
        """
        tx_hash = await self.http.eth.send_raw_transaction(signed_tx)
        return AsyncWeb3.to_hex(tx_hash)

    async def subscribe_logs(self, address: str, topics: list[str]) -> LogSubscription:
        """Subscribe to logs of a contract over the WebSocket connection."""
        try:
            subscription_id = await self.ws.eth.subscribe(
                "logs",
                {"address": AsyncWeb3.to_checksum_address(address), "topics": topics},
            )
        except SubscriptionError:
            raise
        except Exception as e:
            raise SubscriptionError(f"Failed to subscribe to logs of {address}: {e}") from e

        logger.info(f"Subscribed to logs of {address} (id {subscription_id})")
        return LogSubscription(self.ws, subscription_id)
