"""SimplePersonInfo contract gateway and ABI handling."""

import logging
from typing import Any

from eth_abi import decode
from web3 import Web3
from web3.types import TxParams

from eth_fetcher.core.errors import SubscriptionError
from eth_fetcher.infrastructure.blockchain.client import ChainClient, LogSubscription
from eth_fetcher.infrastructure.blockchain.events import (
    EventParser,
    PERSON_INFO_UPDATED_TOPIC,
    PersonInfoUpdated,
)
from eth_fetcher.infrastructure.blockchain.transaction import TransactionSigner

logger = logging.getLogger(__name__)

PERSON_INFO_ABI: list[dict[str, Any]] = [
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "personIndex", "type": "uint256"},
            {"indexed": False, "internalType": "string", "name": "newName", "type": "string"},
            {"indexed": False, "internalType": "uint256", "name": "newAge", "type": "uint256"},
        ],
        "name": "PersonInfoUpdated",
        "type": "event",
    },
    {
        "inputs": [
            {"internalType": "uint256", "name": "_personIndex", "type": "uint256"}
        ],
        "name": "getPersonInfo",
        "outputs": [
            {"internalType": "string", "name": "", "type": "string"},
            {"internalType": "uint256", "name": "", "type": "uint256"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "getPersonsCount",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "name": "persons",
        "outputs": [
            {"internalType": "string", "name": "name", "type": "string"},
            {"internalType": "uint256", "name": "age", "type": "uint256"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "string", "name": "_name", "type": "string"},
            {"internalType": "uint256", "name": "_age", "type": "uint256"},
        ],
        "name": "setPersonInfo",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


class PersonInfoSubscription:
    """Cancellable async sequence of decoded PersonInfoUpdated events."""

    def __init__(self, logs: LogSubscription, parser: EventParser):
        self._logs = logs
        self._parser = parser

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        async for log in self._logs:
            try:
                event = self._parser.parse_log(log)
            except Exception as e:
                raise SubscriptionError(f"Failed to decode PersonInfoUpdated log: {e}") from e
            if event is not None:
                yield event

    async def cancel(self) -> None:
        """Unsubscribe from the node."""
        await self._logs.cancel()


class PersonInfoContract:
    """Typed gateway over one deployed SimplePersonInfo contract."""

    def __init__(
        self,
        client: ChainClient,
        address: str,
        signer: TransactionSigner | None = None,
    ):
        """Initialize contract gateway.

        Args:
            client: Chain client for calls and subscriptions
            address: Deployed contract address
            signer: Signer for writes; read-only gateway when None
        """
        self.client = client
        self.address = Web3.to_checksum_address(address)
        self.signer = signer
        self.w3 = Web3()  # For encoding/decoding only
        self._contract = self.w3.eth.contract(address=self.address, abi=PERSON_INFO_ABI)
        self.event_parser = EventParser()

    def encode_function_call(self, function_name: str, args: list[Any] | None = None) -> str:
        """Encode function call data.

        Args:
            function_name: Name of the function to call
            args: Function arguments

        Returns:
            Encoded function call data
        """
        func = self._contract.get_function_by_name(function_name)
        return func(*args if args else [])._encode_transaction_data()

    def decode_function_result(self, function_name: str, data: bytes) -> Any:
        """Decode function result.

        Args:
            function_name: Name of the function
            data: Raw result data

        Returns:
            Decoded result
        """
        func_abi = None
        for item in PERSON_INFO_ABI:
            if item.get("type") == "function" and item.get("name") == function_name:
                func_abi = item
                break

        if not func_abi:
            raise ValueError(f"Function {function_name} not found in ABI")

        output_types = [o["type"] for o in func_abi.get("outputs", [])]
        if not output_types:
            return None

        decoded = decode(output_types, data)
        return decoded[0] if len(decoded) == 1 else decoded

    async def call_contract(self, function_name: str, args: list[Any] | None = None) -> Any:
        """Call a read-only contract function and decode the result."""
        data = self.encode_function_call(function_name, args)
        tx_params: TxParams = {"to": self.address, "data": data}
        result = await self.client.eth_call(tx_params)
        return self.decode_function_result(function_name, result)

    async def get_person_info(self, index: int) -> tuple[str, int]:
        """Read the name and age stored at an index."""
        if index < 0:
            raise ValueError(f"Person index must be non-negative, got {index}")
        name, age = await self.call_contract("getPersonInfo", [index])
        return name, age

    async def get_persons_count(self) -> int:
        """Read the number of stored persons."""
        return await self.call_contract("getPersonsCount")

    async def set_person_info(self, name: str, age: int) -> str:
        """Submit setPersonInfo(name, age). Broadcasts; not idempotent.

        Returns:
            Transaction hash
        """
        if self.signer is None:
            raise RuntimeError("Contract gateway has no signer configured")
        if age < 0:
            raise ValueError(f"Age must be non-negative, got {age}")

        data = self.encode_function_call("setPersonInfo", [name, age])
        tx_hash = await self.signer.send(self.address, data)
        logger.info(f"setPersonInfo({name!r}, {age}) submitted: {tx_hash}")
        return tx_hash

    async def subscribe_person_info_updated(self) -> PersonInfoSubscription:
        """Open a live PersonInfoUpdated subscription."""
        logs = await self.client.subscribe_logs(self.address, [PERSON_INFO_UPDATED_TOPIC])
        return PersonInfoSubscription(logs, self.event_parser)

    async def reconnect(self) -> None:
        """Reopen the push connection before subscribing again."""
        await self.client.reconnect_ws()
