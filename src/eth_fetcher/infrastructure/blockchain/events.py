"""Event parsing for SimplePersonInfo contract logs."""

import logging
from dataclasses import dataclass
from typing import Any

from eth_abi import decode
from web3 import Web3

logger = logging.getLogger(__name__)

# PersonInfoUpdated(uint256 indexed personIndex, string newName, uint256 newAge)
PERSON_INFO_UPDATED_SIGNATURE = "PersonInfoUpdated(uint256,string,uint256)"
PERSON_INFO_UPDATED_TOPIC = Web3.to_hex(Web3.keccak(text=PERSON_INFO_UPDATED_SIGNATURE))


@dataclass(frozen=True)
class PersonInfoUpdated:
    """Decoded PersonInfoUpdated event."""

    index: int
    name: str
    age: int
    tx_hash: str
    block_number: int | None = None
    log_index: int | None = None


def _to_hex(value: Any) -> str:
    """Normalise bytes-like or str values to 0x-prefixed lowercase hex."""
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(value)
    text = str(value)
    if not text.startswith("0x"):
        text = f"0x{text}"
    return text.lower()


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    text = str(value)
    return bytes.fromhex(text[2:] if text.startswith("0x") else text)


class EventParser:
    """Parses raw PersonInfoUpdated log entries."""

    topic = PERSON_INFO_UPDATED_TOPIC

    def parse_log(self, log: dict[str, Any]) -> PersonInfoUpdated | None:
        """Parse a single log entry.

        Args:
            log: Raw log entry from eth_getLogs or a logs subscription

        Returns:
            PersonInfoUpdated or None if the log is not that event
        """
        topics = log.get("topics", [])
        if len(topics) < 2:
            return None

        if _to_hex(topics[0]) != self.topic:
            logger.debug(f"Unknown event topic: {_to_hex(topics[0])}")
            return None

        index = int(_to_hex(topics[1]), 16)
        name, age = decode(["string", "uint256"], _to_bytes(log.get("data", b"")))

        return PersonInfoUpdated(
            index=index,
            name=name,
            age=age,
            tx_hash=_to_hex(log.get("transactionHash", b"")),
            block_number=log.get("blockNumber"),
            log_index=log.get("logIndex"),
        )
