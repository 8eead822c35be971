"""Sender recovery from the fields of eth_getTransactionByHash.

The signed envelope is rebuilt locally and handed to eth-account, so no
raw-transaction RPC is needed.
"""

from typing import Any

import rlp
from eth_account import Account
from eth_account.typed_transactions import TypedTransaction
from web3 import Web3

LEGACY_TYPE = 0

# Unsigned payload fields per EIP-2718 envelope type
_TYPED_FIELDS: dict[int, tuple[str, ...]] = {
    1: ("chainId", "nonce", "gasPrice", "gas", "to", "value", "accessList"),
    2: (
        "chainId",
        "nonce",
        "maxPriorityFeePerGas",
        "maxFeePerGas",
        "gas",
        "to",
        "value",
        "accessList",
    ),
    3: (
        "chainId",
        "nonce",
        "maxPriorityFeePerGas",
        "maxFeePerGas",
        "gas",
        "to",
        "value",
        "accessList",
        "maxFeePerBlobGas",
        "blobVersionedHashes",
    ),
}


def _to_int(value: Any) -> int:
    if isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(value, "big")
    return int(value)


def _to_bytes(value: Any) -> bytes:
    if value is None:
        return b""
    if isinstance(value, str):
        return bytes.fromhex(value.removeprefix("0x"))
    return bytes(value)


def _access_list(entries: Any) -> list[dict[str, Any]]:
    return [
        {
            "address": Web3.to_checksum_address(entry["address"]),
            "storageKeys": [Web3.to_hex(_to_bytes(key)) for key in entry["storageKeys"]],
        }
        for entry in entries or []
    ]


def transaction_type(tx: dict[str, Any]) -> int:
    """Envelope type of a node transaction; absent means legacy."""
    value = tx.get("type")
    return LEGACY_TYPE if value is None else _to_int(value)


def _legacy_envelope(tx: dict[str, Any]) -> bytes:
    to = tx.get("to")
    return rlp.encode(
        [
            _to_int(tx["nonce"]),
            _to_int(tx["gasPrice"]),
            _to_int(tx["gas"]),
            Web3.to_bytes(hexstr=to) if to else b"",
            _to_int(tx.get("value", 0)),
            _to_bytes(tx.get("input")),
            _to_int(tx["v"]),
            _to_int(tx["r"]),
            _to_int(tx["s"]),
        ]
    )


def _typed_envelope(tx_type: int, tx: dict[str, Any]) -> bytes:
    fields: dict[str, Any] = {"type": tx_type}
    for key in _TYPED_FIELDS[tx_type]:
        if key == "to":
            to = tx.get("to")
            fields["to"] = Web3.to_checksum_address(to) if to else None
        elif key == "accessList":
            fields["accessList"] = _access_list(tx.get("accessList"))
        elif key == "blobVersionedHashes":
            fields[key] = [Web3.to_hex(_to_bytes(h)) for h in tx.get(key) or []]
        else:
            fields[key] = _to_int(tx.get(key, 0))
    fields["data"] = _to_bytes(tx.get("input"))

    # Typed transactions carry the parity bit; older nodes only report v
    parity = tx.get("yParity", tx.get("v"))
    fields["v"] = _to_int(parity)
    fields["r"] = _to_int(tx["r"])
    fields["s"] = _to_int(tx["s"])
    return TypedTransaction.from_dict(fields).encode()


def signed_envelope(tx: dict[str, Any]) -> bytes:
    """Re-serialize a mined transaction with its signature.

    Raises:
        ValueError: Unsupported type or missing signature fields
    """
    tx_type = transaction_type(tx)
    try:
        if tx_type == LEGACY_TYPE:
            return _legacy_envelope(tx)
        if tx_type not in _TYPED_FIELDS:
            raise ValueError(f"unsupported transaction type {tx_type}")
        return _typed_envelope(tx_type, tx)
    except KeyError as e:
        raise ValueError(f"transaction is missing field {e}") from e


def recover_sender(tx: dict[str, Any]) -> str:
    """Recover the checksummed sender address of a mined transaction."""
    return Account.recover_transaction(signed_envelope(tx))
