"""Parsing of transaction hash lists supplied by callers."""

from collections.abc import Iterable

import rlp
from rlp.exceptions import DecodingError


def normalize_hashes(values: Iterable[str], dedupe: bool = True) -> list[str]:
    """Split comma-separated values, trim whitespace, drop empties.

    Deduplication is an exact, case-sensitive match keeping first occurrence.
    """
    hashes: list[str] = []
    seen: set[str] = set()
    for value in values:
        for part in value.split(","):
            tx_hash = part.strip()
            if not tx_hash:
                continue
            if dedupe:
                if tx_hash in seen:
                    continue
                seen.add(tx_hash)
            hashes.append(tx_hash)
    return hashes


def decode_rlp_hashes(rlp_hex: str) -> list[str]:
    """Decode a hex-encoded RLP list of hash strings.

    Raises:
        ValueError: Not hex, not RLP, or not a flat list of strings
    """
    try:
        payload = bytes.fromhex(rlp_hex.removeprefix("0x"))
    except ValueError as e:
        raise ValueError(f"invalid hex: {e}") from e

    try:
        items = rlp.decode(payload)
    except DecodingError as e:
        raise ValueError(f"invalid RLP payload: {e}") from e

    if not isinstance(items, list) or not all(isinstance(i, bytes) for i in items):
        raise ValueError("RLP payload must be a list of strings")

    try:
        return [item.decode("utf-8") for item in items]
    except UnicodeDecodeError as e:
        raise ValueError(f"RLP item is not text: {e}") from e
