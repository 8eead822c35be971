"""Transaction resolution service module."""

from eth_fetcher.services.resolver.inputs import decode_rlp_hashes, normalize_hashes
from eth_fetcher.services.resolver.resolver import TransactionResolver, map_transaction
from eth_fetcher.services.resolver.schemas import (
    Resolution,
    ResolutionOutcome,
    TransactionListResponse,
    TransactionRecord,
)
from eth_fetcher.services.resolver.sender import recover_sender

__all__ = [
    # Resolver
    "TransactionResolver",
    "map_transaction",
    "recover_sender",
    # Inputs
    "normalize_hashes",
    "decode_rlp_hashes",
    # Schemas
    "Resolution",
    "ResolutionOutcome",
    "TransactionRecord",
    "TransactionListResponse",
]
