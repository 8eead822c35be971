"""Blockchain infrastructure module."""

from eth_fetcher.infrastructure.blockchain.client import (
    ChainClient,
    EthereumClient,
    LogSubscription,
)
from eth_fetcher.infrastructure.blockchain.contracts import (
    PERSON_INFO_ABI,
    PersonInfoContract,
    PersonInfoSubscription,
)
from eth_fetcher.infrastructure.blockchain.events import EventParser, PersonInfoUpdated
from eth_fetcher.infrastructure.blockchain.transaction import (
    ConfirmationWaiter,
    TransactionSigner,
)

__all__ = [
    # Client
    "ChainClient",
    "EthereumClient",
    "LogSubscription",
    # Contract
    "PERSON_INFO_ABI",
    "PersonInfoContract",
    "PersonInfoSubscription",
    # Events
    "EventParser",
    "PersonInfoUpdated",
    # Transactions
    "ConfirmationWaiter",
    "TransactionSigner",
]
