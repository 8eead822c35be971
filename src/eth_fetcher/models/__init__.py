"""Database models for eth-fetcher."""

from eth_fetcher.models.base import Base
from eth_fetcher.models.person_info_event import PersonInfoEvent
from eth_fetcher.models.transaction import (
    STATUS_FAILED,
    STATUS_SUCCESSFUL,
    Transaction,
)
from eth_fetcher.models.user import User

__all__ = [
    # Base
    "Base",
    # Chain data
    "Transaction",
    "STATUS_SUCCESSFUL",
    "STATUS_FAILED",
    "PersonInfoEvent",
    # Users
    "User",
]
