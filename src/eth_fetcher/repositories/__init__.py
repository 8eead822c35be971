"""Repository layer for database operations.

Async repository implementations using SQLAlchemy 2.x. Inserts commit
immediately and report unique-constraint conflicts as DuplicateKeyError.
"""

from eth_fetcher.repositories.base import BaseRepository
from eth_fetcher.repositories.person_info_event import PersonInfoEventRepository
from eth_fetcher.repositories.transaction import TransactionRepository
from eth_fetcher.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "TransactionRepository",
    "PersonInfoEventRepository",
    "UserRepository",
]
