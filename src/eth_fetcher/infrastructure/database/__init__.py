"""Database infrastructure module."""

from eth_fetcher.infrastructure.database.session import (
    create_async_db_engine,
    create_session_factory,
    get_async_db,
)

__all__ = [
    "create_async_db_engine",
    "create_session_factory",
    "get_async_db",
]
