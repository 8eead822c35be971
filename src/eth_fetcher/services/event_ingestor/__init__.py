"""PersonInfoUpdated event ingestion service module."""

from eth_fetcher.services.event_ingestor.ingestor import (
    EventIngestor,
    IngestorConfig,
    IngestorState,
    IngestorStats,
)

__all__ = [
    "EventIngestor",
    "IngestorConfig",
    "IngestorState",
    "IngestorStats",
]
