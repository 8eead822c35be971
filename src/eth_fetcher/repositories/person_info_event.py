"""Repository for ingested PersonInfoUpdated events (the event store)."""

from eth_fetcher.models.person_info_event import PersonInfoEvent
from eth_fetcher.repositories.base import BaseRepository


class PersonInfoEventRepository(BaseRepository[PersonInfoEvent]):
    """Repository for PersonInfoEvent database operations.

    insert() raises DuplicateKeyError when the contract index is already
    stored; the ingestor treats that as an already-ingested event.
    """

    model = PersonInfoEvent
