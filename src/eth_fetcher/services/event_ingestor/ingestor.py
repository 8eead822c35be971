"""Ingestion of PersonInfoUpdated events from a live subscription."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eth_fetcher.core.errors import DuplicateKeyError, SubscriptionError
from eth_fetcher.infrastructure.blockchain.contracts import (
    PersonInfoContract,
    PersonInfoSubscription,
)
from eth_fetcher.infrastructure.blockchain.events import PersonInfoUpdated
from eth_fetcher.models.person_info_event import PersonInfoEvent
from eth_fetcher.repositories.person_info_event import PersonInfoEventRepository

logger = logging.getLogger(__name__)


class IngestorState(str, Enum):
    """Event ingestor state."""

    STOPPED = "stopped"
    RUNNING = "running"
    RECONNECTING = "reconnecting"


@dataclass
class IngestorConfig:
    """Configuration for event ingestor."""

    # Re-subscribe attempts after a subscription error (0 = stop on first error)
    max_reconnect_attempts: int = 5

    # Reconnect delay (seconds), multiplied by the attempt number
    reconnect_delay: float = 2.0


@dataclass
class IngestorStats:
    """Statistics for event ingestor."""

    state: IngestorState = IngestorState.STOPPED
    events_processed: int = 0
    events_skipped: int = 0
    errors: int = 0
    reconnects: int = 0
    last_error: str = ""
    last_event_time: datetime | None = None
    started_at: datetime | None = None
    uptime_seconds: float = 0.0


class EventIngestor:
    """Drains the PersonInfoUpdated subscription into the event store.

    Each contract index is stored at most once: replays after a reconnect
    or duplicate deliveries hit the unique index and are skipped.
    """

    def __init__(
        self,
        contract: PersonInfoContract,
        session_factory: async_sessionmaker[AsyncSession],
        config: IngestorConfig | None = None,
    ):
        """Initialize event ingestor.

        Args:
            contract: Contract gateway providing the event subscription
            session_factory: Factory for per-event database sessions
            config: Reconnection configuration
        """
        self.contract = contract
        self.session_factory = session_factory
        self.config = config or IngestorConfig()

        # State
        self._state = IngestorState.STOPPED
        self._stats = IngestorStats()
        self._task: asyncio.Task | None = None
        self._subscription: PersonInfoSubscription | None = None
        self._stop_event = asyncio.Event()

    @property
    def state(self) -> IngestorState:
        """Get current ingestor state."""
        return self._state

    @property
    def stats(self) -> IngestorStats:
        """Get ingestor statistics."""
        self._stats.state = self._state
        if self._stats.started_at:
            self._stats.uptime_seconds = (
                datetime.now(timezone.utc) - self._stats.started_at
            ).total_seconds()
        return self._stats

    async def start(self) -> None:
        """Start ingesting in a background task."""
        if self._task is not None and not self._task.done():
            logger.warning("Event ingestor is already running")
            return

        self._stop_event.clear()
        self._stats.started_at = datetime.now(timezone.utc)
        self._state = IngestorState.RUNNING
        self._task = asyncio.create_task(self.run(), name="person-info-ingestor")
        logger.info("Event ingestor started")

    async def stop(self) -> None:
        """Stop ingesting: unsubscribe and wait for the task to finish."""
        self._stop_event.set()

        if self._subscription is not None:
            await self._subscription.cancel()

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        self._state = IngestorState.STOPPED
        logger.info("Event ingestor stopped")

    async def run(self) -> None:
        """Subscribe and drain until stopped or reconnects are exhausted."""
        self._state = IngestorState.RUNNING
        reconnect_attempts = 0

        try:
            while not self._stop_event.is_set():
                try:
                    if reconnect_attempts > 0:
                        await self.contract.reconnect()
                    self._subscription = await self.contract.subscribe_person_info_updated()
                    self._state = IngestorState.RUNNING
                    async for event in self._subscription:
                        if await self.ingest(event):
                            reconnect_attempts = 0
                        if self._stop_event.is_set():
                            break

                except SubscriptionError as e:
                    if self._stop_event.is_set():
                        break

                    self._stats.errors += 1
                    self._stats.last_error = str(e)
                    logger.error(f"Event subscription error: {e}")

                    reconnect_attempts += 1
                    if reconnect_attempts > self.config.max_reconnect_attempts:
                        logger.error("Reconnect attempts exhausted, event ingestion stopped")
                        break

                    self._state = IngestorState.RECONNECTING
                    self._stats.reconnects += 1
                    delay = self.config.reconnect_delay * reconnect_attempts
                    logger.info(f"Resubscribing in {delay}s (attempt {reconnect_attempts})")
                    try:
                        await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
                    except asyncio.TimeoutError:
                        pass

                finally:
                    if self._subscription is not None:
                        await self._subscription.cancel()
                        self._subscription = None
        finally:
            self._state = IngestorState.STOPPED

    async def ingest(self, event: PersonInfoUpdated) -> bool:
        """Store one event.

        Returns:
            True if stored, False if already present or the insert failed
        """
        async with self.session_factory() as session:
            repo = PersonInfoEventRepository(session)
            try:
                await repo.insert(
                    PersonInfoEvent(
                        person_index=event.index,
                        person_name=event.name,
                        person_age=event.age,
                        transaction_hash=event.tx_hash,
                    )
                )
            except DuplicateKeyError:
                self._stats.events_skipped += 1
                logger.info(f"PersonInfoUpdated #{event.index} already ingested, skipping")
                return False
            except Exception as e:
                self._stats.errors += 1
                self._stats.last_error = str(e)
                logger.error(f"Failed to insert PersonInfoUpdated #{event.index}: {e}")
                return False

        self._stats.events_processed += 1
        self._stats.last_event_time = datetime.now(timezone.utc)
        logger.info(f"Inserted PersonInfoUpdated #{event.index} from {event.tx_hash}")
        return True

    def get_status(self) -> dict[str, Any]:
        """Get ingestion status."""
        stats = self.stats
        return {
            "state": stats.state.value,
            "events_processed": stats.events_processed,
            "events_skipped": stats.events_skipped,
            "errors": stats.errors,
            "reconnects": stats.reconnects,
            "last_error": stats.last_error,
            "uptime_seconds": stats.uptime_seconds,
        }
