"""Tests for PersonInfoUpdated event ingestion."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from eth_fetcher.core.errors import DuplicateKeyError, SubscriptionError
from eth_fetcher.infrastructure.blockchain.events import PersonInfoUpdated
from eth_fetcher.services.event_ingestor import (
    EventIngestor,
    IngestorConfig,
    IngestorState,
)


def make_event(index: int, name: str = "Alice", age: int = 30) -> PersonInfoUpdated:
    return PersonInfoUpdated(index=index, name=name, age=age, tx_hash=f"0x{index:064x}")


class FakeSubscription:
    """Subscription delivering fixed events, then failing or blocking."""

    def __init__(self, events=(), error: Exception | None = None, block: bool = False):
        self.events = list(events)
        self.error = error
        self.block = block
        self.cancel = AsyncMock()

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for event in self.events:
            yield event
        if self.error is not None:
            raise self.error
        if self.block:
            await asyncio.Event().wait()


class FakeSessionFactory:
    """Session factory yielding a mock session per use."""

    def __call__(self):
        return self

    async def __aenter__(self):
        return MagicMock()

    async def __aexit__(self, *exc_info):
        return False


class FakeEventStore:
    """Event store keyed by contract index."""

    def __init__(self):
        self.rows = {}

    async def insert(self, row):
        if row.person_index in self.rows:
            raise DuplicateKeyError(str(row.person_index))
        self.rows[row.person_index] = row
        return row


@pytest.fixture
def event_store():
    store = FakeEventStore()
    with patch(
        "eth_fetcher.services.event_ingestor.ingestor.PersonInfoEventRepository",
        return_value=store,
    ):
        yield store


def make_ingestor(subscriptions, **config) -> tuple[EventIngestor, MagicMock]:
    contract = MagicMock()
    contract.subscribe_person_info_updated = AsyncMock(side_effect=subscriptions)
    contract.reconnect = AsyncMock()
    ingestor = EventIngestor(
        contract,
        FakeSessionFactory(),
        IngestorConfig(**{"reconnect_delay": 0, **config}),
    )
    return ingestor, contract


class TestIngest:
    """Tests for storing single events."""

    @pytest.mark.asyncio
    async def test_stores_event(self, event_store):
        """Test an event is stored keyed by index."""
        ingestor, _ = make_ingestor([])

        assert await ingestor.ingest(make_event(7, "Bob", 41)) is True

        row = event_store.rows[7]
        assert row.person_name == "Bob"
        assert row.person_age == 41
        assert row.transaction_hash == f"0x{7:064x}"
        assert ingestor.stats.events_processed == 1

    @pytest.mark.asyncio
    async def test_duplicate_is_skipped(self, event_store):
        """Test a replayed index is a no-op."""
        ingestor, _ = make_ingestor([])

        await ingestor.ingest(make_event(1, "Alice"))
        assert await ingestor.ingest(make_event(1, "Changed")) is False

        assert event_store.rows[1].person_name == "Alice"
        assert ingestor.stats.events_skipped == 1

    @pytest.mark.asyncio
    async def test_insert_failure_is_counted(self, event_store):
        """Test a failed insert is logged and ingestion continues."""
        ingestor, _ = make_ingestor([])

        with patch.object(event_store, "insert", AsyncMock(side_effect=RuntimeError("db down"))):
            assert await ingestor.ingest(make_event(1)) is False

        assert ingestor.stats.errors == 1
        assert "db down" in ingestor.stats.last_error


class TestRun:
    """Tests for the subscription drain loop."""

    @pytest.mark.asyncio
    async def test_drains_events_with_duplicates(self, event_store):
        """Test each index is stored once across duplicate deliveries."""
        subscription = FakeSubscription(
            [make_event(1), make_event(1), make_event(2)],
            error=SubscriptionError("closed"),
        )
        ingestor, _ = make_ingestor([subscription], max_reconnect_attempts=0)

        await ingestor.run()

        assert sorted(event_store.rows) == [1, 2]
        assert ingestor.stats.events_processed == 2
        assert ingestor.stats.events_skipped == 1
        assert ingestor.state == IngestorState.STOPPED
        subscription.cancel.assert_awaited()

    @pytest.mark.asyncio
    async def test_fail_stop_without_reconnects(self, event_store):
        """Test a subscription error stops ingestion when reconnects are off."""
        ingestor, contract = make_ingestor(
            [FakeSubscription(error=SubscriptionError("boom"))],
            max_reconnect_attempts=0,
        )

        await ingestor.run()

        assert contract.subscribe_person_info_updated.await_count == 1
        assert ingestor.stats.errors == 1
        assert ingestor.stats.reconnects == 0

    @pytest.mark.asyncio
    async def test_reconnects_and_resets_after_event(self, event_store):
        """Test resubscription, with the attempt counter reset by a stored event."""
        ingestor, contract = make_ingestor(
            [
                FakeSubscription(error=SubscriptionError("first")),
                FakeSubscription([make_event(3)], error=SubscriptionError("second")),
                FakeSubscription(error=SubscriptionError("third")),
            ],
            max_reconnect_attempts=1,
        )

        await ingestor.run()

        assert contract.subscribe_person_info_updated.await_count == 3
        assert ingestor.stats.reconnects == 2
        assert list(event_store.rows) == [3]

    @pytest.mark.asyncio
    async def test_subscribe_failure_counts_as_error(self, event_store):
        """Test failing to open a subscription is retried like a dropped one."""
        ingestor, contract = make_ingestor(
            [SubscriptionError("refused"), SubscriptionError("refused")],
            max_reconnect_attempts=1,
        )

        await ingestor.run()

        assert contract.subscribe_person_info_updated.await_count == 2
        assert ingestor.stats.errors == 2

    @pytest.mark.asyncio
    async def test_reopens_connection_before_resubscribing(self, event_store):
        """Test a dropped socket is replaced before the next subscription."""
        calls = []
        subscriptions = [
            FakeSubscription(error=SubscriptionError("socket closed")),
            FakeSubscription([make_event(4)], error=SubscriptionError("closed")),
            FakeSubscription(error=SubscriptionError("closed")),
        ]
        ingestor, contract = make_ingestor([], max_reconnect_attempts=1)
        contract.reconnect.side_effect = lambda: calls.append("reconnect")

        async def tracked_subscribe():
            calls.append("subscribe")
            return subscriptions.pop(0)

        contract.subscribe_person_info_updated.side_effect = tracked_subscribe

        await ingestor.run()

        assert calls == ["subscribe", "reconnect", "subscribe", "reconnect", "subscribe"]
        assert list(event_store.rows) == [4]

    @pytest.mark.asyncio
    async def test_failed_reconnect_uses_an_attempt(self, event_store):
        """Test an unreachable endpoint exhausts the reconnect budget."""
        ingestor, contract = make_ingestor(
            [FakeSubscription(error=SubscriptionError("socket closed"))],
            max_reconnect_attempts=2,
        )
        contract.reconnect.side_effect = SubscriptionError("refused")

        await ingestor.run()

        assert contract.reconnect.await_count == 2
        assert contract.subscribe_person_info_updated.await_count == 1
        assert ingestor.stats.errors == 3
        assert ingestor.state == IngestorState.STOPPED


class TestLifecycle:
    """Tests for start/stop."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self, event_store):
        """Test stop unsubscribes and ends the background task."""
        subscription = FakeSubscription([make_event(1)], block=True)
        ingestor, _ = make_ingestor([subscription])

        await ingestor.start()
        for _ in range(20):
            if event_store.rows:
                break
            await asyncio.sleep(0)

        assert ingestor.state == IngestorState.RUNNING
        await ingestor.stop()

        assert ingestor.state == IngestorState.STOPPED
        assert list(event_store.rows) == [1]
        subscription.cancel.assert_awaited()

    @pytest.mark.asyncio
    async def test_stop_when_not_started(self):
        """Test stop is safe before start."""
        ingestor, _ = make_ingestor([])

        await ingestor.stop()

        assert ingestor.state == IngestorState.STOPPED

    @pytest.mark.asyncio
    async def test_get_status(self, event_store):
        """Test status report fields."""
        ingestor, _ = make_ingestor([])
        await ingestor.ingest(make_event(1))

        status = ingestor.get_status()

        assert status["state"] == "stopped"
        assert status["events_processed"] == 1
