"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

TEST_PRIVATE_KEY = "0x" + "11" * 32


@pytest.fixture(scope="function")
def settings():
    """Create settings instance for testing."""
    from eth_fetcher.core.config import Settings

    return Settings(
        environment="testing",
        private_key=TEST_PRIVATE_KEY,
        jwt_secret="test-secret",
        log_format="console",
    )


@pytest.fixture
def db_session():
    """Mocked async database session."""
    session = MagicMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def runtime(settings):
    """Runtime with mocked node, contract and ingestor."""
    runtime = MagicMock()
    runtime.settings = settings
    runtime.start = AsyncMock()
    runtime.shutdown = AsyncMock()
    runtime.client = MagicMock()
    runtime.contract = MagicMock()
    runtime.waiter = MagicMock()
    runtime.ingestor = MagicMock()
    runtime.ingestor.get_status.return_value = {"state": "running"}
    return runtime


@pytest.fixture
def app(settings, runtime, db_session):
    """Create FastAPI application for testing."""
    from eth_fetcher.infrastructure.database.session import get_async_db
    from eth_fetcher.main import create_app

    app = create_app(settings, runtime=runtime)

    async def override_db():
        yield db_session

    app.dependency_overrides[get_async_db] = override_db
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    with TestClient(app) as client:
        yield client
