"""Long-lived collaborators shared by requests and the background ingestor."""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from eth_fetcher.core.config import Settings
from eth_fetcher.infrastructure.blockchain.client import EthereumClient
from eth_fetcher.infrastructure.blockchain.contracts import PersonInfoContract
from eth_fetcher.infrastructure.blockchain.transaction import (
    ConfirmationWaiter,
    TransactionSigner,
)
from eth_fetcher.infrastructure.database.session import (
    create_async_db_engine,
    create_session_factory,
)
from eth_fetcher.models.base import Base
from eth_fetcher.services.auth.service import seed_users
from eth_fetcher.services.event_ingestor.ingestor import EventIngestor, IngestorConfig

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Connected node client, contract gateway, database and ingestor."""

    settings: Settings
    client: EthereumClient
    contract: PersonInfoContract
    waiter: ConfirmationWaiter
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    ingestor: EventIngestor | None = None

    @classmethod
    async def build(cls, settings: Settings) -> "Runtime":
        """Connect to the node and wire collaborators.

        Raises:
            ConfigurationError: Node unreachable or no signing key
        """
        private_key = settings.require_signing_key()

        client = EthereumClient(
            http_url=settings.eth_node_url,
            ws_url=settings.eth_socket_url,
            max_retries=settings.rpc_max_retries,
            retry_delay=settings.rpc_retry_delay,
        )
        await client.connect()

        signer = TransactionSigner(client, private_key, gas_limit=settings.tx_gas_limit)
        contract = PersonInfoContract(
            client, settings.person_info_contract_address, signer=signer
        )
        waiter = ConfirmationWaiter(
            client,
            poll_interval=settings.confirmation_poll_interval,
            timeout=settings.confirmation_timeout,
        )

        engine = create_async_db_engine(settings)
        session_factory = create_session_factory(engine)

        ingestor = None
        if settings.ingestor_enabled:
            ingestor = EventIngestor(
                contract,
                session_factory,
                IngestorConfig(
                    max_reconnect_attempts=settings.ingestor_max_reconnect_attempts,
                    reconnect_delay=settings.ingestor_reconnect_delay,
                ),
            )

        return cls(
            settings=settings,
            client=client,
            contract=contract,
            waiter=waiter,
            engine=engine,
            session_factory=session_factory,
            ingestor=ingestor,
        )

    async def start(self) -> None:
        """Prepare the database and start background ingestion."""
        if self.settings.db_auto_create:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables ensured")

        async with self.session_factory() as session:
            await seed_users(session, self.settings.jwt_secret, self.settings.default_users)

        if self.ingestor is not None:
            await self.ingestor.start()

    async def shutdown(self) -> None:
        """Stop ingestion and release connections."""
        if self.ingestor is not None:
            await self.ingestor.stop()
        await self.client.close()
        await self.engine.dispose()
        logger.info("Runtime shut down")
