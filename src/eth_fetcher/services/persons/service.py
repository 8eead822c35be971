"""Person info service: contract writes, on-chain reads and stored events."""

import logging
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from eth_fetcher.core.errors import (
    ConfirmationTimeoutError,
    EthFetcherError,
    FetchError,
)
from eth_fetcher.infrastructure.blockchain.contracts import PersonInfoContract
from eth_fetcher.infrastructure.blockchain.transaction import ConfirmationWaiter
from eth_fetcher.models.person_info_event import PersonInfoEvent
from eth_fetcher.repositories.person_info_event import PersonInfoEventRepository
from eth_fetcher.services.persons.schemas import SubmissionOutcome, SubmissionStatus

logger = logging.getLogger(__name__)


class PersonInfoService:
    """Service for the SimplePersonInfo contract."""

    def __init__(self, contract: PersonInfoContract, waiter: ConfirmationWaiter):
        """Initialize service.

        Args:
            contract: Contract gateway (with signer for writes)
            waiter: Receipt waiter used after submission
        """
        self.contract = contract
        self.waiter = waiter

    async def save_person(self, name: str, age: int) -> SubmissionOutcome:
        """Submit setPersonInfo and wait for its receipt.

        The three receipt outcomes stay distinct: mined and successful,
        mined and reverted, or still unconfirmed at the deadline. Any error
        raised once the transaction is broadcast carries its hash, so the
        caller can look it up before deciding to resubmit.

        Raises:
            FetchError: Submission was rejected, or the receipt query failed
        """
        try:
            tx_hash = await self.contract.set_person_info(name, age)
        except (EthFetcherError, ValueError, RuntimeError):
            raise
        except Exception as e:
            raise FetchError(f"failed to submit setPersonInfo: {e}") from e

        try:
            receipt = await self.waiter.wait_for_receipt(tx_hash)
        except ConfirmationTimeoutError as e:
            logger.warning(f"setPersonInfo transaction {tx_hash} submitted but unconfirmed: {e}")
            return SubmissionOutcome(tx_hash=tx_hash, status=SubmissionStatus.UNCONFIRMED)
        except FetchError as e:
            e.tx_hash = tx_hash
            raise
        except Exception as e:
            raise FetchError(
                f"receipt query for submitted transaction {tx_hash} failed: {e}", tx_hash
            ) from e

        status = (
            SubmissionStatus.CONFIRMED
            if receipt.get("status") == 1
            else SubmissionStatus.REVERTED
        )
        logger.info(f"setPersonInfo transaction {tx_hash}: {status.value}")
        return SubmissionOutcome(
            tx_hash=tx_hash, status=status, block_number=receipt.get("blockNumber")
        )

    async def get_person(self, index: int) -> tuple[str, int]:
        """Read the on-chain entry at an index."""
        try:
            return await self.contract.get_person_info(index)
        except (EthFetcherError, ValueError):
            raise
        except Exception as e:
            raise FetchError(f"getPersonInfo({index}) failed: {e}") from e

    async def get_count(self) -> int:
        """Read the number of on-chain entries."""
        try:
            return await self.contract.get_persons_count()
        except EthFetcherError:
            raise
        except Exception as e:
            raise FetchError(f"getPersonsCount failed: {e}") from e

    async def list_persons(self, session: AsyncSession) -> Sequence[PersonInfoEvent]:
        """List ingested events ordered by id."""
        return await PersonInfoEventRepository(session).get_all()
