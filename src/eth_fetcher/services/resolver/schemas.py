"""Schemas for transaction resolution."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from eth_fetcher.models.transaction import Transaction


class ResolutionOutcome(str, Enum):
    """How a single resolution attempt ended. Never persisted."""

    CACHED = "cached"
    FETCHED = "fetched"
    PENDING = "pending"
    FAILED = "failed"


@dataclass
class Resolution:
    """Resolved record with the path that produced it."""

    record: Transaction
    outcome: ResolutionOutcome


class TransactionRecord(BaseModel):
    """API representation of a stored transaction."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    transaction_hash: str = Field(alias="transactionHash")
    transaction_status: int = Field(alias="transactionStatus")
    block_hash: str = Field(alias="blockHash")
    block_number: int = Field(alias="blockNumber")
    from_address: str = Field(alias="from")
    to_address: str | None = Field(default=None, alias="to")
    contract_address: str = Field(default="", alias="contractAddress")
    logs_count: int = Field(alias="logsCount")
    input: str
    value: str


class TransactionListResponse(BaseModel):
    """List of transactions."""

    transactions: list[TransactionRecord]
