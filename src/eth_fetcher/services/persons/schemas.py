"""Person info API schemas."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class SubmissionStatus(str, Enum):
    """Where a submitted write stands."""

    CONFIRMED = "confirmed"
    REVERTED = "reverted"
    # Broadcast, but no receipt before the deadline
    UNCONFIRMED = "unconfirmed"


@dataclass
class SubmissionOutcome:
    """Hash of a submitted write and its receipt outcome."""

    tx_hash: str
    status: SubmissionStatus
    block_number: int | None = None

    @property
    def confirmed(self) -> bool:
        return self.status == SubmissionStatus.CONFIRMED


class SavePersonRequest(BaseModel):
    """Request to store a person on-chain."""

    name: str = Field(..., description="Person name")
    age: int = Field(..., ge=0, description="Person age")


class SavePersonResponse(BaseModel):
    """Submitted transaction and its confirmation result."""

    model_config = ConfigDict(populate_by_name=True)

    tx_hash: str = Field(..., alias="txHash")
    tx_status: bool = Field(..., alias="txStatus")
    status: SubmissionStatus = Field(..., description="confirmed, reverted or unconfirmed")


class PersonInfoEventRecord(BaseModel):
    """API representation of an ingested PersonInfoUpdated event."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    person_index: Decimal = Field(..., alias="personIndex")
    person_name: str = Field(..., alias="personName")
    person_age: Decimal = Field(..., alias="personAge")
    transaction_hash: str = Field(..., alias="transactionHash")

    @field_serializer("person_index", "person_age")
    def serialize_uint(self, value: Decimal) -> int:
        return int(value)


class PersonListResponse(BaseModel):
    """All ingested events."""

    persons: list[PersonInfoEventRecord]


class PersonResponse(BaseModel):
    """On-chain person entry."""

    index: int
    name: str
    age: int


class PersonCountResponse(BaseModel):
    """Number of on-chain person entries."""

    count: int
