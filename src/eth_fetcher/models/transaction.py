"""Transaction model."""

from typing import Optional

from sqlalchemy import BigInteger, Integer, SmallInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eth_fetcher.models.base import Base

STATUS_SUCCESSFUL = 1
STATUS_FAILED = 0


class Transaction(Base):
    """Resolved on-chain transaction. Immutable once stored."""

    __tablename__ = "transactions"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Identity
    transaction_hash: Mapped[str] = mapped_column(String(66), unique=True, nullable=False)

    # Receipt and block
    transaction_status: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    block_hash: Mapped[str] = mapped_column(String(66), nullable=False)
    block_number: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    logs_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Participants
    from_address: Mapped[str] = mapped_column(String(42), nullable=False, index=True)
    to_address: Mapped[Optional[str]] = mapped_column(String(42), nullable=True)
    contract_address: Mapped[str] = mapped_column(String(42), nullable=False, default="")

    # Payload; value is a decimal string of arbitrary precision
    input: Mapped[str] = mapped_column(Text, nullable=False, default="")
    value: Mapped[str] = mapped_column(Text, nullable=False, default="0")

    @property
    def is_successful(self) -> bool:
        return self.transaction_status == STATUS_SUCCESSFUL
