"""PersonInfoUpdated event model."""

from decimal import Decimal

from sqlalchemy import Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eth_fetcher.models.base import Base


class PersonInfoEvent(Base):
    """Ingested PersonInfoUpdated event, one row per contract index."""

    __tablename__ = "person_info_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    person_index: Mapped[Decimal] = mapped_column(
        Numeric(78, 0), unique=True, nullable=False
    )
    person_name: Mapped[str] = mapped_column(Text, nullable=False)
    person_age: Mapped[Decimal] = mapped_column(Numeric(78, 0), nullable=False)
    transaction_hash: Mapped[str] = mapped_column(String(66), nullable=False)
