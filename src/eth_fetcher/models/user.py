"""User model."""

from sqlalchemy import Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import Mapped, mapped_column

from eth_fetcher.models.base import Base


class User(Base):
    """API user with the set of transactions they have looked up."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    searched_transaction_ids: Mapped[list[int]] = mapped_column(
        MutableList.as_mutable(ARRAY(Integer)), nullable=False, default=list
    )
