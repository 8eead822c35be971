"""Create transactions, person_info_events and users tables

Revision ID: 001
Revises: None
Create Date: 2026-10-17 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Resolved transactions
    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("transaction_hash", sa.String(66), nullable=False),
        # Receipt and block
        sa.Column("transaction_status", sa.SmallInteger(), nullable=False),
        sa.Column("block_hash", sa.String(66), nullable=False),
        sa.Column("block_number", sa.BigInteger(), nullable=False),
        sa.Column("logs_count", sa.Integer(), nullable=False, server_default="0"),
        # Participants
        sa.Column("from_address", sa.String(42), nullable=False),
        sa.Column("to_address", sa.String(42), nullable=True),
        sa.Column("contract_address", sa.String(42), nullable=False, server_default=""),
        # Payload
        sa.Column("input", sa.Text(), nullable=False, server_default=""),
        sa.Column("value", sa.Text(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("transaction_hash"),
    )
    op.create_index("ix_transactions_block_number", "transactions", ["block_number"])
    op.create_index("ix_transactions_from_address", "transactions", ["from_address"])

    # Ingested PersonInfoUpdated events
    op.create_table(
        "person_info_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("person_index", sa.Numeric(78, 0), nullable=False),
        sa.Column("person_name", sa.Text(), nullable=False),
        sa.Column("person_age", sa.Numeric(78, 0), nullable=False),
        sa.Column("transaction_hash", sa.String(66), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("person_index"),
    )

    # API users
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column(
            "searched_transaction_ids",
            postgresql.ARRAY(sa.Integer()),
            nullable=False,
            server_default="{}",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )


def downgrade() -> None:
    op.drop_table("users")
    op.drop_table("person_info_events")
    op.drop_index("ix_transactions_from_address", table_name="transactions")
    op.drop_index("ix_transactions_block_number", table_name="transactions")
    op.drop_table("transactions")
