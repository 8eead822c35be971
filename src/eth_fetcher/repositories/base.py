"""Base repository with common operations.

Provides a generic async repository pattern for SQLAlchemy models.
"""

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eth_fetcher.core.errors import DuplicateKeyError
from eth_fetcher.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic async repository.

    Provides the operations shared by the stores:
    - get_all: Retrieve all records ordered by primary key
    - get_one_by_filter: Retrieve single record by column equality
    - insert: Insert and commit, mapping unique violations to DuplicateKeyError

    Example:
        repo = TransactionRepository(session)
        tx = await repo.get("0xabc...")
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with async session.

        @param session - SQLAlchemy async session
        """
        self.session = session

    async def get_all(self, *, order_by: Any | None = None) -> Sequence[ModelType]:
        """Get all records.

        @param order_by - Column to order by (default: primary key)
        @returns List of model instances
        """
        stmt = select(self.model).order_by(
            order_by if order_by is not None else self.model.id
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_one_by_filter(self, **filters: Any) -> ModelType | None:
        """Get single record matching filter criteria.

        @param filters - Key-value pairs for filtering
        @returns Model instance or None if not found
        """
        stmt = select(self.model)
        for key, value in filters.items():
            stmt = stmt.where(getattr(self.model, key) == value)
        stmt = stmt.limit(1)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def insert(self, db_obj: ModelType) -> ModelType:
        """Insert and commit a new record.

        The insert runs in a SAVEPOINT: a unique violation rolls back only
        this row, and instances already loaded in the session stay usable.

        @param db_obj - Model instance to store
        @returns Stored model instance with generated fields
        @raises DuplicateKeyError - A unique constraint already holds this key
        """
        try:
            async with self.session.begin_nested():
                self.session.add(db_obj)
                await self.session.flush()
        except IntegrityError as e:
            raise DuplicateKeyError(str(e.orig) if e.orig else str(e)) from e
        await self.session.commit()
        await self.session.refresh(db_obj)
        return db_obj
