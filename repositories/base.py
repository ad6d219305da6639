"""
Base Repository Pattern with SQLAlchemy

Repositories never commit. They run inside the caller's `get_session()`
block, so a ranking run's reads and writes share one transaction.
"""
from typing import TypeVar, Generic, Optional, List, Sequence, Type, Any

from sqlalchemy import select, Update, Delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from database.models.base import Base


ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Shared reads and writes for one mapped table.

    Subclasses set `model`:

        class StoryRepository(BaseRepository[Story]):
            model = Story
    """

    model: Type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    # ============================================
    # READ OPERATIONS
    # ============================================

    async def get(self, entity_id: Any) -> Optional[ModelT]:
        """Get entity by primary key, or None."""
        return await self.session.get(self.model, entity_id)

    async def get_all(
        self,
        limit: int = 100,
        offset: int = 0,
        order_by: str = "id",
        descending: bool = False
    ) -> Sequence[ModelT]:
        """
        Get a page of entities.

        Args:
            limit: Maximum number of results
            offset: Number of results to skip
            order_by: Column name to sort by
            descending: Sort in descending order
        """
        column = getattr(self.model, order_by)
        if descending:
            column = column.desc()

        stmt = select(self.model).order_by(column).limit(limit).offset(offset)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    # ============================================
    # WRITE OPERATIONS
    # ============================================

    async def add(self, entity: ModelT) -> ModelT:
        """Add and flush one entity so generated keys are populated."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def add_all(self, entities: List[ModelT]) -> List[ModelT]:
        """Add multiple entities in one flush."""
        self.session.add_all(entities)
        await self.session.flush()
        return entities

    async def execute_write(self, stmt: Executable) -> int:
        """
        Run a bulk UPDATE / DELETE / INSERT and return the affected row count.

        Bulk statements bypass the identity map, so loaded objects are not
        synchronised.
        """
        if isinstance(stmt, (Update, Delete)):
            stmt = stmt.execution_options(synchronize_session=False)
        result = await self.session.execute(stmt)
        return result.rowcount
