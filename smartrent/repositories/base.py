"""
Generic async repository shared by the model-specific repositories.

Writes commit immediately. A failed write rolls the session back before the
error propagates, and a conditional update that matched nothing is rolled back too.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, update, delete
from smartrent.database import Base
from typing import TypeVar, Generic, Optional, Dict, Any, Type
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)

# PostgreSQL SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """
    True when an IntegrityError came from a unique constraint.

    asyncpg exposes the SQLSTATE on the wrapped DBAPI error; SQLite only reports it in the message.
    """
    orig = getattr(exc, "orig", None)
    if any(getattr(orig, attr, None) == UNIQUE_VIOLATION for attr in ("sqlstate", "pgcode")):
        return True
    message = str(orig if orig is not None else exc).lower()
    return "unique" in message or "duplicate key" in message


class BaseRepository(Generic[ModelType]):
    """Insert, fetch-by-id and bulk conditional update/delete for one model."""

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    @property
    def _name(self) -> str:
        return self.model.__name__

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Insert a row and commit.

        Raises:
            IntegrityError: On a constraint violation, after rolling back
        """
        obj = self.model(**obj_in)
        self.db.add(obj)
        try:
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.warning(f"Insert into {self._name} failed: {e}")
            raise

        await self.db.refresh(obj)
        logger.debug(f"Created {self._name} {obj.id}")
        return obj

    async def get_by_id(self, id: uuid.UUID, refresh: bool = False) -> Optional[ModelType]:
        """
        Fetch a row by primary key.

        Args:
            id: Primary key
            refresh: Reload even if the session already holds this row, e.g. after a bulk update
        """
        query = select(self.model).where(self.model.id == id)
        if refresh:
            query = query.execution_options(populate_existing=True)

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def update_where(self, *criteria, values: Dict[str, Any]) -> int:
        """
        UPDATE ... WHERE criteria, committed in one statement.

        Returns:
            Number of rows changed; 0 means nothing matched and nothing was committed
        """
        stmt = (
            update(self.model)
            .where(*criteria)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                return 0
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Update of {self._name} failed: {e}")
            raise

        return result.rowcount

    async def delete_where(self, *criteria) -> int:
        """
        DELETE ... WHERE criteria, committed in one statement.

        Returns:
            Number of rows deleted
        """
        stmt = delete(self.model).where(*criteria).execution_options(synchronize_session=False)
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Delete from {self._name} failed: {e}")
            raise

        return result.rowcount
