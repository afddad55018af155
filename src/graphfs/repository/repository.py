"""Base repository implementation."""

from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from loguru import logger
from sqlalchemy import Executable, Result, delete, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from graphfs import db
from graphfs.models.base import Base

T = TypeVar("T", bound=Base)

# Columns that are written once at insert time
IMMUTABLE_COLUMNS = frozenset({"id", "created_at"})


class Repository(Generic[T]):
    """Base repository with generic CRUD operations keyed by the opaque record key."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession], Model: Type[T]):
        self.session_maker = session_maker
        self.Model = Model
        self.mapper = inspect(self.Model).mapper
        self.primary_key = self.mapper.primary_key[0]
        self.valid_columns = [column.key for column in self.mapper.columns]

    def get_model_data(self, entity_data: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in entity_data.items() if k in self.valid_columns}

    async def select_by_id(self, session: AsyncSession, key: Any) -> Optional[T]:
        """Fetch one record inside an existing session."""
        return await session.get(self.Model, key)

    async def find_by_id(self, key: Any) -> Optional[T]:
        """Fetch an entity by its primary key."""
        logger.debug(f"Finding {self.Model.__name__} by key: {key}")
        async with db.scoped_session(self.session_maker) as session:
            return await self.select_by_id(session, key)

    async def find_by_ids(self, keys: List[Any]) -> Sequence[T]:
        """Fetch multiple entities by their primary keys."""
        if not keys:
            return []
        query = select(self.Model).where(self.primary_key.in_(keys))
        result = await self.execute_query(query)
        return result.scalars().all()

    async def find_all(self, limit: Optional[int] = None, offset: int = 0) -> Sequence[T]:
        """Fetch records from the database with pagination."""
        query = select(self.Model).offset(offset)
        if limit:
            query = query.limit(limit)
        result = await self.execute_query(query)
        return result.scalars().all()

    async def create(self, data: Dict[str, Any]) -> T:
        """Create a new record from a dict of column values."""
        logger.debug(f"Creating {self.Model.__name__} from data: {data}")
        async with db.scoped_session(self.session_maker) as session:
            model = self.Model(**self.get_model_data(data))
            session.add(model)
            await session.flush()
            await session.refresh(model)
            return model

    async def update(self, key: Any, data: Dict[str, Any]) -> Optional[T]:
        """Merge column values into an existing record.

        Returns None if no record has the given key.
        """
        frozen = IMMUTABLE_COLUMNS & data.keys()
        if frozen:
            raise ValueError(f"Cannot update immutable columns: {sorted(frozen)}")

        async with db.scoped_session(self.session_maker) as session:
            model = await self.select_by_id(session, key)
            if model is None:
                return None
            for column, value in self.get_model_data(data).items():
                setattr(model, column, value)
            await session.flush()
            await session.refresh(model)
            logger.debug(f"Updated {self.Model.__name__} {key}: {sorted(data)}")
            return model

    async def delete_by_id(self, key: Any) -> bool:
        """Delete a record by primary key. Returns True if a row was removed."""
        async with db.scoped_session(self.session_maker) as session:
            result = await session.execute(delete(self.Model).where(self.primary_key == key))
            deleted = result.rowcount > 0  # pyright: ignore [reportAttributeAccessIssue]
            logger.debug(f"Deleted {self.Model.__name__} {key}: {deleted}")
            return deleted

    async def count(self, query: Executable | None = None) -> int:
        """Count records, optionally restricted by a filter query."""
        if query is None:
            query = select(func.count()).select_from(self.Model)
        result = await self.execute_query(query)
        return result.scalar_one()

    async def execute_query(self, query: Executable) -> Result[Any]:
        """Execute a query in its own transaction."""
        async with db.scoped_session(self.session_maker) as session:
            return await session.execute(query)
