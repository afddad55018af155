"""Database engine and session management.

The engine is the only shared mutable resource in the process. It is created
lazily by the first caller of ``get_or_create_db`` and reused afterwards. A
failed initialization leaves the module unconfigured so that a later call
can retry.
"""

import asyncio
from contextlib import asynccontextmanager
from enum import Enum, auto
from pathlib import Path
from typing import AsyncGenerator, Optional

from loguru import logger
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from graphfs.config import ConfigManager, DatabaseBackend, GraphFSConfig
from graphfs.models import Base

# Module level state
_engine: Optional[AsyncEngine] = None
_session_maker: Optional[async_sessionmaker[AsyncSession]] = None
_init_lock: Optional[asyncio.Lock] = None


class DatabaseType(Enum):
    """Types of supported databases."""

    MEMORY = auto()
    FILESYSTEM = auto()
    POSTGRES = auto()

    @classmethod
    def get_db_url(
        cls, db_path: Optional[Path], db_type: "DatabaseType", config: Optional[GraphFSConfig]
    ) -> str:
        """Get SQLAlchemy URL for database path."""
        if db_type == cls.POSTGRES:
            if config is None or not config.database_url:
                raise ValueError("database_url must be configured for the postgres backend")
            logger.info("Using Postgres database")
            return config.database_url

        if db_type == cls.MEMORY:
            logger.info("Using in-memory SQLite database")
            return "sqlite+aiosqlite://"

        logger.info(f"Using SQLite database at {db_path}")
        return f"sqlite+aiosqlite:///{db_path}"

    @classmethod
    def from_config(cls, config: GraphFSConfig) -> "DatabaseType":
        if config.database_backend == DatabaseBackend.POSTGRES:
            return cls.POSTGRES
        return cls.FILESYSTEM


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on foreign key enforcement for every new SQLite connection.

    Containment edges rely on ON DELETE CASCADE, which SQLite ignores unless
    the pragma is set per connection.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _create_engine_and_session(
    db_path: Optional[Path],
    db_type: DatabaseType,
    config: Optional[GraphFSConfig] = None,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create an engine and session maker without touching the database."""
    db_url = DatabaseType.get_db_url(db_path, db_type, config)

    if db_type == DatabaseType.POSTGRES:
        assert config is not None
        engine = create_async_engine(
            db_url,
            pool_size=config.db_pool_size,
            max_overflow=config.db_pool_overflow,
            pool_recycle=config.db_pool_recycle,
            pool_pre_ping=True,
        )
    elif db_type == DatabaseType.MEMORY:
        # One shared connection, otherwise each connection sees its own empty database
        engine = create_async_engine(
            db_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        _enable_sqlite_foreign_keys(engine)
    else:
        engine = create_async_engine(db_url, connect_args={"check_same_thread": False})
        _enable_sqlite_foreign_keys(engine)

    session_maker = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    return engine, session_maker


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug("Database schema ensured")


@asynccontextmanager
async def scoped_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide a transactional scope around a series of operations.

    Commits when the block exits normally and rolls back when it raises, so
    every statement issued inside one scope is applied as a single unit.
    """
    session = session_maker()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


def _get_init_lock() -> asyncio.Lock:
    global _init_lock
    if _init_lock is None:
        _init_lock = asyncio.Lock()
    return _init_lock


async def get_or_create_db(
    db_path: Optional[Path] = None,
    db_type: Optional[DatabaseType] = None,
    app_config: Optional[GraphFSConfig] = None,
    ensure_schema: bool = True,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Get or create the process-wide engine and session maker.

    The first caller connects and creates the schema; concurrent callers wait
    for it and then reuse the result. If initialization fails the state is
    reset and the error propagates.
    """
    global _engine, _session_maker

    if _engine is not None and _session_maker is not None:
        return _engine, _session_maker

    async with _get_init_lock():
        if _engine is None or _session_maker is None:
            app_config = app_config or ConfigManager().config
            db_type = db_type or DatabaseType.from_config(app_config)
            if db_type != DatabaseType.MEMORY and db_path is None:
                db_path = app_config.database_path

            engine, session_maker = _create_engine_and_session(db_path, db_type, app_config)
            try:
                if ensure_schema:
                    await create_schema(engine)
            except Exception as e:
                logger.error(f"Database initialization failed: {e}")
                await engine.dispose()
                _engine = None
                _session_maker = None
                raise

            _engine, _session_maker = engine, session_maker
            logger.info("Database connection established")

    assert _engine is not None and _session_maker is not None
    return _engine, _session_maker


async def shutdown_db() -> None:  # pragma: no cover
    """Clean up database connections."""
    global _engine, _session_maker, _init_lock

    if _engine:
        await _engine.dispose()
        logger.debug("Database connections closed")
    _engine = None
    _session_maker = None
    _init_lock = None


@asynccontextmanager
async def engine_session_factory(
    db_path: Optional[Path],
    db_type: DatabaseType = DatabaseType.MEMORY,
    app_config: Optional[GraphFSConfig] = None,
) -> AsyncGenerator[tuple[AsyncEngine, async_sessionmaker[AsyncSession]], None]:
    """Create an engine and session factory for a scoped block.

    Wires the engine into the module state for the duration of the block, so
    code paths calling ``get_or_create_db`` share it. Used by tests and the CLI.
    """
    global _engine, _session_maker

    engine, session_maker = _create_engine_and_session(db_path, db_type, app_config)
    _engine, _session_maker = engine, session_maker
    try:
        yield engine, session_maker
    finally:
        await engine.dispose()
        _engine = None
        _session_maker = None
