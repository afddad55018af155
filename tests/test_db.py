"""Tests for engine lifecycle and session scoping."""

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy import func, select, text
from sqlalchemy.exc import OperationalError

from graphfs import db
from graphfs.db import DatabaseType
from graphfs.models import Contains, Folder


@pytest_asyncio.fixture
async def clean_db_state(config_home):
    await db.shutdown_db()
    yield
    await db.shutdown_db()


@pytest.mark.asyncio
async def test_get_or_create_db_is_lazy_and_shared(clean_db_state, app_config):
    assert db._engine is None

    results = await asyncio.gather(
        *[db.get_or_create_db(db_type=DatabaseType.MEMORY, app_config=app_config) for _ in range(5)]
    )

    engines = {id(engine) for engine, _ in results}
    assert len(engines) == 1
    assert db._engine is results[0][0]


@pytest.mark.asyncio
async def test_get_or_create_db_creates_schema(clean_db_state, app_config):
    _, session_maker = await db.get_or_create_db(db_type=DatabaseType.MEMORY, app_config=app_config)

    async with db.scoped_session(session_maker) as session:
        result = await session.execute(select(func.count()).select_from(Folder))
        assert result.scalar_one() == 0


@pytest.mark.asyncio
async def test_failed_init_resets_state(clean_db_state, app_config, monkeypatch):
    async def broken_schema(engine):
        raise OperationalError("CREATE TABLE", {}, Exception("disk I/O error"))

    create_schema = db.create_schema
    monkeypatch.setattr(db, "create_schema", broken_schema)

    with pytest.raises(OperationalError):
        await db.get_or_create_db(db_type=DatabaseType.MEMORY, app_config=app_config)

    assert db._engine is None
    assert db._session_maker is None

    # A later caller retries from scratch
    monkeypatch.setattr(db, "create_schema", create_schema)
    engine, _ = await db.get_or_create_db(db_type=DatabaseType.MEMORY, app_config=app_config)
    assert engine is db._engine


@pytest.mark.asyncio
async def test_filesystem_database_uses_configured_path(clean_db_state, config_home, monkeypatch):
    db_file = config_home / "data" / "test.db"
    monkeypatch.setenv("GRAPHFS_DATABASE_FILE", str(db_file))
    from graphfs.config import GraphFSConfig

    await db.get_or_create_db(app_config=GraphFSConfig(env="test"))

    assert db_file.exists()


def test_postgres_requires_url(app_config):
    with pytest.raises(ValueError, match="database_url"):
        DatabaseType.get_db_url(None, DatabaseType.POSTGRES, app_config)


@pytest.mark.asyncio
async def test_scoped_session_rolls_back_on_error(session_maker):
    with pytest.raises(RuntimeError):
        async with db.scoped_session(session_maker) as session:
            session.add(Folder(name="doomed"))
            await session.flush()
            raise RuntimeError("boom")

    async with db.scoped_session(session_maker) as session:
        result = await session.execute(select(func.count()).select_from(Folder))
        assert result.scalar_one() == 0


@pytest.mark.asyncio
async def test_sqlite_foreign_keys_enabled(session_maker):
    async with db.scoped_session(session_maker) as session:
        result = await session.execute(text("PRAGMA foreign_keys"))
        assert result.scalar_one() == 1

        parent = Folder(name="parent")
        child = Folder(name="child")
        session.add_all([parent, child])
        await session.flush()
        session.add(Contains.edge(parent.id, child.node_id))

    # Deleting the parent row removes the edge through ON DELETE CASCADE
    async with db.scoped_session(session_maker) as session:
        await session.execute(text("DELETE FROM folder WHERE name = 'parent'"))

    async with db.scoped_session(session_maker) as session:
        result = await session.execute(select(func.count()).select_from(Contains))
        assert result.scalar_one() == 0
