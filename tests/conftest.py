"""Common test fixtures."""

import os
from pathlib import Path
from typing import AsyncGenerator, Dict, List

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from graphfs import db
from graphfs.config import ConfigManager, GraphFSConfig, reset_config_cache
from graphfs.db import DatabaseType
from graphfs.models import Base, Contains, Folder
from graphfs.repository import ContainsRepository, FileRepository, FolderRepository
from graphfs.services import FileSystemService, TreeService
from graphfs.services.initialization import seed_demo_hierarchy


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config_home(tmp_path, monkeypatch) -> Path:
    # Patch HOME environment variable for the duration of the test
    monkeypatch.setenv("HOME", str(tmp_path))
    if os.name == "nt":
        monkeypatch.setenv("USERPROFILE", str(tmp_path))
    monkeypatch.setenv("GRAPHFS_HOME", str(tmp_path / "graphfs"))
    for name in list(os.environ):
        if name.startswith("GRAPHFS_") and name != "GRAPHFS_HOME":
            monkeypatch.delenv(name)

    reset_config_cache()
    yield tmp_path
    reset_config_cache()


@pytest.fixture(scope="function")
def app_config(config_home) -> GraphFSConfig:
    """Create test app configuration."""
    return GraphFSConfig(env="test")


@pytest.fixture
def config_manager(app_config: GraphFSConfig, config_home: Path) -> ConfigManager:
    config_manager = ConfigManager()
    config_manager.save_config(app_config)
    return config_manager


@pytest_asyncio.fixture(scope="function")
async def engine_factory(
    app_config,
) -> AsyncGenerator[tuple[AsyncEngine, async_sessionmaker[AsyncSession]], None]:
    """In-memory SQLite engine, wired into the db module for the test."""
    async with db.engine_session_factory(
        db_path=None, db_type=DatabaseType.MEMORY, app_config=app_config
    ) as (engine, session_maker):
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        yield engine, session_maker


@pytest_asyncio.fixture
async def session_maker(engine_factory) -> async_sessionmaker[AsyncSession]:
    """Get session maker for tests."""
    _, session_maker = engine_factory
    return session_maker


## Repositories


@pytest_asyncio.fixture(scope="function")
async def folder_repository(session_maker: async_sessionmaker[AsyncSession]) -> FolderRepository:
    return FolderRepository(session_maker)


@pytest_asyncio.fixture(scope="function")
async def file_repository(session_maker: async_sessionmaker[AsyncSession]) -> FileRepository:
    return FileRepository(session_maker)


@pytest_asyncio.fixture(scope="function")
async def contains_repository(
    session_maker: async_sessionmaker[AsyncSession],
) -> ContainsRepository:
    return ContainsRepository(session_maker)


## Services


@pytest_asyncio.fixture
async def filesystem_service(
    folder_repository: FolderRepository,
    file_repository: FileRepository,
    contains_repository: ContainsRepository,
) -> FileSystemService:
    return FileSystemService(folder_repository, file_repository, contains_repository)


@pytest_asyncio.fixture
async def tree_service(folder_repository: FolderRepository) -> TreeService:
    return TreeService(folder_repository)


@pytest_asyncio.fixture
async def seeded(filesystem_service: FileSystemService) -> Dict[str, str]:
    """The demo hierarchy, as a mapping of names and titles to canonical ids.

    Root
    ├── README.txt
    ├── Documents
    │   ├── Work Projects
    │   │   ├── 2024_Budget.xlsx
    │   │   └── meeting_notes.md
    │   └── Personal
    ├── Media
    │   └── Photos
    │       └── logo.png
    └── Trash
        └── old_config.json
    """
    return await seed_demo_hierarchy(filesystem_service)


@pytest.fixture
def build_folder_chain(session_maker: async_sessionmaker[AsyncSession]):
    """Insert a straight chain of nested folders. Returns their keys, outermost first."""

    async def build(length: int) -> List[str]:
        async with db.scoped_session(session_maker) as session:
            folders = [Folder(name=f"d{i}") for i in range(length)]
            session.add_all(folders)
            await session.flush()
            session.add_all(
                [
                    Contains.edge(parent.id, child.node_id)
                    for parent, child in zip(folders, folders[1:])
                ]
            )
            await session.flush()
            return [folder.id for folder in folders]

    return build


## API


@pytest.fixture(scope="function")
def app(app_config, engine_factory) -> FastAPI:
    """Create test FastAPI application."""
    from graphfs.api.app import app as fastapi_app
    from graphfs.deps import get_app_config, get_engine_factory

    fastapi_app.dependency_overrides[get_app_config] = lambda: app_config
    fastapi_app.dependency_overrides[get_engine_factory] = lambda: engine_factory
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
