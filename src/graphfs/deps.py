"""Dependency injection for the graphfs API.

- App config
- Engine/session factory (lazily created on first request)
- Repositories
- FileSystemService, TreeService
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from graphfs import db
from graphfs.config import ConfigManager, GraphFSConfig
from graphfs.exceptions import StoreError
from graphfs.repository import ContainsRepository, FileRepository, FolderRepository
from graphfs.services import FileSystemService, TreeService

# --- Config ---


def get_app_config() -> GraphFSConfig:  # pragma: no cover
    return ConfigManager().config


AppConfigDep = Annotated[GraphFSConfig, Depends(get_app_config)]


# --- Database ---


async def get_engine_factory(
    app_config: AppConfigDep,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:  # pragma: no cover
    """Get engine and session maker, connecting on first use."""
    try:
        return await db.get_or_create_db(app_config=app_config)
    except SQLAlchemyError as e:
        raise StoreError("Failed to connect to the database", e) from e


EngineFactoryDep = Annotated[
    tuple[AsyncEngine, async_sessionmaker[AsyncSession]], Depends(get_engine_factory)
]


async def get_session_maker(engine_factory: EngineFactoryDep) -> async_sessionmaker[AsyncSession]:
    _, session_maker = engine_factory
    return session_maker


SessionMakerDep = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_maker)]


# --- Repositories ---


async def get_folder_repository(session_maker: SessionMakerDep) -> FolderRepository:
    return FolderRepository(session_maker)


FolderRepositoryDep = Annotated[FolderRepository, Depends(get_folder_repository)]


async def get_file_repository(session_maker: SessionMakerDep) -> FileRepository:
    return FileRepository(session_maker)


FileRepositoryDep = Annotated[FileRepository, Depends(get_file_repository)]


async def get_contains_repository(session_maker: SessionMakerDep) -> ContainsRepository:
    return ContainsRepository(session_maker)


ContainsRepositoryDep = Annotated[ContainsRepository, Depends(get_contains_repository)]


# --- Services ---


async def get_filesystem_service(
    folder_repository: FolderRepositoryDep,
    file_repository: FileRepositoryDep,
    contains_repository: ContainsRepositoryDep,
) -> FileSystemService:
    return FileSystemService(folder_repository, file_repository, contains_repository)


FileSystemServiceDep = Annotated[FileSystemService, Depends(get_filesystem_service)]


async def get_tree_service(folder_repository: FolderRepositoryDep) -> TreeService:
    return TreeService(folder_repository)


TreeServiceDep = Annotated[TreeService, Depends(get_tree_service)]
