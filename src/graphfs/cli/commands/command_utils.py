"""Utility functions for graphfs CLI commands."""

import asyncio
from typing import Coroutine, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from graphfs import db
from graphfs.config import ConfigManager
from graphfs.exceptions import StoreError
from graphfs.repository import ContainsRepository, FileRepository, FolderRepository
from graphfs.services import FileSystemService, TreeService

T = TypeVar("T")


def run_with_cleanup(coro: Coroutine[None, None, T]) -> T:
    """Run an async CLI operation and close database connections afterwards.

    Each command runs in its own event loop, so the engine must not outlive it.
    """

    async def _with_cleanup() -> T:
        try:
            return await coro
        finally:
            await db.shutdown_db()

    return asyncio.run(_with_cleanup())


async def get_services() -> tuple[FileSystemService, TreeService]:
    """Connect using the current configuration and build the services."""
    try:
        _, session_maker = await db.get_or_create_db(app_config=ConfigManager().config)
    except SQLAlchemyError as e:
        raise StoreError("Failed to connect to the database", e) from e
    folder_repository = FolderRepository(session_maker)
    service = FileSystemService(
        folder_repository,
        FileRepository(session_maker),
        ContainsRepository(session_maker),
    )
    return service, TreeService(folder_repository)
