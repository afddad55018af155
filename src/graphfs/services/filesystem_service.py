"""Service for hierarchy operations on the file system graph.

Each public method validates every identifier it receives before touching the
store, then issues exactly one repository call. Repository calls that write
more than one statement run inside a single transaction, so a failure never
leaves a partial mutation behind.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from graphfs.exceptions import (
    FileSystemError,
    InternalError,
    NodeNotFoundError,
    StoreError,
)
from graphfs.identity import ExpectedKind, NodeKind, validate_id, validate_name
from graphfs.repository import ContainsRepository, FileRepository, FolderRepository
from graphfs.schemas import FileResponse, FolderContents, FolderResponse


@contextmanager
def store_errors(message: str) -> Iterator[None]:
    """Translate store failures into StoreError, letting typed errors through."""
    try:
        yield
    except FileSystemError:
        raise
    except SQLAlchemyError as e:
        logger.error(f"{message}: {e}")
        raise StoreError(message, e) from e


class FileSystemService:
    """Read, create, update and delete operations on folders and files."""

    def __init__(
        self,
        folder_repository: FolderRepository,
        file_repository: FileRepository,
        contains_repository: ContainsRepository,
    ):
        self.folder_repository = folder_repository
        self.file_repository = file_repository
        self.contains_repository = contains_repository

    # Read operations

    async def list_root_folders(self) -> List[FolderResponse]:
        """All folders with no parent. Order is not significant."""
        logger.debug("Listing root folders")
        with store_errors("Failed to fetch root folders"):
            folders = await self.folder_repository.find_roots()
        return [FolderResponse.model_validate(folder) for folder in folders]

    async def get_folder_contents(self, folder_id: str) -> FolderContents:
        """Direct child folders and files of a folder.

        Raises:
            InvalidArgumentError: If folder_id is not a folder id
            NodeNotFoundError: If the folder does not exist
        """
        node = validate_id(folder_id, ExpectedKind.FOLDER)
        logger.debug(f"Fetching contents of {node}")

        with store_errors(f"Failed to fetch contents for folder {folder_id}"):
            children = await self.folder_repository.find_children(node.key)

        if children is None:
            raise NodeNotFoundError(f"Folder {folder_id} not found")

        folders, files = children
        return FolderContents(
            folders=[FolderResponse.model_validate(f) for f in folders],
            files=[FileResponse.model_validate(f) for f in files],
        )

    async def get_file(self, file_id: str) -> Optional[FileResponse]:
        """Fetch a file, or None if it does not exist."""
        node = validate_id(file_id, ExpectedKind.FILE)
        logger.debug(f"Fetching {node}")

        with store_errors(f"Failed to fetch file with ID {file_id}"):
            file = await self.file_repository.find_by_id(node.key)
        return FileResponse.model_validate(file) if file else None

    async def get_folder(self, folder_id: str) -> Optional[FolderResponse]:
        """Fetch a folder, or None if it does not exist."""
        node = validate_id(folder_id, ExpectedKind.FOLDER)
        logger.debug(f"Fetching {node}")

        with store_errors(f"Failed to fetch folder with ID {folder_id}"):
            folder = await self.folder_repository.find_by_id(node.key)
        return FolderResponse.model_validate(folder) if folder else None

    # Create operations

    async def create_folder(self, name: str, parent_id: Optional[str] = None) -> FolderResponse:
        """Create a folder, attached under parent_id or as a new root.

        An empty parent_id is treated like None and creates a root.

        Raises:
            InvalidArgumentError: If parent_id is not a folder id or the name is invalid
            NodeNotFoundError: If the parent folder does not exist
        """
        parent = validate_id(parent_id, ExpectedKind.FOLDER) if parent_id else None
        validate_name(name, "name")

        with store_errors(f"Failed to create folder '{name}'"):
            folder = await self.folder_repository.create_folder(
                name, parent.key if parent else None
            )

        if not folder:
            raise InternalError("Database returned empty result after folder creation")

        logger.info(f"Created folder {folder.canonical_id} '{name}' under {parent or 'root'}")
        return FolderResponse.model_validate(folder)

    async def create_file(self, title: str, parent_id: str, content: str = "") -> FileResponse:
        """Create a file inside a folder. Files always have a parent.

        Raises:
            InvalidArgumentError: If parent_id is not a folder id or the title is invalid
            NodeNotFoundError: If the parent folder does not exist
        """
        parent = validate_id(parent_id, ExpectedKind.FOLDER)
        validate_name(title, "title")

        with store_errors(f"Failed to create file '{title}'"):
            file = await self.file_repository.create_file(title, parent.key, content)

        if not file:
            raise InternalError("Database returned empty result after file creation")

        logger.info(f"Created file {file.canonical_id} '{title}' under {parent}")
        return FileResponse.model_validate(file)

    # Update operations

    async def update_file_content(self, file_id: str, content: str) -> FileResponse:
        """Replace a file's content and refresh its updated_at timestamp."""
        node = validate_id(file_id, ExpectedKind.FILE)
        logger.debug(f"Updating content of {node} ({len(content)} chars)")

        with store_errors(f"Failed to update content for file {file_id}"):
            file = await self.file_repository.update_content(node.key, content)

        if file is None:
            raise NodeNotFoundError(f"File {file_id} not found")
        return FileResponse.model_validate(file)

    async def rename_item(self, id: str, new_name: str) -> None:
        """Rename a folder (its name) or a file (its title)."""
        node = validate_id(id, ExpectedKind.ANY)
        field = "title" if node.kind is NodeKind.FILE else "name"
        validate_name(new_name, field)

        repository = self.file_repository if node.is_file else self.folder_repository
        with store_errors(f"Failed to rename item {id}"):
            updated = await repository.update(node.key, {field: new_name})

        if updated is None:
            raise NodeNotFoundError(f"Item {id} not found to rename")
        logger.info(f"Renamed {node} to '{new_name}'")

    async def move_item(self, item_id: str, new_parent_id: str) -> None:
        """Detach an item from its parent and attach it under new_parent_id.

        Raises:
            InvalidArgumentError: If the destination is not a folder id, or the
                move would place a folder inside itself or its descendants
            NodeNotFoundError: If the item or the destination does not exist
        """
        node = validate_id(item_id, ExpectedKind.ANY)
        parent = validate_id(new_parent_id, ExpectedKind.FOLDER)

        with store_errors(f"Failed to move item {item_id} to {new_parent_id}"):
            await self.contains_repository.move(node, parent.key)
        logger.info(f"Moved {node} to {parent}")

    async def set_folder_open(self, folder_id: str, is_open: bool) -> FolderResponse:
        """Record whether a folder is expanded in the UI."""
        node = validate_id(folder_id, ExpectedKind.FOLDER)

        with store_errors(f"Failed to update folder {folder_id}"):
            folder = await self.folder_repository.set_open(node.key, is_open)

        if folder is None:
            raise NodeNotFoundError(f"Folder {folder_id} not found")
        return FolderResponse.model_validate(folder)

    # Delete operations

    async def delete_file(self, file_id: str) -> None:
        """Delete a file and the edge pointing at it. Deleting a missing file is a no-op.

        Only file ids are accepted, so a folder subtree can never be removed
        through this call.
        """
        node = validate_id(file_id, ExpectedKind.FILE)

        with store_errors(f"Failed to delete file {file_id}"):
            deleted = await self.file_repository.delete_by_id(node.key)

        if deleted:
            logger.info(f"Deleted {node}")
        else:
            logger.debug(f"Delete of {node} matched nothing")

    async def delete_folder(self, folder_id: str) -> bool:
        """Delete an empty folder.

        Returns:
            True if the folder was removed, False if it did not exist

        Raises:
            InvalidArgumentError: If the folder still has children
        """
        node = validate_id(folder_id, ExpectedKind.FOLDER)

        with store_errors(f"Failed to delete folder {folder_id}"):
            deleted = await self.folder_repository.delete_if_empty(node.key)

        if deleted:
            logger.info(f"Deleted empty {node}")
        return deleted

    async def delete_folder_and_contents(self, folder_id: str) -> int:
        """Delete a folder and its whole subtree as one atomic operation.

        Returns:
            Number of folders and files removed, 0 if the folder did not exist
        """
        node = validate_id(folder_id, ExpectedKind.FOLDER)

        with store_errors(f"Failed to delete folder {folder_id}"):
            removed = await self.folder_repository.delete_subtree(node.key)

        logger.info(f"Deleted {node} and its contents ({removed} nodes)")
        return removed
