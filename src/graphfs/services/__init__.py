"""Services package."""

from graphfs.services.filesystem_service import FileSystemService
from graphfs.services.tree_service import TreeService

__all__ = ["FileSystemService", "TreeService"]
