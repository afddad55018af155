from graphfs.repository.contains_repository import ContainsRepository
from graphfs.repository.file_repository import FileRepository
from graphfs.repository.folder_repository import FolderRepository

__all__ = [
    "ContainsRepository",
    "FileRepository",
    "FolderRepository",
]
