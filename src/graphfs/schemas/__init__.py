"""Schema exports.

Import request and response models from graphfs.schemas rather than from
the individual modules.
"""

from graphfs.schemas.filesystem import (
    CreateFileRequest,
    CreateFolderRequest,
    DeleteFolderResponse,
    FileResponse,
    FolderContents,
    FolderResponse,
    MoveItemRequest,
    RenameItemRequest,
    SetFolderOpenRequest,
    SQLAlchemyModel,
    SuccessResponse,
    UpdateFileContentRequest,
)
from graphfs.schemas.tree import TreeNode

__all__ = [
    "CreateFileRequest",
    "CreateFolderRequest",
    "DeleteFolderResponse",
    "FileResponse",
    "FolderContents",
    "FolderResponse",
    "MoveItemRequest",
    "RenameItemRequest",
    "SetFolderOpenRequest",
    "SQLAlchemyModel",
    "SuccessResponse",
    "TreeNode",
    "UpdateFileContentRequest",
]
