"""Request and response schemas for file system operations.

Every identifier crossing this boundary is a canonical ``"<kind>:<key>"``
string. Response models read straight from ORM rows; the row's
``canonical_id`` property supplies the ``id`` field.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SQLAlchemyModel(BaseModel):
    """Base class for models that read from SQLAlchemy attributes."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class FolderResponse(SQLAlchemyModel):
    """A folder as returned to callers.

    Example Response:
    {
        "id": "folder:3f0c9d4e5b6a47c8a1d2e3f405162738",
        "name": "Documents",
        "is_open": false,
        "created_at": "2025-01-01T12:00:00+00:00"
    }
    """

    id: str = Field(validation_alias=AliasChoices("canonical_id", "id"))
    name: str
    is_open: bool = False
    created_at: datetime


class FileResponse(SQLAlchemyModel):
    """A file with its content."""

    id: str = Field(validation_alias=AliasChoices("canonical_id", "id"))
    title: str
    content: str = ""
    created_at: datetime
    updated_at: datetime


class FolderContents(BaseModel):
    """Direct children of a folder, partitioned by kind."""

    folders: List[FolderResponse] = Field(default_factory=list)
    files: List[FileResponse] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.folders and not self.files


## Requests


class CreateFolderRequest(BaseModel):
    name: str
    parent_id: Optional[str] = None


class CreateFileRequest(BaseModel):
    title: str
    parent_id: str
    content: str = ""


class UpdateFileContentRequest(BaseModel):
    content: str


class SetFolderOpenRequest(BaseModel):
    is_open: bool


class RenameItemRequest(BaseModel):
    id: str
    new_name: str


class MoveItemRequest(BaseModel):
    item_id: str
    new_parent_id: str


class SuccessResponse(BaseModel):
    """Acknowledgement for operations that return nothing."""

    success: bool = True


class DeleteFolderResponse(SuccessResponse):
    deleted: int = Field(0, description="Number of nodes removed")
