"""Schemas for folder tree rendering."""

from typing import List, Literal

from pydantic import BaseModel


class TreeNode(BaseModel):
    """Node in a rendered folder tree."""

    id: str  # Canonical "<kind>:<key>" identifier
    name: str  # Folder name or file title
    type: Literal["folder", "file"]
    is_open: bool = False  # Always False for files
    children: List["TreeNode"] = []  # Default to empty list

    @property
    def has_children(self) -> bool:
        return bool(self.children)


# Support for recursive model
TreeNode.model_rebuild()
