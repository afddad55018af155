"""Models package for graphfs."""

from graphfs.models.base import Base
from graphfs.models.filesystem import Contains, File, Folder

__all__ = [
    "Base",
    "Contains",
    "File",
    "Folder",
]
