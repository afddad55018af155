"""File system graph models.

The hierarchy is not stored as a tree. Folders and files are independent
records, and containment is a separate table of directed edges from a parent
folder to exactly one child node.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column

from graphfs.identity import MAX_NAME_LENGTH, NodeId, NodeKind
from graphfs.models.base import Base
from graphfs.utils import ensure_timezone_aware

KEY_LENGTH = 32


def generate_key() -> str:
    """Opaque record key, unique across the whole store."""
    return uuid.uuid4().hex


def now() -> datetime:
    return datetime.now().astimezone()


class _TimezoneAwareMixin:
    """Ensure datetime columns read back from SQLite are timezone-aware."""

    def __getattribute__(self, name):
        value = super().__getattribute__(name)
        if name in ("created_at", "updated_at") and isinstance(value, datetime):
            return ensure_timezone_aware(value)
        return value


class Folder(_TimezoneAwareMixin, Base):
    """A container node. May hold folders and files through containment edges."""

    __tablename__ = "folder"
    __table_args__ = (
        CheckConstraint(
            f"length(name) > 0 AND length(name) <= {MAX_NAME_LENGTH}",
            name="ck_folder_name_length",
        ),
        Index("ix_folder_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(KEY_LENGTH), primary_key=True, default=generate_key)
    name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH))
    # UI expanded/collapsed state
    is_open: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now)

    @property
    def node_id(self) -> NodeId:
        return NodeId.folder(self.id)

    @property
    def canonical_id(self) -> str:
        return str(self.node_id)

    def __repr__(self) -> str:
        return f"Folder(id='{self.id}', name='{self.name}', is_open={self.is_open})"


class File(_TimezoneAwareMixin, Base):
    """A leaf node holding text content. Never the source of a containment edge."""

    __tablename__ = "file"
    __table_args__ = (
        CheckConstraint(
            f"length(title) > 0 AND length(title) <= {MAX_NAME_LENGTH}",
            name="ck_file_title_length",
        ),
        Index("ix_file_created_at", "created_at"),
        Index("ix_file_updated_at", "updated_at"),
    )

    id: Mapped[str] = mapped_column(String(KEY_LENGTH), primary_key=True, default=generate_key)
    title: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH))
    content: Mapped[str] = mapped_column(Text, default="", server_default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now)
    # Refreshed on every update of the row
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now, onupdate=now
    )

    @property
    def node_id(self) -> NodeId:
        return NodeId.file(self.id)

    @property
    def canonical_id(self) -> str:
        return str(self.node_id)

    def __repr__(self) -> str:
        return f"File(id='{self.id}', title='{self.title}', size={len(self.content or '')})"


class Contains(Base):
    """A directed containment edge: parent folder -> child folder or file.

    Exactly one of ``child_folder_id`` / ``child_file_id`` is set. The unique
    constraints on both child columns mean a node has at most one parent.
    Edges are removed by the database when either endpoint is deleted.
    """

    __tablename__ = "contains"
    __table_args__ = (
        CheckConstraint(
            "(child_folder_id IS NULL AND child_file_id IS NOT NULL) OR "
            "(child_folder_id IS NOT NULL AND child_file_id IS NULL)",
            name="ck_contains_single_child",
        ),
        CheckConstraint(
            "child_folder_id IS NULL OR child_folder_id <> parent_id",
            name="ck_contains_no_self_loop",
        ),
        UniqueConstraint("child_folder_id", name="uix_contains_child_folder"),
        UniqueConstraint("child_file_id", name="uix_contains_child_file"),
        Index("ix_contains_parent_id", "parent_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    parent_id: Mapped[str] = mapped_column(
        String(KEY_LENGTH), ForeignKey("folder.id", ondelete="CASCADE"), nullable=False
    )
    child_folder_id: Mapped[Optional[str]] = mapped_column(
        String(KEY_LENGTH), ForeignKey("folder.id", ondelete="CASCADE"), nullable=True
    )
    child_file_id: Mapped[Optional[str]] = mapped_column(
        String(KEY_LENGTH), ForeignKey("file.id", ondelete="CASCADE"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now)

    @classmethod
    def edge(cls, parent_key: str, child: NodeId) -> "Contains":
        """Build an edge from a parent folder key to a child node."""
        if child.kind is NodeKind.FOLDER:
            return cls(parent_id=parent_key, child_folder_id=child.key)
        return cls(parent_id=parent_key, child_file_id=child.key)

    @property
    def child(self) -> NodeId:
        if self.child_folder_id is not None:
            return NodeId.folder(self.child_folder_id)
        return NodeId.file(self.child_file_id)  # pyright: ignore [reportArgumentType]

    def __repr__(self) -> str:
        return f"Contains(id={self.id}, parent_id='{self.parent_id}', child='{self.child}')"
