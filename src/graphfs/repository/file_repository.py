"""Repository for file nodes."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from graphfs import db
from graphfs.exceptions import NodeNotFoundError
from graphfs.models import Contains, File, Folder
from graphfs.models.filesystem import now
from graphfs.repository.repository import Repository


class FileRepository(Repository[File]):
    """Repository for File records."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        super().__init__(session_maker, File)

    async def create_file(self, title: str, parent_key: str, content: str = "") -> File:
        """Insert a file and the edge attaching it to its parent in one transaction.

        Raises:
            NodeNotFoundError: If the parent folder does not exist
        """
        async with db.scoped_session(self.session_maker) as session:
            if await session.get(Folder, parent_key) is None:
                raise NodeNotFoundError(f"Parent folder:{parent_key} not found")

            created_at = now()
            file = File(title=title, content=content, created_at=created_at, updated_at=created_at)
            session.add(file)
            await session.flush()

            session.add(Contains.edge(parent_key, file.node_id))
            await session.flush()
            await session.refresh(file)
            return file

    async def update_content(self, key: str, content: str) -> Optional[File]:
        """Replace a file's content and stamp ``updated_at``, even when the text is unchanged."""
        return await self.update(key, {"content": content, "updated_at": now()})
