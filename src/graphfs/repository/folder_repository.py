"""Repository for folder nodes."""

from typing import List, Optional, Sequence, Tuple

from loguru import logger
from sqlalchemy import delete, exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from graphfs import db
from graphfs.exceptions import InternalError, InvalidArgumentError, NodeNotFoundError
from graphfs.identity import NodeId
from graphfs.models import Contains, File, Folder
from graphfs.repository.contains_repository import select_child_nodes
from graphfs.repository.repository import Repository


class FolderRepository(Repository[Folder]):
    """Repository for Folder records and folder-rooted graph reads."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        super().__init__(session_maker, Folder)

    async def find_roots(self) -> Sequence[Folder]:
        """Folders with no incoming containment edge."""
        has_parent = exists().where(Contains.child_folder_id == Folder.id)
        query = select(Folder).where(~has_parent).order_by(Folder.created_at, Folder.name)
        result = await self.execute_query(query)
        return result.scalars().all()

    async def find_children(self, key: str) -> Optional[Tuple[Sequence[Folder], Sequence[File]]]:
        """Direct children of a folder, partitioned by kind.

        Returns None when the folder itself does not exist, so callers can tell
        a missing folder apart from an empty one.
        """
        async with db.scoped_session(self.session_maker) as session:
            if await session.get(Folder, key) is None:
                return None

            folders = await session.execute(
                select(Folder)
                .join(Contains, Contains.child_folder_id == Folder.id)
                .where(Contains.parent_id == key)
                .order_by(Folder.created_at, Folder.name)
            )
            files = await session.execute(
                select(File)
                .join(Contains, Contains.child_file_id == File.id)
                .where(Contains.parent_id == key)
                .order_by(File.created_at, File.title)
            )
            return folders.scalars().all(), files.scalars().all()

    async def create_folder(self, name: str, parent_key: Optional[str] = None) -> Folder:
        """Insert a folder and, when a parent is given, the edge attaching it.

        Both statements run in one transaction.

        Raises:
            NodeNotFoundError: If the parent folder does not exist
        """
        async with db.scoped_session(self.session_maker) as session:
            if parent_key is not None and await session.get(Folder, parent_key) is None:
                raise NodeNotFoundError(f"Parent folder:{parent_key} not found")

            folder = Folder(name=name, is_open=False)
            session.add(folder)
            await session.flush()

            if parent_key is not None:
                session.add(Contains.edge(parent_key, folder.node_id))
                await session.flush()

            await session.refresh(folder)
            return folder

    async def delete_if_empty(self, key: str) -> bool:
        """Delete a folder that has no children.

        Returns False if the folder does not exist.

        Raises:
            InvalidArgumentError: If the folder still has children
        """
        async with db.scoped_session(self.session_maker) as session:
            if await session.get(Folder, key) is None:
                return False
            if await select_child_nodes(session, key):
                raise InvalidArgumentError(
                    f"Folder folder:{key} is not empty; delete it with its contents instead"
                )
            await session.execute(delete(Contains).where(Contains.child_folder_id == key))
            await session.execute(delete(Folder).where(Folder.id == key))
            return True

    async def collect_subtree(
        self, session: AsyncSession, key: str
    ) -> Tuple[List[str], List[str]]:
        """Depth-first walk below a folder.

        Returns folder keys in post-order (children before parents, the start
        folder last) and every file key reached along the way. The walk keeps
        its own stack, so chains of any depth are handled.
        """
        folder_keys: List[str] = []
        file_keys: List[str] = []
        visited: set[str] = set()
        # (folder key, children already pushed)
        stack: List[Tuple[str, bool]] = [(key, False)]

        while stack:
            folder_key, expanded = stack.pop()
            if expanded:
                folder_keys.append(folder_key)
                continue

            if folder_key in visited:
                raise InternalError(f"Containment cycle detected at folder:{folder_key}")
            visited.add(folder_key)
            stack.append((folder_key, True))

            child_folders: List[str] = []
            for child in await select_child_nodes(session, folder_key):
                if child.is_folder:
                    child_folders.append(child.key)
                else:
                    # Files are leaves
                    file_keys.append(child.key)
            stack.extend((child_key, False) for child_key in reversed(child_folders))

        return folder_keys, file_keys

    async def delete_subtree(self, key: str) -> int:
        """Delete a folder and everything reachable below it in one transaction.

        Returns the number of nodes removed, 0 if the folder does not exist.
        """
        async with db.scoped_session(self.session_maker) as session:
            if await session.get(Folder, key) is None:
                return 0

            folder_keys, file_keys = await self.collect_subtree(session, key)

            # Edges go first so no statement depends on the cascade being enabled
            await session.execute(
                delete(Contains).where(
                    or_(
                        Contains.parent_id.in_(folder_keys),
                        Contains.child_folder_id.in_(folder_keys),
                        Contains.child_file_id.in_(file_keys),
                    )
                )
            )
            if file_keys:
                await session.execute(delete(File).where(File.id.in_(file_keys)))
            await session.execute(delete(Folder).where(Folder.id.in_(folder_keys)))

            removed = len(folder_keys) + len(file_keys)
            logger.debug(
                f"Deleted subtree of {NodeId.folder(key)}: "
                f"{len(folder_keys)} folders, {len(file_keys)} files"
            )
            return removed

    async def set_open(self, key: str, is_open: bool) -> Optional[Folder]:
        return await self.update(key, {"is_open": is_open})
