"""Repository for containment edges and graph traversal."""

from typing import List, Optional, Sequence

from loguru import logger
from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from graphfs import db
from graphfs.exceptions import InternalError, InvalidArgumentError, NodeNotFoundError
from graphfs.identity import NodeId, NodeKind
from graphfs.models import Contains, File, Folder
from graphfs.repository.repository import Repository


def child_column(kind: NodeKind) -> ColumnElement:
    """Edge column holding a child of the given kind."""
    if kind is NodeKind.FOLDER:
        return Contains.child_folder_id  # pyright: ignore [reportReturnType]
    return Contains.child_file_id  # pyright: ignore [reportReturnType]


def model_for(kind: NodeKind) -> type[Folder] | type[File]:
    return Folder if kind is NodeKind.FOLDER else File


async def select_parent_key(session: AsyncSession, node: NodeId) -> Optional[str]:
    """Key of the folder holding ``node``, or None for a root."""
    query = select(Contains.parent_id).where(child_column(node.kind) == node.key)
    result = await session.execute(query)
    return result.scalars().first()


async def select_child_nodes(session: AsyncSession, folder_key: str) -> List[NodeId]:
    """One hop along outgoing edges of a folder."""
    query = (
        select(Contains.child_folder_id, Contains.child_file_id)
        .where(Contains.parent_id == folder_key)
        .order_by(Contains.id)
    )
    result = await session.execute(query)
    children = []
    for child_folder_id, child_file_id in result.all():
        if child_folder_id is not None:
            children.append(NodeId.folder(child_folder_id))
        else:
            children.append(NodeId.file(child_file_id))
    return children


async def node_exists(session: AsyncSession, node: NodeId) -> bool:
    return await session.get(model_for(node.kind), node.key) is not None


async def is_ancestor(session: AsyncSession, ancestor_key: str, folder_key: str) -> bool:
    """True if ``ancestor_key`` is ``folder_key`` or lies on its path to a root."""
    seen: set[str] = set()
    current: Optional[str] = folder_key
    while current is not None:
        if current == ancestor_key:
            return True
        if current in seen:
            raise InternalError(f"Containment cycle detected at folder:{current}")
        seen.add(current)
        current = await select_parent_key(session, NodeId.folder(current))
    return False


class ContainsRepository(Repository[Contains]):
    """Repository for parent -> child containment edges."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        super().__init__(session_maker, Contains)

    async def find_parent_id(self, node: NodeId) -> Optional[NodeId]:
        """Canonical parent of a node, None if it is a root or does not exist."""
        async with db.scoped_session(self.session_maker) as session:
            parent_key = await select_parent_key(session, node)
        return NodeId.folder(parent_key) if parent_key is not None else None

    async def find_children(self, folder_key: str) -> List[NodeId]:
        async with db.scoped_session(self.session_maker) as session:
            return await select_child_nodes(session, folder_key)

    async def find_by_parent(self, folder_key: str) -> Sequence[Contains]:
        query = select(Contains).where(Contains.parent_id == folder_key).order_by(Contains.id)
        result = await self.execute_query(query)
        return result.scalars().all()

    async def count_incoming(self, node: NodeId) -> int:
        """Number of edges pointing at ``node``. Zero means the node is a root."""
        query = select(func.count(Contains.id)).where(child_column(node.kind) == node.key)
        return await self.count(query)

    async def move(self, node: NodeId, new_parent_key: str) -> Contains:
        """Re-parent a node in one transaction.

        Removes every edge pointing at the node and creates the edge from the
        new parent. A folder cannot be moved into itself or one of its own
        descendants.

        Raises:
            NodeNotFoundError: If the node or the destination folder does not exist
            InvalidArgumentError: If the move would create a containment cycle
        """
        async with db.scoped_session(self.session_maker) as session:
            if not await node_exists(session, node):
                raise NodeNotFoundError(f"Item {node} not found")
            if await session.get(Folder, new_parent_key) is None:
                raise NodeNotFoundError(f"Destination folder:{new_parent_key} not found")

            if node.is_folder and await is_ancestor(session, node.key, new_parent_key):
                raise InvalidArgumentError(
                    f"Cannot move {node} into folder:{new_parent_key}: "
                    "a folder cannot be placed inside itself or its descendants"
                )

            await session.execute(delete(Contains).where(child_column(node.kind) == node.key))
            edge = Contains.edge(new_parent_key, node)
            session.add(edge)
            await session.flush()
            logger.debug(f"Moved {node} under folder:{new_parent_key}")
            return edge
