"""Tree service for rendering nested views of the containment graph."""

from collections import deque
from typing import Deque, List, Optional, Tuple

from loguru import logger

from graphfs.exceptions import InternalError, NodeNotFoundError
from graphfs.identity import ExpectedKind, NodeId, validate_id
from graphfs.repository import FolderRepository
from graphfs.schemas.tree import TreeNode
from graphfs.services.filesystem_service import store_errors


class TreeService:
    """Service for building nested folder trees from one-hop reads."""

    def __init__(self, folder_repository: FolderRepository):
        """Initialize the tree service.

        Args:
            folder_repository: Folder repository for data access.
        """
        self.folder_repository = folder_repository

    async def get_tree(
        self, folder_id: Optional[str] = None, depth: Optional[int] = None
    ) -> List[TreeNode]:
        """Build nested trees.

        Args:
            folder_id: Folder to render. When omitted, every root folder is rendered.
            depth: Levels of children to include (1 = immediate children only).
                None renders the whole subtree.

        Returns:
            One TreeNode per rendered folder

        Raises:
            NodeNotFoundError: If folder_id does not exist
        """
        if folder_id is None:
            with store_errors("Failed to fetch root folders"):
                roots = await self.folder_repository.find_roots()
            start = [(f.canonical_id, f.name, f.is_open) for f in roots]
        else:
            node = validate_id(folder_id, ExpectedKind.FOLDER)
            with store_errors(f"Failed to fetch folder {folder_id}"):
                folder = await self.folder_repository.find_by_id(node.key)
            if folder is None:
                raise NodeNotFoundError(f"Folder {folder_id} not found")
            start = [(folder.canonical_id, folder.name, folder.is_open)]

        logger.debug(f"Building tree for {len(start)} folder(s), depth={depth}")
        trees = []
        for canonical_id, name, is_open in start:
            tree_node = TreeNode(id=canonical_id, name=name, type="folder", is_open=is_open)
            await self._fill_children(tree_node, depth)
            trees.append(tree_node)
        return trees

    async def _fill_children(self, root: TreeNode, max_depth: Optional[int]) -> None:
        """Attach children level by level until max_depth is reached.

        Uses a work queue instead of recursion so chains of any depth render.

        Raises:
            InternalError: If a folder is reached twice (containment cycle)
        """
        visited = {root.id}
        queue: Deque[Tuple[TreeNode, int]] = deque([(root, 0)])

        while queue:
            tree_node, current_depth = queue.popleft()
            if max_depth is not None and current_depth >= max_depth:
                continue

            key = NodeId.parse(tree_node.id).key
            with store_errors(f"Failed to fetch contents for folder {tree_node.id}"):
                children = await self.folder_repository.find_children(key)
            if children is None:
                # Removed concurrently
                continue  # pragma: no cover

            folders, files = children
            for folder in folders:
                if folder.canonical_id in visited:
                    raise InternalError(f"Containment cycle detected at {folder.canonical_id}")
                visited.add(folder.canonical_id)
                child = TreeNode(
                    id=folder.canonical_id, name=folder.name, type="folder", is_open=folder.is_open
                )
                tree_node.children.append(child)
                queue.append((child, current_depth + 1))

            for file in files:
                tree_node.children.append(
                    TreeNode(id=file.canonical_id, name=file.title, type="file")
                )
