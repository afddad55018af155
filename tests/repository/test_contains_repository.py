"""Tests for the ContainsRepository and graph traversal helpers."""

import pytest
from sqlalchemy.exc import IntegrityError

from graphfs import db
from graphfs.exceptions import InvalidArgumentError, NodeNotFoundError
from graphfs.identity import NodeId
from graphfs.models import Contains
from graphfs.repository.contains_repository import is_ancestor


@pytest.mark.asyncio
async def test_find_children_and_parent(folder_repository, file_repository, contains_repository):
    root = await folder_repository.create_folder("Root")
    sub = await folder_repository.create_folder("Sub", root.id)
    file = await file_repository.create_file("f.txt", root.id)

    assert await contains_repository.find_children(root.id) == [sub.node_id, file.node_id]
    assert await contains_repository.find_parent_id(root.node_id) is None
    assert await contains_repository.find_parent_id(file.node_id) == root.node_id

    edges = await contains_repository.find_by_parent(root.id)
    assert [edge.child for edge in edges] == [sub.node_id, file.node_id]


@pytest.mark.asyncio
async def test_count_incoming(folder_repository, file_repository, contains_repository):
    root = await folder_repository.create_folder("Root")
    file = await file_repository.create_file("f.txt", root.id)

    assert await contains_repository.count_incoming(root.node_id) == 0
    assert await contains_repository.count_incoming(file.node_id) == 1


@pytest.mark.asyncio
async def test_move_file(folder_repository, file_repository, contains_repository):
    a = await folder_repository.create_folder("A")
    b = await folder_repository.create_folder("B")
    file = await file_repository.create_file("f.txt", a.id)

    edge = await contains_repository.move(file.node_id, b.id)

    assert edge.parent_id == b.id
    assert await contains_repository.find_parent_id(file.node_id) == b.node_id
    assert await contains_repository.count_incoming(file.node_id) == 1
    assert await contains_repository.find_children(a.id) == []


@pytest.mark.asyncio
async def test_move_root_folder_gives_it_a_parent(folder_repository, contains_repository):
    a = await folder_repository.create_folder("A")
    b = await folder_repository.create_folder("B")

    await contains_repository.move(b.node_id, a.id)

    assert [f.id for f in await folder_repository.find_roots()] == [a.id]


@pytest.mark.asyncio
async def test_move_missing_nodes(folder_repository, contains_repository):
    a = await folder_repository.create_folder("A")

    with pytest.raises(NodeNotFoundError, match="Item"):
        await contains_repository.move(NodeId.file("missing"), a.id)

    with pytest.raises(NodeNotFoundError, match="Destination"):
        await contains_repository.move(a.node_id, "missing")


@pytest.mark.asyncio
async def test_move_rejects_cycles(folder_repository, contains_repository):
    a = await folder_repository.create_folder("A")
    b = await folder_repository.create_folder("B", a.id)
    c = await folder_repository.create_folder("C", b.id)

    with pytest.raises(InvalidArgumentError, match="inside itself"):
        await contains_repository.move(a.node_id, a.id)

    with pytest.raises(InvalidArgumentError, match="inside itself"):
        await contains_repository.move(a.node_id, c.id)

    # The failed move left the graph untouched
    assert await contains_repository.find_parent_id(b.node_id) == a.node_id
    assert await contains_repository.find_parent_id(a.node_id) is None


@pytest.mark.asyncio
async def test_is_ancestor(folder_repository, session_maker):
    a = await folder_repository.create_folder("A")
    b = await folder_repository.create_folder("B", a.id)
    other = await folder_repository.create_folder("Other")

    async with db.scoped_session(session_maker) as session:
        assert await is_ancestor(session, a.id, b.id)
        assert await is_ancestor(session, b.id, b.id)
        assert not await is_ancestor(session, b.id, a.id)
        assert not await is_ancestor(session, other.id, b.id)


@pytest.mark.asyncio
async def test_single_parent_enforced_by_schema(folder_repository, file_repository, session_maker):
    a = await folder_repository.create_folder("A")
    b = await folder_repository.create_folder("B")
    file = await file_repository.create_file("f.txt", a.id)

    with pytest.raises(IntegrityError):
        async with db.scoped_session(session_maker) as session:
            session.add(Contains.edge(b.id, file.node_id))


@pytest.mark.asyncio
async def test_edge_requires_exactly_one_child(folder_repository, session_maker):
    a = await folder_repository.create_folder("A")

    with pytest.raises(IntegrityError):
        async with db.scoped_session(session_maker) as session:
            session.add(Contains(parent_id=a.id))
