"""Tests for the FileRepository."""

import asyncio

import pytest

from graphfs.exceptions import NodeNotFoundError


@pytest.mark.asyncio
async def test_create_file(folder_repository, file_repository, contains_repository):
    root = await folder_repository.create_folder("Root")

    file = await file_repository.create_file("README.txt", root.id, "Welcome")

    assert file.title == "README.txt"
    assert file.content == "Welcome"
    assert file.canonical_id == f"file:{file.id}"
    assert file.created_at == file.updated_at
    assert file.created_at.tzinfo is not None
    assert await contains_repository.find_parent_id(file.node_id) == root.node_id


@pytest.mark.asyncio
async def test_create_file_default_content(folder_repository, file_repository):
    root = await folder_repository.create_folder("Root")

    file = await file_repository.create_file("empty.txt", root.id)

    assert file.content == ""


@pytest.mark.asyncio
async def test_create_file_missing_parent(file_repository):
    with pytest.raises(NodeNotFoundError):
        await file_repository.create_file("lost.txt", "missing")

    assert await file_repository.count() == 0


@pytest.mark.asyncio
async def test_update_content_refreshes_updated_at(folder_repository, file_repository):
    root = await folder_repository.create_folder("Root")
    file = await file_repository.create_file("notes.md", root.id, "v1")

    await asyncio.sleep(0.01)
    updated = await file_repository.update_content(file.id, "v2")

    assert updated.content == "v2"
    assert updated.created_at == file.created_at
    assert updated.updated_at > file.updated_at


@pytest.mark.asyncio
async def test_update_content_same_text_still_stamps(folder_repository, file_repository):
    root = await folder_repository.create_folder("Root")
    file = await file_repository.create_file("notes.md", root.id, "same")

    await asyncio.sleep(0.01)
    updated = await file_repository.update_content(file.id, "same")

    assert updated.updated_at > file.updated_at


@pytest.mark.asyncio
async def test_update_content_missing(file_repository):
    assert await file_repository.update_content("missing", "x") is None


@pytest.mark.asyncio
async def test_delete_file_removes_edge(folder_repository, file_repository, contains_repository):
    root = await folder_repository.create_folder("Root")
    file = await file_repository.create_file("a.txt", root.id)

    assert await file_repository.delete_by_id(file.id) is True
    assert await file_repository.delete_by_id(file.id) is False

    assert await contains_repository.find_children(root.id) == []
