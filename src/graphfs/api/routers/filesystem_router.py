"""Router for folder and file operations.

All identifiers in paths and bodies are canonical ``folder:<key>`` or
``file:<key>`` strings. Typed errors raised by the service are turned into
status codes by the application's exception handler.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Path, Query

from graphfs.deps import FileSystemServiceDep, TreeServiceDep
from graphfs.schemas import (
    CreateFileRequest,
    CreateFolderRequest,
    DeleteFolderResponse,
    FileResponse,
    FolderContents,
    FolderResponse,
    MoveItemRequest,
    RenameItemRequest,
    SetFolderOpenRequest,
    SuccessResponse,
    TreeNode,
    UpdateFileContentRequest,
)

router = APIRouter(prefix="/fs", tags=["filesystem"])


## Read


@router.get("/roots", response_model=List[FolderResponse])
async def list_root_folders(service: FileSystemServiceDep) -> List[FolderResponse]:
    return await service.list_root_folders()


@router.get("/folders/{folder_id}/contents", response_model=FolderContents)
async def get_folder_contents(
    service: FileSystemServiceDep,
    folder_id: str = Path(..., description="Canonical folder id"),
) -> FolderContents:
    return await service.get_folder_contents(folder_id)


@router.get("/tree", response_model=List[TreeNode])
async def get_forest(
    tree_service: TreeServiceDep,
    depth: Optional[int] = Query(None, ge=1, description="Levels of children to include"),
) -> List[TreeNode]:
    """Nested view of every root folder."""
    return await tree_service.get_tree(depth=depth)


@router.get("/folders/{folder_id}/tree", response_model=TreeNode)
async def get_folder_tree(
    tree_service: TreeServiceDep,
    folder_id: str = Path(..., description="Canonical folder id"),
    depth: Optional[int] = Query(None, ge=1, description="Levels of children to include"),
) -> TreeNode:
    """Nested view of a single folder."""
    trees = await tree_service.get_tree(folder_id, depth=depth)
    return trees[0]


@router.get("/files/{file_id}", response_model=FileResponse)
async def get_file(
    service: FileSystemServiceDep,
    file_id: str = Path(..., description="Canonical file id"),
) -> FileResponse:
    file = await service.get_file(file_id)
    if file is None:
        raise HTTPException(status_code=404, detail=f"File {file_id} not found")
    return file


## Create


@router.post("/folders", response_model=FolderResponse, status_code=201)
async def create_folder(data: CreateFolderRequest, service: FileSystemServiceDep) -> FolderResponse:
    return await service.create_folder(data.name, data.parent_id)


@router.post("/files", response_model=FileResponse, status_code=201)
async def create_file(data: CreateFileRequest, service: FileSystemServiceDep) -> FileResponse:
    return await service.create_file(data.title, data.parent_id, data.content)


## Update


@router.put("/files/{file_id}/content", response_model=FileResponse)
async def update_file_content(
    data: UpdateFileContentRequest,
    service: FileSystemServiceDep,
    file_id: str = Path(..., description="Canonical file id"),
) -> FileResponse:
    return await service.update_file_content(file_id, data.content)


@router.patch("/folders/{folder_id}/open", response_model=FolderResponse)
async def set_folder_open(
    data: SetFolderOpenRequest,
    service: FileSystemServiceDep,
    folder_id: str = Path(..., description="Canonical folder id"),
) -> FolderResponse:
    return await service.set_folder_open(folder_id, data.is_open)


@router.post("/rename", response_model=SuccessResponse)
async def rename_item(data: RenameItemRequest, service: FileSystemServiceDep) -> SuccessResponse:
    await service.rename_item(data.id, data.new_name)
    return SuccessResponse()


@router.post("/move", response_model=SuccessResponse)
async def move_item(data: MoveItemRequest, service: FileSystemServiceDep) -> SuccessResponse:
    await service.move_item(data.item_id, data.new_parent_id)
    return SuccessResponse()


## Delete


@router.delete("/files/{file_id}", response_model=SuccessResponse)
async def delete_file(
    service: FileSystemServiceDep,
    file_id: str = Path(..., description="Canonical file id"),
) -> SuccessResponse:
    await service.delete_file(file_id)
    return SuccessResponse()


@router.delete("/folders/{folder_id}", response_model=DeleteFolderResponse)
async def delete_folder(
    service: FileSystemServiceDep,
    folder_id: str = Path(..., description="Canonical folder id"),
    recursive: bool = Query(False, description="Delete the folder's whole subtree"),
) -> DeleteFolderResponse:
    """Delete a folder.

    Without ``recursive`` the folder must be empty. With it, the folder and
    every descendant are removed in one transaction.
    """
    if recursive:
        deleted = await service.delete_folder_and_contents(folder_id)
        return DeleteFolderResponse(deleted=deleted)

    deleted = await service.delete_folder(folder_id)
    return DeleteFolderResponse(deleted=1 if deleted else 0)
