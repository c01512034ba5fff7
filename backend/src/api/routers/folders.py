"""Folder CRUD endpoints (browser session or CLI token)."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from schemas.auth import AuthenticatedUser
from schemas.base import ApiResponse, SourcedResponse
from schemas.folder import FolderDeleteResponse, FolderResponse, FolderWrite
from services import folder_service

router = APIRouter(prefix="/api/folders", tags=["folders"])


@router.get("", response_model=SourcedResponse[list[FolderResponse]])
async def list_folders(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> SourcedResponse[list[FolderResponse]]:
    """List the user's folders, newest first."""
    folders = await folder_service.list_folders(db, current_user.id)
    return SourcedResponse(
        data=[FolderResponse.model_validate(f) for f in folders],
        source=current_user.source.value,
    )


@router.post("", response_model=SourcedResponse[FolderResponse], status_code=201)
async def create_folder(
    data: FolderWrite,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> SourcedResponse[FolderResponse]:
    """Create a folder. Names are unique per user."""
    folder = await folder_service.create_folder(db, current_user.id, data.name)
    return SourcedResponse(
        data=FolderResponse.model_validate(folder),
        source=current_user.source.value,
    )


@router.put("/{folder_id}", response_model=ApiResponse[FolderResponse])
async def rename_folder(
    folder_id: int,
    data: FolderWrite,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[FolderResponse]:
    """Rename a folder."""
    folder = await folder_service.rename_folder(db, current_user.id, folder_id, data.name)
    return ApiResponse(data=FolderResponse.model_validate(folder))


@router.delete("/{folder_id}", response_model=ApiResponse[FolderDeleteResponse])
async def delete_folder(
    folder_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[FolderDeleteResponse]:
    """Delete a folder together with every mnemonic in it."""
    deleted = await folder_service.delete_folder(db, current_user.id, folder_id)
    return ApiResponse(
        data=FolderDeleteResponse(
            message="Folder deleted successfully",
            deleted_mnemonics=deleted,
        ),
    )
