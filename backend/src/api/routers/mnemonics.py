"""
Mnemonic endpoints.

The web portal works folder by folder; the CLI fetches mnemonics by name and
may create them without a folder.
"""
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    get_async_session,
    get_current_user,
    get_session_user,
    get_token_user,
)
from schemas.auth import AuthenticatedUser
from schemas.base import ApiResponse
from schemas.mnemonic import (
    MnemonicByName,
    MnemonicCommands,
    MnemonicCreate,
    MnemonicImport,
    MnemonicResponse,
    MnemonicUpdate,
)
from services import mnemonic_service
from services.exceptions import NotFoundError, ValidationFailedError
from services.mnemonic_import import EXAMPLE_IMPORT, export_commands, parse_import_json

router = APIRouter(prefix="/api/mnemonics", tags=["mnemonics"])


def _dump_commands(data: MnemonicUpdate) -> list[dict[str, Any]]:
    return [cmd.model_dump() for cmd in data.commands]


@router.get("", response_model=ApiResponse[list[MnemonicResponse]])
async def list_mnemonics(
    folder_id: int | None = Query(default=None, alias="folderId"),
    current_user: AuthenticatedUser = Depends(get_session_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[list[MnemonicResponse]]:
    """List the mnemonics in one of the user's folders, newest first."""
    if folder_id is None:
        raise ValidationFailedError("Folder ID is required")
    mnemonics = await mnemonic_service.list_folder_mnemonics(db, current_user.id, folder_id)
    return ApiResponse(data=[MnemonicResponse.model_validate(m) for m in mnemonics])


@router.post("", response_model=ApiResponse[MnemonicResponse], status_code=201)
async def create_mnemonic(
    data: MnemonicCreate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[MnemonicResponse]:
    """
    Create a mnemonic.

    `folderId` is required from the web portal; the CLI may omit it to create
    an unfiled mnemonic.
    """
    mnemonic = await mnemonic_service.create_mnemonic(
        db,
        current_user,
        name=data.name,
        commands=_dump_commands(data),
        folder_id=data.folder_id,
    )
    return ApiResponse(data=MnemonicResponse.model_validate(mnemonic))


@router.post("/import", response_model=ApiResponse[MnemonicResponse], status_code=201)
async def import_mnemonic(
    data: MnemonicImport,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[MnemonicResponse]:
    """Create a mnemonic from an exported JSON document (see /import/example)."""
    commands = parse_import_json(data.data)
    mnemonic = await mnemonic_service.create_mnemonic(
        db,
        current_user,
        name=data.name,
        commands=commands,
        folder_id=data.folder_id,
    )
    return ApiResponse(data=MnemonicResponse.model_validate(mnemonic))


@router.get("/import/example", response_model=ApiResponse[MnemonicCommands])
async def import_example() -> ApiResponse[MnemonicCommands]:
    """Example of the document accepted by POST /import."""
    return ApiResponse(data=MnemonicCommands.model_validate(EXAMPLE_IMPORT))


@router.get("/name/{name}", response_model=ApiResponse[MnemonicByName])
async def get_mnemonic_by_name(
    name: str,
    current_user: AuthenticatedUser = Depends(get_token_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[MnemonicByName]:
    """Fetch a mnemonic's commands by name, for the CLI to run."""
    mnemonic = await mnemonic_service.get_mnemonic_by_name(db, current_user.id, name)
    if mnemonic is None:
        raise NotFoundError("Mnemonic not found")
    return ApiResponse(data=MnemonicByName.model_validate(mnemonic))


@router.get("/{mnemonic_id:int}/export", response_model=ApiResponse[MnemonicCommands])
async def export_mnemonic(
    mnemonic_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[MnemonicCommands]:
    """Export a mnemonic's commands in the import format."""
    mnemonic = await mnemonic_service.get_mnemonic(db, current_user.id, mnemonic_id)
    if mnemonic is None:
        raise NotFoundError("Mnemonic not found")
    return ApiResponse(
        data=MnemonicCommands.model_validate(export_commands(mnemonic.commands)),
    )


@router.put("/{mnemonic_id:int}", response_model=ApiResponse[MnemonicResponse])
async def update_mnemonic(
    mnemonic_id: int,
    data: MnemonicUpdate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[MnemonicResponse]:
    """Replace a mnemonic's name and full command list."""
    mnemonic = await mnemonic_service.update_mnemonic(
        db,
        current_user,
        mnemonic_id,
        name=data.name,
        commands=_dump_commands(data),
    )
    return ApiResponse(data=MnemonicResponse.model_validate(mnemonic))


@router.delete("/{mnemonic_id:int}", response_model=ApiResponse[dict[str, str]])
async def delete_mnemonic(
    mnemonic_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[dict[str, str]]:
    """Delete a mnemonic."""
    await mnemonic_service.delete_mnemonic(db, current_user, mnemonic_id)
    return ApiResponse(data={"message": "Mnemonic deleted successfully"})


@router.get("/{name}", response_model=ApiResponse[MnemonicByName])
async def get_mnemonic(
    name: str,
    current_user: AuthenticatedUser = Depends(get_token_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[MnemonicByName]:
    """Fetch a mnemonic by name (short form of /name/{name})."""
    return await get_mnemonic_by_name(name, current_user, db)
