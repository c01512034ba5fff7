"""Service layer for folder CRUD operations."""
import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.folder import Folder
from models.mnemonic import Mnemonic
from services.exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

DUPLICATE_FOLDER_ERROR = "Folder name already exists"


async def _name_taken(
    db: AsyncSession, user_id: int, name: str, exclude_id: int | None = None,
) -> bool:
    query = select(Folder.id).where(Folder.user_id == user_id, Folder.name == name)
    if exclude_id is not None:
        query = query.where(Folder.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def _flush_unique(db: AsyncSession, folder: Folder) -> None:
    """Flush pending changes, mapping a (user_id, name) violation to ConflictError."""
    try:
        await db.flush()
    except IntegrityError as e:
        # Two concurrent writes can both pass the pre-check
        raise ConflictError(DUPLICATE_FOLDER_ERROR) from e
    await db.refresh(folder)


async def list_folders(db: AsyncSession, user_id: int) -> list[Folder]:
    """List a user's folders, newest first."""
    result = await db.execute(
        select(Folder)
        .where(Folder.user_id == user_id)
        .order_by(Folder.created_at.desc(), Folder.id.desc()),
    )
    return list(result.scalars().all())


async def get_folder(db: AsyncSession, user_id: int, folder_id: int) -> Folder | None:
    """Get a folder by ID, scoped to its owner."""
    result = await db.execute(
        select(Folder).where(Folder.id == folder_id, Folder.user_id == user_id),
    )
    return result.scalar_one_or_none()


async def require_folder(db: AsyncSession, user_id: int, folder_id: int) -> Folder:
    """Get a folder owned by the user or raise NotFoundError."""
    folder = await get_folder(db, user_id, folder_id)
    if folder is None:
        raise NotFoundError("Folder not found")
    return folder


async def create_folder(db: AsyncSession, user_id: int, name: str) -> Folder:
    """Create a folder. Names are unique per user."""
    if await _name_taken(db, user_id, name):
        raise ConflictError(DUPLICATE_FOLDER_ERROR)
    folder = Folder(user_id=user_id, name=name)
    db.add(folder)
    await _flush_unique(db, folder)
    logger.info("folder_created", extra={"user_id": user_id, "folder_id": folder.id})
    return folder


async def rename_folder(
    db: AsyncSession, user_id: int, folder_id: int, name: str,
) -> Folder:
    """Rename a folder owned by the user."""
    folder = await require_folder(db, user_id, folder_id)
    if await _name_taken(db, user_id, name, exclude_id=folder_id):
        raise ConflictError(DUPLICATE_FOLDER_ERROR)
    folder.name = name
    await _flush_unique(db, folder)
    return folder


async def delete_folder(db: AsyncSession, user_id: int, folder_id: int) -> int:
    """
    Delete a folder and every mnemonic filed in it.

    Returns:
        Number of mnemonics deleted.
    """
    folder = await require_folder(db, user_id, folder_id)
    result = await db.execute(
        delete(Mnemonic).where(
            Mnemonic.folder_id == folder.id,
            Mnemonic.user_id == user_id,
        ),
    )
    deleted_mnemonics = result.rowcount or 0
    await db.execute(delete(Folder).where(Folder.id == folder.id))
    logger.info(
        "folder_deleted",
        extra={
            "user_id": user_id,
            "folder_id": folder_id,
            "deleted_mnemonics": deleted_mnemonics,
        },
    )
    return deleted_mnemonics
