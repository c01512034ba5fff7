"""Service layer for mnemonic CRUD operations."""
import logging
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.mnemonic import Mnemonic
from schemas.auth import AuthenticatedUser, AuthSource
from services import folder_service
from services.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

DUPLICATE_MNEMONIC_ERROR = "Mnemonic name already exists"


async def _name_taken(
    db: AsyncSession, user_id: int, name: str, exclude_id: int | None = None,
) -> bool:
    query = select(Mnemonic.id).where(
        Mnemonic.user_id == user_id, Mnemonic.name == name,
    )
    if exclude_id is not None:
        query = query.where(Mnemonic.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def _flush_unique(db: AsyncSession, mnemonic: Mnemonic) -> None:
    try:
        await db.flush()
    except IntegrityError as e:
        raise ConflictError(DUPLICATE_MNEMONIC_ERROR) from e
    await db.refresh(mnemonic)


async def _check_folder_access(
    db: AsyncSession, user: AuthenticatedUser, mnemonic: Mnemonic,
) -> None:
    """
    Browser sessions must also own the folder the mnemonic is filed in.

    Token callers work with mnemonics by user alone.
    """
    if user.source is not AuthSource.SESSION or mnemonic.folder_id is None:
        return
    folder = await folder_service.get_folder(db, user.id, mnemonic.folder_id)
    if folder is None:
        raise ForbiddenError("Unauthorized")


async def list_folder_mnemonics(
    db: AsyncSession, user_id: int, folder_id: int,
) -> list[Mnemonic]:
    """List the mnemonics in one of the user's folders, newest first."""
    await folder_service.require_folder(db, user_id, folder_id)
    result = await db.execute(
        select(Mnemonic)
        .where(Mnemonic.folder_id == folder_id, Mnemonic.user_id == user_id)
        .order_by(Mnemonic.created_at.desc(), Mnemonic.id.desc()),
    )
    return list(result.scalars().all())


async def get_mnemonic(
    db: AsyncSession, user_id: int, mnemonic_id: int,
) -> Mnemonic | None:
    """Get a mnemonic by ID, scoped to its owner."""
    result = await db.execute(
        select(Mnemonic).where(
            Mnemonic.id == mnemonic_id, Mnemonic.user_id == user_id,
        ),
    )
    return result.scalar_one_or_none()


async def get_mnemonic_by_name(
    db: AsyncSession, user_id: int, name: str,
) -> Mnemonic | None:
    """Get a mnemonic by its (per-user unique) name."""
    result = await db.execute(
        select(Mnemonic).where(Mnemonic.user_id == user_id, Mnemonic.name == name),
    )
    return result.scalar_one_or_none()


async def create_mnemonic(
    db: AsyncSession,
    user: AuthenticatedUser,
    name: str,
    commands: list[dict[str, Any]],
    folder_id: int | None = None,
) -> Mnemonic:
    """
    Create a mnemonic for the user.

    Browser sessions create mnemonics inside a folder, so `folder_id` is
    required for them. CLI token callers may leave the mnemonic unfiled. A
    supplied folder must belong to the user either way.

    Args:
        db: Database session.
        user: Resolved caller.
        name: Validated mnemonic name.
        commands: Normalized commands (see schemas.commands.normalize_commands).
        folder_id: Folder to file the mnemonic in.
    """
    if folder_id is None and user.source is AuthSource.SESSION:
        raise ValidationFailedError("Folder ID is required")
    if folder_id is not None:
        await folder_service.require_folder(db, user.id, folder_id)
    if await _name_taken(db, user.id, name):
        raise ConflictError(DUPLICATE_MNEMONIC_ERROR)

    mnemonic = Mnemonic(
        user_id=user.id,
        folder_id=folder_id,
        name=name,
        commands=commands,
    )
    db.add(mnemonic)
    await _flush_unique(db, mnemonic)
    logger.info(
        "mnemonic_created",
        extra={
            "user_id": user.id,
            "mnemonic_id": mnemonic.id,
            "source": user.source.value,
        },
    )
    return mnemonic


async def update_mnemonic(
    db: AsyncSession,
    user: AuthenticatedUser,
    mnemonic_id: int,
    name: str,
    commands: list[dict[str, Any]],
) -> Mnemonic:
    """Replace a mnemonic's name and full command list."""
    mnemonic = await get_mnemonic(db, user.id, mnemonic_id)
    if mnemonic is None:
        raise NotFoundError("Mnemonic not found")
    await _check_folder_access(db, user, mnemonic)
    if await _name_taken(db, user.id, name, exclude_id=mnemonic_id):
        raise ConflictError(DUPLICATE_MNEMONIC_ERROR)

    mnemonic.name = name
    mnemonic.commands = commands
    await _flush_unique(db, mnemonic)
    return mnemonic


async def delete_mnemonic(
    db: AsyncSession, user: AuthenticatedUser, mnemonic_id: int,
) -> None:
    """Delete a mnemonic owned by the user."""
    mnemonic = await get_mnemonic(db, user.id, mnemonic_id)
    if mnemonic is None:
        raise NotFoundError("Mnemonic not found")
    await _check_folder_access(db, user, mnemonic)
    await db.execute(delete(Mnemonic).where(Mnemonic.id == mnemonic.id))
    logger.info(
        "mnemonic_deleted", extra={"user_id": user.id, "mnemonic_id": mnemonic_id},
    )
