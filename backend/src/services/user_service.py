"""Service layer for users created by the sign-in flow."""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User

logger = logging.getLogger(__name__)


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    """Get a user by ID."""
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Get a user by email."""
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def upsert_user(
    db: AsyncSession,
    email: str,
    name: str | None,
    image: str | None,
    provider: str,
    provider_id: str,
) -> User:
    """
    Create the user on first sign-in, or refresh profile fields afterwards.

    Email is the stable key; name falls back to the email when the provider
    does not supply one.
    """
    user = await get_user_by_email(db, email)
    if user is None:
        user = User(
            email=email,
            name=name or email,
            image=image,
            provider=provider,
            provider_id=provider_id,
        )
        db.add(user)
        await db.flush()
        logger.info("user_created", extra={"user_id": user.id, "provider": provider})
    else:
        user.name = name or user.name
        user.image = image if image is not None else user.image
        user.provider = provider
        user.provider_id = provider_id
        await db.flush()
    await db.refresh(user)
    return user
