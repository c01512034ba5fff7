"""
Service layer for CLI tokens: issue, list, rename, revoke and authenticate.

A token record is either present (active) or deleted (revoked). Expiry is not a
record state; it is enforced when the signed token is verified.
"""
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from core.tokens import (
    InvalidTokenError,
    generate_token,
    generate_token_id,
    hash_token,
    verify_hashed_token,
    verify_token,
)
from models.api_token import ApiToken
from models.user import User
from services.exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

DUPLICATE_TOKEN_ERROR = "Token name already exists"


class TokenAuthenticationError(Exception):
    """Raised when a presented Bearer token cannot be trusted."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


@dataclass
class TokenAuthResult:
    """The user behind a verified token, and the token record itself."""

    user: User
    token: ApiToken


async def _name_taken(
    db: AsyncSession, user_id: int, name: str, exclude_id: int | None = None,
) -> bool:
    query = select(ApiToken.id).where(
        ApiToken.user_id == user_id, ApiToken.name == name,
    )
    if exclude_id is not None:
        query = query.where(ApiToken.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def list_tokens(db: AsyncSession, user_id: int) -> list[ApiToken]:
    """List a user's tokens, newest first."""
    result = await db.execute(
        select(ApiToken)
        .where(ApiToken.user_id == user_id)
        .order_by(ApiToken.created_at.desc(), ApiToken.id.desc()),
    )
    return list(result.scalars().all())


async def issue_token(
    db: AsyncSession,
    user: User,
    name: str,
    settings: Settings | None = None,
) -> tuple[ApiToken, str]:
    """
    Issue a new CLI token.

    Returns:
        The stored record and the raw signed token. The raw token is not
        recoverable later; only its encrypted form is persisted.
    """
    settings = settings or get_settings()
    if await _name_taken(db, user.id, name):
        raise ConflictError(DUPLICATE_TOKEN_ERROR)

    token_id = generate_token_id()
    raw_token = generate_token(
        user_id=user.id,
        email=user.email,
        token_id=token_id,
        secret=settings.jwt_secret,
        expires_in=timedelta(days=settings.token_expiry_days),
    )
    api_token = ApiToken(
        user_id=user.id,
        name=name,
        token_id=token_id,
        hashed_token=hash_token(raw_token, settings.encryption_key),
    )
    db.add(api_token)
    await db.flush()
    await db.refresh(api_token)
    logger.info("token_issued", extra={"user_id": user.id, "token_id": api_token.id})
    return api_token, raw_token


async def rename_token(
    db: AsyncSession, user_id: int, api_token_id: int, name: str,
) -> ApiToken:
    """Rename one of the user's tokens."""
    result = await db.execute(
        select(ApiToken).where(
            ApiToken.id == api_token_id, ApiToken.user_id == user_id,
        ),
    )
    api_token = result.scalar_one_or_none()
    if api_token is None:
        raise NotFoundError("Token not found")
    if await _name_taken(db, user_id, name, exclude_id=api_token_id):
        raise ConflictError(DUPLICATE_TOKEN_ERROR)
    api_token.name = name
    await db.flush()
    await db.refresh(api_token)
    return api_token


async def revoke_token(db: AsyncSession, user_id: int, api_token_id: int) -> None:
    """
    Revoke (delete) one of the user's tokens.

    Unknown IDs and other users' tokens both raise NotFoundError.
    """
    result = await db.execute(
        delete(ApiToken).where(
            ApiToken.id == api_token_id, ApiToken.user_id == user_id,
        ),
    )
    if not result.rowcount:
        raise NotFoundError("Token not found")
    logger.info("token_revoked", extra={"user_id": user_id, "token_id": api_token_id})


async def authenticate_token(
    db: AsyncSession,
    raw_token: str,
    settings: Settings | None = None,
) -> TokenAuthResult:
    """
    Verify a presented token and record its use.

    Checks, in order: signature and expiry, that the record still exists
    (deleted means revoked), that the stored encrypted copy matches, and that
    the user exists. Updates `last_used_at` on success.

    Raises:
        TokenAuthenticationError: On any failed check.
    """
    settings = settings or get_settings()
    try:
        payload = verify_token(raw_token, settings.jwt_secret)
    except InvalidTokenError as e:
        raise TokenAuthenticationError("Invalid or expired token") from e

    result = await db.execute(
        select(ApiToken).where(
            ApiToken.user_id == payload["userId"],
            ApiToken.token_id == payload["tokenId"],
        ),
    )
    api_token = result.scalar_one_or_none()
    if api_token is None:
        raise TokenAuthenticationError("Token has been revoked")

    if not verify_hashed_token(raw_token, api_token.hashed_token, settings.encryption_key):
        raise TokenAuthenticationError("Invalid token")

    user = await db.get(User, api_token.user_id)
    if user is None:
        raise TokenAuthenticationError("User not found")

    api_token.last_used_at = datetime.now(UTC)
    await db.flush()
    await db.refresh(api_token)
    return TokenAuthResult(user=user, token=api_token)
