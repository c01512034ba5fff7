"""
Authentication dependencies.

Two independent methods identify a caller:

- Browser session: Starlette's signed session cookie carrying the user's ID,
  set by the sign-in flow.
- Bearer token: a CLI token from `Authorization: Bearer <jwt>`, verified by
  token_service.authenticate_token.

`get_current_user` accepts either (session first). `get_session_user` and
`get_token_user` accept only one. Each returns an AuthenticatedUser whose
`source` tells services which authorization rules apply.
"""
import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.rate_limiter import enforce_rate_limit
from core.tokens import extract_token_from_header
from db.session import get_async_session
from models.user import User
from schemas.auth import AuthenticatedUser, AuthSource
from services import token_service, user_service
from services.token_service import TokenAuthenticationError

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"

# Same message whichever method failed, so callers can't tell them apart
HYBRID_AUTH_ERROR = (
    "Authentication required. Please login via web portal or provide a valid "
    "Bearer token."
)


def start_session(request: Request, user: User) -> None:
    """Sign the user in for this browser."""
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id


def end_session(request: Request) -> None:
    """Sign the browser out."""
    request.session.clear()


async def resolve_session_user(
    request: Request, db: AsyncSession,
) -> AuthenticatedUser | None:
    """Return the session's user, or None if there is no valid session."""
    user_id = request.session.get(SESSION_USER_KEY)
    if not isinstance(user_id, int):
        return None
    user = await user_service.get_user(db, user_id)
    if user is None:
        # User was removed after signing in
        end_session(request)
        return None
    return AuthenticatedUser(
        id=user.id,
        email=user.email,
        name=user.name,
        image=user.image,
        source=AuthSource.SESSION,
    )


async def resolve_token_user(request: Request, db: AsyncSession) -> AuthenticatedUser:
    """
    Verify the request's Bearer token.

    Raises:
        TokenAuthenticationError: If the header is missing or the token fails
            any check.
    """
    raw_token = extract_token_from_header(request.headers.get("Authorization"))
    if raw_token is None:
        raise TokenAuthenticationError("Authorization header required")

    result = await token_service.authenticate_token(db, raw_token)
    # Record the use even if the handler fails and rolls back its own writes
    await db.commit()
    return AuthenticatedUser(
        id=result.user.id,
        email=result.user.email,
        name=result.user.name,
        image=result.user.image,
        source=AuthSource.TOKEN,
        token_name=result.token.name,
        token_last_used=result.token.last_used_at,
    )


async def _accept(request: Request, user: AuthenticatedUser) -> AuthenticatedUser:
    await enforce_rate_limit(request, user)
    return user


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
) -> AuthenticatedUser:
    """Authenticate by browser session, falling back to a Bearer token."""
    user = await resolve_session_user(request, db)
    if user is None:
        try:
            user = await resolve_token_user(request, db)
        except TokenAuthenticationError as e:
            logger.info("auth_failed", extra={"method": "hybrid", "reason": e.message})
            raise HTTPException(status_code=401, detail=HYBRID_AUTH_ERROR) from e
    return await _accept(request, user)


async def get_session_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
) -> AuthenticatedUser:
    """Authenticate by browser session only (portal-only endpoints)."""
    user = await resolve_session_user(request, db)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return await _accept(request, user)


async def get_token_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
) -> AuthenticatedUser:
    """Authenticate by Bearer token only (CLI endpoints)."""
    try:
        user = await resolve_token_user(request, db)
    except TokenAuthenticationError as e:
        logger.info("auth_failed", extra={"method": "token", "reason": e.message})
        raise HTTPException(
            status_code=401,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    return await _accept(request, user)
