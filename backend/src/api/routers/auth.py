"""
Browser sign-in endpoints.

Production sign-in goes through the identity provider; `dev-login` stands in
for it when DEV_MODE is on so the portal can be used locally.
"""
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_session_user, get_settings
from core.auth import end_session, start_session
from core.config import Settings
from schemas.auth import AuthenticatedUser, DevLoginRequest, UserResponse
from schemas.base import ApiResponse
from services import user_service
from services.exceptions import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/dev-login", response_model=ApiResponse[UserResponse])
async def dev_login(
    data: DevLoginRequest,
    request: Request,
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[UserResponse]:
    """Sign in as any email address. Only available in development mode."""
    if not settings.dev_mode:
        raise NotFoundError("Not found")
    user = await user_service.upsert_user(
        db,
        email=data.email,
        name=data.name,
        image=data.image,
        provider="dev",
        provider_id=data.email,
    )
    start_session(request, user)
    logger.info("dev_login", extra={"user_id": user.id})
    return ApiResponse(data=UserResponse.model_validate(user))


@router.post("/logout", response_model=ApiResponse[dict[str, str]])
async def logout(request: Request) -> ApiResponse[dict[str, str]]:
    """Clear the browser session."""
    end_session(request)
    return ApiResponse(data={"message": "Signed out"})


@router.get("/session", response_model=ApiResponse[UserResponse])
async def current_session(
    current_user: AuthenticatedUser = Depends(get_session_user),
) -> ApiResponse[UserResponse]:
    """Return the signed-in user."""
    return ApiResponse(
        data=UserResponse(
            id=current_user.id,
            email=current_user.email,
            name=current_user.name,
            image=current_user.image,
        ),
    )
