"""Endpoint the CLI uses to check who its token belongs to."""
from fastapi import APIRouter, Depends

from api.dependencies import get_token_user
from schemas.auth import AuthenticatedUser, WhoAmIResponse
from schemas.base import ApiResponse

router = APIRouter(prefix="/api", tags=["me"])


@router.get("/me", response_model=ApiResponse[WhoAmIResponse])
async def whoami(
    current_user: AuthenticatedUser = Depends(get_token_user),
) -> ApiResponse[WhoAmIResponse]:
    """Return the token's user and the token's name and last use."""
    return ApiResponse(
        data=WhoAmIResponse(
            id=current_user.id,
            email=current_user.email,
            name=current_user.name,
            image=current_user.image,
            token_name=current_user.token_name or "",
            token_last_used=current_user.token_last_used,
        ),
    )
