"""CLI token management endpoints (browser session only)."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_session_user
from schemas.auth import AuthenticatedUser
from schemas.base import ApiResponse
from schemas.token import TokenCreatedResponse, TokenResponse, TokenWrite
from services import token_service, user_service
from services.exceptions import NotFoundError

router = APIRouter(prefix="/api/tokens", tags=["tokens"])


@router.get("", response_model=ApiResponse[list[TokenResponse]])
async def list_tokens(
    current_user: AuthenticatedUser = Depends(get_session_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[list[TokenResponse]]:
    """List the user's tokens. The stored token is never returned."""
    tokens = await token_service.list_tokens(db, current_user.id)
    return ApiResponse(data=[TokenResponse.model_validate(t) for t in tokens])


@router.post("", response_model=ApiResponse[TokenCreatedResponse], status_code=201)
async def create_token(
    data: TokenWrite,
    current_user: AuthenticatedUser = Depends(get_session_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[TokenCreatedResponse]:
    """
    Issue a CLI token.

    The raw token is in this response only; save it now.
    """
    user = await user_service.get_user(db, current_user.id)
    if user is None:
        raise NotFoundError("User not found")
    api_token, raw_token = await token_service.issue_token(db, user, data.name)
    return ApiResponse(
        data=TokenCreatedResponse(
            id=api_token.id,
            name=api_token.name,
            token=raw_token,
            created_at=api_token.created_at,
        ),
    )


@router.put("/{token_id}", response_model=ApiResponse[TokenResponse])
async def rename_token(
    token_id: int,
    data: TokenWrite,
    current_user: AuthenticatedUser = Depends(get_session_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[TokenResponse]:
    """Rename a token."""
    api_token = await token_service.rename_token(db, current_user.id, token_id, data.name)
    return ApiResponse(data=TokenResponse.model_validate(api_token))


@router.delete("/{token_id}", response_model=ApiResponse[dict[str, str]])
async def revoke_token(
    token_id: int,
    current_user: AuthenticatedUser = Depends(get_session_user),
    db: AsyncSession = Depends(get_async_session),
) -> ApiResponse[dict[str, str]]:
    """Revoke a token. The CLI holding it is rejected from the next request on."""
    await token_service.revoke_token(db, current_user.id, token_id)
    return ApiResponse(data={"message": "Token revoked successfully"})
