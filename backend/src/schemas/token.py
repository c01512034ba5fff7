"""Pydantic schemas for CLI token endpoints."""
from datetime import datetime

from pydantic import AliasChoices, Field, field_validator

from schemas.base import CamelModel


class TokenWrite(CamelModel):
    """Schema for issuing or renaming a token."""

    name: str = Field(max_length=255)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        """Trim and require a name."""
        v = v.strip()
        if not v:
            raise ValueError("Token name is required")
        return v


class TokenResponse(CamelModel):
    """
    Token metadata.

    The encrypted token is never returned.
    """

    id: int
    name: str
    last_used: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("last_used_at", "lastUsed"),
        serialization_alias="lastUsed",
    )
    created_at: datetime
    updated_at: datetime


class TokenCreatedResponse(CamelModel):
    """Returned once at creation; `token` cannot be retrieved again."""

    id: int
    name: str
    token: str
    created_at: datetime
