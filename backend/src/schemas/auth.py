"""Resolved caller identity and auth-related schemas."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import Field

from schemas.base import CamelModel


class AuthSource(Enum):
    """How the caller proved its identity."""

    SESSION = "session"
    TOKEN = "token"


@dataclass
class AuthenticatedUser:
    """
    The acting identity for a request.

    `source` changes authorization rules downstream: session callers must prove
    folder ownership on folder-scoped writes, token callers may create unfiled
    mnemonics. Token fields are set only when `source` is TOKEN.
    """

    id: int
    email: str
    name: str
    image: str | None
    source: AuthSource
    token_name: str | None = None
    token_last_used: datetime | None = None


class UserResponse(CamelModel):
    """Public user fields."""

    id: int
    email: str
    name: str
    image: str | None = None


class WhoAmIResponse(UserResponse):
    """User plus the metadata of the token used for the request."""

    token_name: str
    token_last_used: datetime | None = None


class DevLoginRequest(CamelModel):
    """Sign-in payload accepted in development mode."""

    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    name: str | None = Field(default=None, max_length=255)
    image: str | None = None
