"""Pydantic schemas for folder endpoints."""
from datetime import datetime

from pydantic import Field, field_validator

from schemas.base import CamelModel


def validate_folder_name(name: str) -> str:
    """Trim and require a non-empty folder name."""
    name = name.strip()
    if not name:
        raise ValueError("Folder name is required")
    return name


class FolderWrite(CamelModel):
    """Schema for creating or renaming a folder."""

    name: str = Field(max_length=255)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        """Trim and require a name."""
        return validate_folder_name(v)


class FolderResponse(CamelModel):
    """Schema for folder responses."""

    id: int
    user_id: int
    name: str
    created_at: datetime
    updated_at: datetime


class FolderDeleteResponse(CamelModel):
    """Result of deleting a folder and its mnemonics."""

    message: str
    deleted_mnemonics: int
