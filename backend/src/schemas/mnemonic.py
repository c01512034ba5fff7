"""Pydantic schemas for mnemonic endpoints."""
import re
from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from schemas.base import CamelModel
from schemas.command_formats import migrate_commands
from schemas.commands import MnemonicCommand, normalize_commands

MNEMONIC_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9-_]{0,49}$")


def validate_mnemonic_name(name: str) -> str:
    """
    Trim and validate a mnemonic name.

    Names are what users type after the CLI command, so they are restricted to
    lowercase letters, digits, hyphens and underscores, starting with a letter,
    at most 50 characters (e.g. 'deploy-prod_2').
    """
    name = name.strip()
    if not name:
        raise ValueError("Mnemonic name cannot be empty")
    if not MNEMONIC_NAME_PATTERN.match(name):
        raise ValueError(
            "Mnemonic name must start with a lowercase letter and contain only "
            "lowercase letters, numbers, hyphens, and underscores. "
            "Maximum 50 characters.",
        )
    return name


class MnemonicUpdate(CamelModel):
    """Schema for replacing a mnemonic's name and full command list."""

    name: str
    commands: list[MnemonicCommand]

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        """Validate the mnemonic name format."""
        return validate_mnemonic_name(v)

    @field_validator("commands", mode="before")
    @classmethod
    def check_commands(cls, v: Any) -> list[dict[str, Any]]:
        """Trim commands, drop blank ones, and validate input steps."""
        return normalize_commands(v)


class MnemonicCreate(MnemonicUpdate):
    """
    Schema for creating a mnemonic.

    `folder_id` is required for browser sessions and optional for CLI tokens;
    the route enforces that rule since it depends on the caller.
    """

    folder_id: int | None = None


class MnemonicImport(CamelModel):
    """Schema for creating a mnemonic from an exported JSON document."""

    name: str
    folder_id: int | None = None
    data: str = Field(description='JSON text of the form {"commands": [...]}')

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        """Validate the mnemonic name format."""
        return validate_mnemonic_name(v)


class MnemonicCommands(CamelModel):
    """Commands of a stored mnemonic, read through the legacy-format migration."""

    commands: list[MnemonicCommand]

    @field_validator("commands", mode="before")
    @classmethod
    def upgrade_commands(cls, v: Any) -> list[Any]:
        """Convert legacy stored shapes to step-based commands."""
        return migrate_commands(v)


class MnemonicByName(MnemonicCommands):
    """What the CLI needs to run a mnemonic."""

    name: str


class MnemonicResponse(MnemonicByName):
    """Schema for mnemonic responses."""

    id: int
    user_id: int
    folder_id: int | None
    created_at: datetime
    updated_at: datetime
