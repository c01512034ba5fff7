"""Mnemonic model: a named, ordered list of shell commands with scripted input."""
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.folder import Folder
    from models.user import User


class Mnemonic(Base, TimestampMixin):
    """
    A mnemonic is owned by a user and optionally filed in one of their folders.

    `commands` holds a list of {"command": str, "inputs": [InputStep, ...]}.
    Rows written before the step-based format may still hold plain strings or
    string inputs; read them through `schemas.command_formats.migrate_commands`.
    """

    __tablename__ = "mnemonics"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_mnemonic_user_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    # Nullable: mnemonics created from the CLI may be unfiled
    folder_id: Mapped[int | None] = mapped_column(
        ForeignKey("folders.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(50))
    commands: Mapped[list[Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
    )

    user: Mapped["User"] = relationship(back_populates="mnemonics")
    folder: Mapped["Folder | None"] = relationship(back_populates="mnemonics")
