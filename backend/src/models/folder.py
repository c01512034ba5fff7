"""Folder model grouping a user's mnemonics."""
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.mnemonic import Mnemonic
    from models.user import User


class Folder(Base, TimestampMixin):
    """A named folder owned by exactly one user."""

    __tablename__ = "folders"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_folder_user_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255))

    user: Mapped["User"] = relationship(back_populates="folders")
    mnemonics: Mapped[list["Mnemonic"]] = relationship(
        back_populates="folder",
        passive_deletes=True,
    )
