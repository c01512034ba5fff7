"""User model for storing signed-in users."""
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.api_token import ApiToken
    from models.folder import Folder
    from models.mnemonic import Mnemonic


class User(Base, TimestampMixin):
    """User model - created or refreshed by the sign-in flow, keyed by email."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    provider: Mapped[str] = mapped_column(
        String(50),
        comment="Identity provider that signed the user in, e.g. 'google'",
    )
    provider_id: Mapped[str] = mapped_column(
        String(255),
        comment="Subject identifier issued by the provider",
    )

    folders: Mapped[list["Folder"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
    mnemonics: Mapped[list["Mnemonic"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
    api_tokens: Mapped[list["ApiToken"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
