"""API token model for CLI Bearer authentication."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.user import User


class ApiToken(Base, TimestampMixin):
    """
    An issued CLI token.

    Only the encrypted form of the signed token is stored; the raw value is
    returned once at creation. Deleting the row revokes the token.
    """

    __tablename__ = "api_tokens"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255))
    token_id: Mapped[str] = mapped_column(
        String(64),
        index=True,
        comment="Random identifier embedded in the signed token as 'tokenId'",
    )
    hashed_token: Mapped[str] = mapped_column(Text, unique=True)
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    user: Mapped["User"] = relationship(back_populates="api_tokens")
