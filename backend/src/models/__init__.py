"""SQLAlchemy models."""
from models.api_token import ApiToken
from models.base import Base, TimestampMixin
from models.folder import Folder
from models.mnemonic import Mnemonic
from models.user import User

__all__ = ["ApiToken", "Base", "Folder", "Mnemonic", "TimestampMixin", "User"]
