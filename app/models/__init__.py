"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.download import Download, DownloadCommand
from app.models.session import UserSession
from app.models.user import Account, User

__all__ = ["Account", "Base", "Download", "DownloadCommand", "User", "UserSession"]
