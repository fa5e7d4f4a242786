"""ORM models for download blueprints and their ordered install commands."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from app.models.base import Base, new_id, utcnow

PROVIDERS = ("winget", "chocolatey", "custom")
INSTALL_TYPES = ("single", "multi")


class Download(Base):
    """
    Installer metadata consumed by the desktop client.

    Image fields hold either a URL or an inline data URL; they are opaque here.
    """

    __tablename__ = "download"

    id = Column(String(36), primary_key=True, default=new_id)
    display_name = Column(String(200), nullable=False)
    package_id = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    provider = Column(String(32), nullable=False, index=True)
    install_type = Column(String(32), nullable=False, default="single")
    card_artwork = Column(Text, nullable=True)
    icon = Column(Text, nullable=True)
    preview_image = Column(Text, nullable=True)
    script_path = Column(String(500), nullable=True)
    script_content = Column(Text, nullable=True)
    is_interactive = Column(Boolean, nullable=False, default=False)
    created_by_id = Column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )


class DownloadCommand(Base):
    """A single shell command; sort_order defines execution sequence."""

    __tablename__ = "download_command"

    id = Column(String(36), primary_key=True, default=new_id)
    download_id = Column(
        String(36),
        ForeignKey("download.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    command = Column(Text, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
