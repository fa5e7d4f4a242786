"""ORM model for server-side login sessions."""

from sqlalchemy import Column, DateTime, ForeignKey, String, func

from app.models.base import Base, new_id, utcnow


class UserSession(Base):
    """
    One row per signed-in browser. The cookie carries a signed reference to
    token; deleting the row revokes the cookie.
    """

    __tablename__ = "session"

    id = Column(String(36), primary_key=True, default=new_id)
    token = Column(String(128), nullable=False, unique=True, index=True)
    user_id = Column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime(timezone=True), nullable=False)
    ip_address = Column(String(255), nullable=True)
    user_agent = Column(String(1024), nullable=True)
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
