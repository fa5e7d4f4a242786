"""ORM models for users and their credential accounts."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, func
from app.models.base import Base, new_id, utcnow

ROLE_ADMIN = "admin"
ROLE_USER = "user"


class User(Base):
    """
    Console user for session authentication and role-based access control.

    role: 'admin' or 'user'. At least one admin must remain once the system
    is initialized; that rule is enforced by the API layer, not the schema.
    """

    __tablename__ = "user"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    image = Column(Text, nullable=True)
    role = Column(String(32), nullable=False, default=ROLE_USER, index=True)
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


class Account(Base):
    """
    Credential record owned by the auth service.

    provider_id is 'credential' for email/password sign-in.
    """

    __tablename__ = "account"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    account_id = Column(String(255), nullable=False)
    provider_id = Column(String(64), nullable=False, default="credential")
    password_hash = Column(String(255), nullable=True)
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
