"""Request/response schemas for auth endpoints and the resolved session."""

from datetime import datetime
from typing import Literal

from pydantic import EmailStr, Field

from app.core.security import PasswordStr
from app.schemas.common import ApiModel

Role = Literal["admin", "user"]


class InitRequest(ApiModel):
    """First admin account."""

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr
    password: PasswordStr


class SignInRequest(ApiModel):
    """Credentials for sign-in."""

    email: EmailStr
    password: str = Field(..., min_length=1, description="Password")


class SessionUser(ApiModel):
    """User as seen through a resolved session."""

    id: str
    name: str
    email: str
    email_verified: bool = False
    image: str | None = None
    role: Role
    created_at: datetime
    updated_at: datetime


class SessionInfo(ApiModel):
    id: str
    user_id: str
    expires_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime
    updated_at: datetime


class AuthSession(ApiModel):
    """Authenticated identity attached to a request by the auth gates."""

    user: SessionUser
    session: SessionInfo


class InitUser(ApiModel):
    id: str
    name: str
    email: str
    role: Role


class InitResponse(ApiModel):
    success: bool = True
    message: str
    user: InitUser


class PublicSessionUser(ApiModel):
    id: str
    name: str
    email: str
    role: Role
    image: str | None = None


class SignInResponse(ApiModel):
    """Signed session token is also set as an HttpOnly cookie."""

    user: PublicSessionUser
    token: str
    expires_at: datetime


class SessionResponse(ApiModel):
    authenticated: bool
    user: PublicSessionUser | None = None
