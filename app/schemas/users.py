"""Request/response schemas for user management endpoints."""

from datetime import datetime

from pydantic import EmailStr, Field

from app.core.security import PasswordStr
from app.schemas.auth import Role
from app.schemas.common import ApiModel

MAX_AVATAR_LEN = 500_000


class UserProfile(ApiModel):
    """User projection returned by every users endpoint (no credentials)."""

    id: str
    name: str
    email: str
    image: str | None = None
    role: Role
    created_at: datetime


class UserResponse(ApiModel):
    user: UserProfile


class UsersListResponse(ApiModel):
    """Response for GET /users (admin only)."""

    users: list[UserProfile]


class UpdateProfileRequest(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None


class ChangePasswordRequest(ApiModel):
    current_password: str = Field(..., min_length=1)
    new_password: PasswordStr


class UpdateAvatarRequest(ApiModel):
    """Data URL or external URL; null clears the avatar. No format checks."""

    image: str | None = Field(..., max_length=MAX_AVATAR_LEN)


class CreateUserRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: PasswordStr
    role: Role = "user"


class UpdateRoleRequest(ApiModel):
    role: Role
