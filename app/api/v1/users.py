"""User endpoints: own profile (any signed-in user) and user management (admin)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_session, require_admin
from app.core.database import get_db
from app.core.errors import (
    BadRequestError,
    ConflictError,
    InvariantViolationError,
    NotFoundError,
    UpstreamError,
)
from app.models import Account, User
from app.models.user import ROLE_ADMIN, ROLE_USER
from app.schemas.auth import AuthSession
from app.schemas.common import SuccessResponse
from app.schemas.users import (
    ChangePasswordRequest,
    CreateUserRequest,
    UpdateAvatarRequest,
    UpdateProfileRequest,
    UpdateRoleRequest,
    UserProfile,
    UserResponse,
    UsersListResponse,
)
from app.services import auth as auth_service
from app.services.admin_guard import ensure_admin_remains
from app.services.auth import AuthServiceError

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_user_or_404(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _profile(user: User) -> UserResponse:
    return UserResponse(user=UserProfile.model_validate(user))


@router.get("/me", response_model=UserResponse)
def get_me(
    session: Annotated[AuthSession, Depends(get_current_session)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Caller's own profile. 404 if the account was deleted after the session resolved."""
    return _profile(_get_user_or_404(db, session.user.id))


@router.put("/me", response_model=UserResponse)
def update_me(
    body: UpdateProfileRequest,
    session: Annotated[AuthSession, Depends(get_current_session)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Update own name and/or email. Email must not belong to another user."""
    if body.name is None and body.email is None:
        raise BadRequestError("No fields to update")

    if body.email is not None:
        taken = db.scalar(
            select(User.id).where(User.email == body.email, User.id != session.user.id)
        )
        if taken is not None:
            raise ConflictError("Email already in use")

    user = _get_user_or_404(db, session.user.id)
    if body.name is not None:
        user.name = body.name
    if body.email is not None:
        user.email = body.email
    db.commit()
    db.refresh(user)
    return _profile(user)


@router.put("/me/password", response_model=SuccessResponse)
def change_my_password(
    body: ChangePasswordRequest,
    session: Annotated[AuthSession, Depends(get_current_session)],
    db: Annotated[Session, Depends(get_db)],
) -> SuccessResponse:
    """Change own password; any failure is reported as an incorrect current password."""
    try:
        auth_service.change_password(
            db, session.user.id, body.current_password, body.new_password
        )
    except AuthServiceError as e:
        logger.warning(
            "Password change rejected",
            extra={"user_id": session.user.id, "reason": e.message},
        )
        raise BadRequestError("Current password is incorrect") from e
    return SuccessResponse(message="Password changed successfully")


@router.post("/me/avatar", response_model=UserResponse)
def update_my_avatar(
    body: UpdateAvatarRequest,
    session: Annotated[AuthSession, Depends(get_current_session)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Set or clear (null) the avatar image."""
    user = _get_user_or_404(db, session.user.id)
    user.image = body.image
    db.commit()
    db.refresh(user)
    return _profile(user)


@router.get("", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[AuthSession, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all users, oldest first (admin only)."""
    users = db.scalars(select(User).order_by(User.created_at)).all()
    return UsersListResponse(users=[UserProfile.model_validate(u) for u in users])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    body: CreateUserRequest,
    _admin: Annotated[AuthSession, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Create a user (admin only). Sign-up always creates role 'user'; admins are promoted after."""
    existing = db.scalar(select(User.id).where(User.email == body.email))
    if existing is not None:
        raise ConflictError("Email already in use")

    try:
        user = auth_service.sign_up_email(db, body.name, body.email, body.password)
    except AuthServiceError as e:
        raise UpstreamError("Failed to create user") from e
    if user is None:
        raise UpstreamError("Failed to create user")

    if body.role == ROLE_ADMIN:
        user.role = ROLE_ADMIN
        db.commit()
        db.refresh(user)
    logger.info("User created", extra={"user_id": user.id, "role": user.role})
    return _profile(user)


@router.delete("/{user_id}", response_model=SuccessResponse)
def delete_user(
    user_id: str,
    admin: Annotated[AuthSession, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> SuccessResponse:
    """
    Delete a user (admin only).
    Cannot delete self or the last admin.
    """
    if user_id == admin.user.id:
        raise InvariantViolationError("You cannot delete yourself")

    target = _get_user_or_404(db, user_id)
    if target.role == ROLE_ADMIN:
        ensure_admin_remains(db, "delete")

    db.execute(delete(Account).where(Account.user_id == user_id))
    db.execute(delete(User).where(User.id == user_id))
    db.commit()
    logger.info("User deleted", extra={"user_id": user_id, "deleted_by": admin.user.id})
    return SuccessResponse(message="User deleted successfully")


@router.put("/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: str,
    body: UpdateRoleRequest,
    admin: Annotated[AuthSession, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Change a user's role (admin only). The last admin cannot be demoted."""
    target = _get_user_or_404(db, user_id)
    if target.role == ROLE_ADMIN and body.role == ROLE_USER:
        ensure_admin_remains(db, "demote")

    target.role = body.role
    db.commit()
    db.refresh(target)
    logger.info(
        "User role changed",
        extra={"user_id": user_id, "role": target.role, "changed_by": admin.user.id},
    )
    return _profile(target)
