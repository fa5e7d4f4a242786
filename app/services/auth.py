"""
Credential and session service: sign-up, sign-in, sign-out, session lookup
and password change. Owns the account and session tables; the API layer
only consumes the results.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import (
    create_session_token,
    decode_session_token,
    generate_session_token,
    hash_password,
    verify_password,
)
from app.models import Account, User, UserSession
from app.models.user import ROLE_USER
from app.schemas.auth import AuthSession, SessionInfo, SessionUser

logger = logging.getLogger(__name__)

CREDENTIAL_PROVIDER = "credential"


class AuthServiceError(Exception):
    """Raised when a credential operation cannot be completed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


@dataclass
class SignInResult:
    user: User
    session: UserSession
    cookie_token: str


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _session_lifetime() -> timedelta:
    return timedelta(days=settings.SESSION_EXPIRE_DAYS)


def sign_up_email(db: Session, name: str, email: str, password: str) -> User:
    """
    Create a user with the default role plus its credential account.

    Callers that need an admin promote the user afterwards.
    """
    user = User(name=name, email=email, role=ROLE_USER)
    db.add(user)
    try:
        db.flush()
        db.add(
            Account(
                user_id=user.id,
                account_id=user.id,
                provider_id=CREDENTIAL_PROVIDER,
                password_hash=hash_password(password),
            )
        )
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise AuthServiceError("User already exists") from e
    db.refresh(user)
    logger.info("User signed up", extra={"user_id": user.id})
    return user


def sign_in_email(
    db: Session,
    email: str,
    password: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SignInResult:
    """Verify credentials and open a new session. Raises AuthServiceError on mismatch."""
    user = db.scalar(select(User).where(User.email == email))
    account = None
    if user is not None:
        account = db.scalar(
            select(Account).where(
                Account.user_id == user.id,
                Account.provider_id == CREDENTIAL_PROVIDER,
            )
        )
    if user is None or account is None or not account.password_hash:
        raise AuthServiceError("Invalid email or password")
    if not verify_password(password, account.password_hash):
        raise AuthServiceError("Invalid email or password")

    expires_at = datetime.now(UTC) + _session_lifetime()
    row = UserSession(
        token=generate_session_token(),
        user_id=user.id,
        expires_at=expires_at,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:1024] or None,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    cookie_token = create_session_token(row.token, user.id, expires_at)
    return SignInResult(user=user, session=row, cookie_token=cookie_token)


def get_session(db: Session, raw_token: str | None) -> AuthSession | None:
    """
    Resolve a signed cookie/bearer value to the session and its user.

    Returns None for missing, forged, expired or revoked tokens. Sessions
    older than SESSION_UPDATE_AGE_HOURS get a fresh expiry.
    """
    if not raw_token:
        return None
    try:
        payload = decode_session_token(raw_token)
    except jwt.PyJWTError:
        return None
    sid = payload.get("sid")
    if not sid:
        return None

    now = datetime.now(UTC)
    row = db.scalar(
        select(UserSession).where(
            UserSession.token == sid,
            UserSession.expires_at > now,
        )
    )
    if row is None:
        return None
    user = db.get(User, row.user_id)
    if user is None:
        return None

    refresh_after = _session_lifetime() - timedelta(hours=settings.SESSION_UPDATE_AGE_HOURS)
    if _as_utc(row.expires_at) - now < refresh_after:
        row.expires_at = now + _session_lifetime()
        db.commit()
        db.refresh(row)

    return AuthSession(
        user=SessionUser.model_validate(user),
        session=SessionInfo.model_validate(row),
    )


def sign_out(db: Session, session_id: str) -> None:
    """Revoke a session; the signed cookie stops resolving immediately."""
    db.execute(delete(UserSession).where(UserSession.id == session_id))
    db.commit()


def change_password(
    db: Session, user_id: str, current_password: str, new_password: str
) -> None:
    """Replace the credential hash after verifying the current password."""
    account = db.scalar(
        select(Account).where(
            Account.user_id == user_id,
            Account.provider_id == CREDENTIAL_PROVIDER,
        )
    )
    if account is None or not account.password_hash:
        raise AuthServiceError("Credential account not found")
    if not verify_password(current_password, account.password_hash):
        raise AuthServiceError("Invalid password")
    account.password_hash = hash_password(new_password)
    db.commit()


def purge_expired_sessions(db: Session) -> int:
    """Delete sessions past their expiry. Idempotent: safe to run repeatedly."""
    now = datetime.now(UTC)
    result = db.execute(delete(UserSession).where(UserSession.expires_at <= now))
    db.commit()
    deleted = result.rowcount or 0
    if deleted > 0:
        logger.info("Expired sessions purged: cutoff=%s, deleted=%s", now.isoformat(), deleted)
    return deleted
