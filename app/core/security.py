"""Password hashing, password policy and signed session-cookie tokens."""

import re
import secrets
from datetime import UTC, datetime
from typing import Annotated, Any

import bcrypt
import jwt
from pydantic import AfterValidator, Field
from pydantic_core import PydanticCustomError

from app.core.config import settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
PASSWORD_POLICY_MESSAGE = (
    "Password must contain at least one uppercase letter, one lowercase letter, and one number"
)


def is_strong_password(password: str) -> bool:
    """Length 8-128 with at least one lowercase, one uppercase and one digit."""
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        return False
    return PASSWORD_PATTERN.match(password) is not None


def check_password_strength(password: str) -> str:
    """Pydantic after-validator; length bounds are enforced by the Field."""
    if PASSWORD_PATTERN.match(password) is None:
        raise PydanticCustomError("password_strength", PASSWORD_POLICY_MESSAGE)
    return password


PasswordStr = Annotated[
    str,
    Field(min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN),
    AfterValidator(check_password_strength),
]


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def generate_session_token() -> str:
    """Random opaque value stored on the session row."""
    return secrets.token_urlsafe(32)


def create_session_token(session_token: str, user_id: str, expires_at: datetime) -> str:
    """Sign the cookie value: session token (sid), user id (sub) and exp."""
    payload: dict[str, Any] = {
        "sid": session_token,
        "sub": user_id,
        "exp": expires_at,
        "iat": datetime.now(UTC),
    }
    return jwt.encode(
        payload,
        settings.SESSION_SECRET.get_secret_value(),
        algorithm=settings.SESSION_ALGORITHM,
    )


def decode_session_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a signed session cookie; return payload (sid, sub, exp, iat).
    Raises jwt.PyJWTError on invalid or expired token.
    """
    return jwt.decode(
        token,
        settings.SESSION_SECRET.get_secret_value(),
        algorithms=[settings.SESSION_ALGORITHM],
    )
