"""Sign-in/bootstrap endpoints and the session gates (optional, authenticated, admin)."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db, is_system_initialized
from app.core.errors import (
    AuthenticationError,
    AuthorizationError,
    RateLimitError,
    UpstreamError,
)
from app.core.rate_limit import RateLimiter, client_key
from app.models.user import ROLE_ADMIN, User
from app.schemas.auth import (
    AuthSession,
    InitRequest,
    InitResponse,
    InitUser,
    PublicSessionUser,
    SessionResponse,
    SignInRequest,
    SignInResponse,
)
from app.schemas.common import SuccessResponse
from app.services import auth as auth_service
from app.services.auth import AuthServiceError

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)


def _candidate_tokens(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> list[str]:
    """Session token candidates in lookup order: cookie, then Bearer."""
    tokens = []
    cookie = request.cookies.get(get_settings().SESSION_COOKIE_NAME)
    if cookie:
        tokens.append(cookie)
    if credentials is not None and credentials.credentials:
        tokens.append(credentials.credentials)
    return tokens


def get_optional_session(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> AuthSession | None:
    """Dependency: resolve the session if present; never rejects."""
    session = None
    for token in _candidate_tokens(request, credentials):
        session = auth_service.get_session(db, token)
        if session is not None:
            break
    request.state.session = session
    return session


def get_current_session(
    session: Annotated[AuthSession | None, Depends(get_optional_session)],
) -> AuthSession:
    """Dependency: require a valid session. Raises 401 if missing or invalid."""
    if session is None:
        raise AuthenticationError("Authentication required")
    return session


def require_admin(
    session: Annotated[AuthSession, Depends(get_current_session)],
) -> AuthSession:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    if session.user.role != ROLE_ADMIN:
        raise AuthorizationError("Admin access required")
    return session


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def rate_limited(
    action: str,
    attempts_setting: str,
    window_setting: str,
    message: str,
) -> Callable[..., None]:
    """Build a dependency that counts one attempt for action per client."""

    def dependency(
        request: Request,
        limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    ) -> None:
        settings = get_settings()
        client = client_key(request)
        allowed = limiter.allow(
            f"{action}:{client}",
            getattr(settings, attempts_setting),
            getattr(settings, window_setting) * 60,
        )
        if not allowed:
            logger.warning("Rate limit exceeded", extra={"action": action, "client": client})
            raise RateLimitError(message)

    return dependency


def require_uninitialized(db: Annotated[Session, Depends(get_db)]) -> None:
    if is_system_initialized(db):
        raise AuthorizationError("System is already initialized")


def _public_user(user: User) -> PublicSessionUser:
    return PublicSessionUser.model_validate(user)


@router.post(
    "/init",
    response_model=InitResponse,
    dependencies=[
        Depends(
            rate_limited(
                "init",
                "INIT_RATE_LIMIT_ATTEMPTS",
                "INIT_RATE_LIMIT_WINDOW_MINUTES",
                "Please try again later",
            )
        ),
        Depends(require_uninitialized),
    ],
)
def init_admin(
    body: InitRequest,
    db: Annotated[Session, Depends(get_db)],
) -> InitResponse:
    """Create the first admin account. Only allowed while no users exist."""
    try:
        user = auth_service.sign_up_email(db, body.name, body.email, body.password)
    except AuthServiceError as e:
        raise UpstreamError("Failed to create admin account") from e
    user.role = ROLE_ADMIN
    db.commit()
    logger.info("System initialized with first admin", extra={"user_id": user.id})
    return InitResponse(
        message="Admin account created successfully",
        user=InitUser(id=user.id, name=user.name, email=user.email, role=ROLE_ADMIN),
    )


@router.post(
    "/sign-in",
    response_model=SignInResponse,
    dependencies=[
        Depends(
            rate_limited(
                "signin",
                "SIGN_IN_RATE_LIMIT_ATTEMPTS",
                "SIGN_IN_RATE_LIMIT_WINDOW_MINUTES",
                "Please try again in 15 minutes",
            )
        )
    ],
)
def sign_in(
    body: SignInRequest,
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
) -> SignInResponse:
    """
    Authenticate with email and password; sets the HttpOnly session cookie.
    The same signed token is returned for clients that send it as a Bearer header.
    """
    try:
        result = auth_service.sign_in_email(
            db,
            body.email,
            body.password,
            ip_address=client_key(request),
            user_agent=request.headers.get("user-agent"),
        )
    except AuthServiceError as e:
        logger.warning("Sign-in failed", extra={"reason": e.message})
        raise AuthenticationError("Invalid credentials") from e

    settings = get_settings()
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=result.cookie_token,
        max_age=settings.SESSION_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.APP_ENV == "prod",
        samesite="strict",
        path="/",
    )
    return SignInResponse(
        user=_public_user(result.user),
        token=result.cookie_token,
        expires_at=result.session.expires_at,
    )


@router.post("/sign-out", response_model=SuccessResponse)
def sign_out(
    response: Response,
    session: Annotated[AuthSession, Depends(get_current_session)],
    db: Annotated[Session, Depends(get_db)],
) -> SuccessResponse:
    """Revoke the current session and clear the cookie."""
    try:
        auth_service.sign_out(db, session.session.id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Sign-out failed")
        raise UpstreamError("Failed to sign out") from e
    response.delete_cookie(get_settings().SESSION_COOKIE_NAME, path="/")
    return SuccessResponse(message="Signed out successfully")


@router.get("/session", response_model=SessionResponse)
def get_session_info(
    session: Annotated[AuthSession | None, Depends(get_optional_session)],
) -> SessionResponse:
    """Current session information; anonymous callers get authenticated=false."""
    if session is None:
        return SessionResponse(authenticated=False, user=None)
    return SessionResponse(
        authenticated=True,
        user=PublicSessionUser.model_validate(session.user.model_dump()),
    )
