"""Pydantic request/response schemas."""

from app.schemas.auth import AuthSession, InitRequest, SignInRequest
from app.schemas.common import ApiModel, ErrorResponse, SuccessResponse
from app.schemas.downloads import DownloadCreate, DownloadDetail, DownloadUpdate
from app.schemas.health import HealthResponse, SystemStatusResponse
from app.schemas.users import CreateUserRequest, UserProfile

__all__ = [
    "ApiModel",
    "AuthSession",
    "CreateUserRequest",
    "DownloadCreate",
    "DownloadDetail",
    "DownloadUpdate",
    "ErrorResponse",
    "HealthResponse",
    "InitRequest",
    "SignInRequest",
    "SuccessResponse",
    "SystemStatusResponse",
    "UserProfile",
]
