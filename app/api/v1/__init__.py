"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import auth, downloads, system, users
from app.schemas.common import ErrorResponse

# Documented on every protected router; validation failures use {error, details}
PROTECTED_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Authentication required"},
    403: {"model": ErrorResponse, "description": "Admin access required"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
}

router = APIRouter(responses={500: {"model": ErrorResponse, "description": "Internal error"}})
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(system.router, prefix="/system", tags=["system"])
router.include_router(
    users.router, prefix="/users", tags=["users"], responses=PROTECTED_RESPONSES
)
router.include_router(
    downloads.router, prefix="/downloads", tags=["downloads"], responses=PROTECTED_RESPONSES
)
