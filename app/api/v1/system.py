"""System endpoints: initialization status and health check."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import check_db_connected, get_db, is_system_initialized
from app.schemas.health import HealthResponse, SystemStatusResponse

router = APIRouter()


@router.get("/status", response_model=SystemStatusResponse)
def get_status(db: Session = Depends(get_db)) -> SystemStatusResponse:
    """Whether the system has users; the console shows the init form until it does."""
    return SystemStatusResponse(
        initialized=is_system_initialized(db),
        timestamp=datetime.now(UTC),
    )


@router.get("/health", response_model=HealthResponse)
def get_health(db: Session = Depends(get_db)) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        status="ok",
        timestamp=datetime.now(UTC),
        database=db_status,
    )
