"""Pydantic schemas for system status and health responses."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from app.schemas.common import ApiModel


class HealthResponse(ApiModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    timestamp: datetime
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Database connectivity status when check is performed",
    )


class SystemStatusResponse(ApiModel):
    """Whether the first admin has been created."""

    initialized: bool
    timestamp: datetime
