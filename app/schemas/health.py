"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthcheckResponse(BaseModel):
    """Body of the root /healthcheck probe used for service discovery."""

    data: Literal["ok"] = "ok"


class HealthResponse(BaseModel):
    """Response body for the detailed health endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Database connectivity status when check is performed",
    )
