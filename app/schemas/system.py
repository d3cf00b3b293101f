"""Schemas for system maintenance endpoints."""

from pydantic import BaseModel, Field


class SeedResponse(BaseModel):
    result: str = "ok"
    created: bool = Field(..., description="False when the seed admin already existed")
