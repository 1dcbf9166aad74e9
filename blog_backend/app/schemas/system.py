from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class HealthServices(BaseModel):
    database: Literal["connected", "disconnected", "not_configured"]
    environment: Literal["development", "production", "unknown"]


class HealthResponse(BaseModel):
    status: Literal["healthy", "degraded", "unhealthy"]
    timestamp: str
    services: HealthServices
    availability: str
    version: str


class UploadResponse(BaseModel):
    success: bool
    filename: str
    url: str
    originalName: str
    size: int
    mimetype: str
    storage: str
