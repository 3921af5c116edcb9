"""Schemas for health check endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class ComponentHealth(BaseModel):
    """Health of the application or its store."""

    component: str
    status: str
    latency_ms: float | None = None
    details: str | None = None


class HealthResponse(BaseModel):
    """Overall application health."""

    status: str
    version: str
    environment: str
    storage_backend: str
    components: list[ComponentHealth]
