"""Health check endpoints for production monitoring."""

from __future__ import annotations

import time

from fastapi import APIRouter, Request

from risk_register.repository import StoreUnavailable
from risk_register.schemas.health import ComponentHealth, HealthResponse

router = APIRouter(tags=["health"])


async def _check_component(name: str, check_fn) -> ComponentHealth:
    """Run a health check function and return a ComponentHealth result."""
    start = time.monotonic()
    try:
        await check_fn()
        latency = (time.monotonic() - start) * 1000
        return ComponentHealth(
            component=name,
            status="healthy",
            latency_ms=round(latency, 2),
        )
    except Exception as exc:
        latency = (time.monotonic() - start) * 1000
        return ComponentHealth(
            component=name,
            status="unhealthy",
            latency_ms=round(latency, 2),
            details=str(exc)[:200],
        )


async def _check_app() -> None:
    """Application self-check — always passes."""
    pass


async def _check_store(request: Request) -> ComponentHealth:
    repository = request.app.state.repository
    if isinstance(repository, StoreUnavailable):
        return ComponentHealth(component="store", status="unhealthy", details=repository.message)
    return await _check_component("store", repository.ping)


def _response(request: Request, components: list[ComponentHealth], failed: str) -> HealthResponse:
    settings = request.app.state.settings
    overall = "healthy" if all(c.status == "healthy" for c in components) else failed
    return HealthResponse(
        status=overall,
        version=settings.app_version,
        environment=settings.environment,
        storage_backend=settings.storage_backend,
        components=components,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Basic health check — is the application running?"""
    components = [await _check_component("app", _check_app)]
    return _response(request, components, failed="degraded")


@router.get("/health/ready", response_model=HealthResponse)
async def readiness_check(request: Request) -> HealthResponse:
    """Readiness check — can the store be reached?"""
    components = [
        await _check_component("app", _check_app),
        await _check_store(request),
    ]
    return _response(request, components, failed="unhealthy")


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """Liveness probe — is the process alive?"""
    return {"status": "alive"}
