"""Risk Register — FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from risk_register.config import Settings, get_settings
from risk_register.middleware import (
    configure_cors,
    configure_rate_limiting,
    lifespan,
    logging_middleware,
)
from risk_register.repository import RiskRepository, StoreUnavailable, build_repository
from risk_register.routers import companies, health, risks, scoring


def create_app(
    settings: Settings | None = None,
    repository: RiskRepository | StoreUnavailable | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = get_settings()
    if repository is None:
        repository = build_repository(settings)

    app = FastAPI(
        title=settings.app_name,
        description="ISO 27001 risk assessment register",
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.repository = repository

    # Middleware
    configure_cors(app, settings)
    configure_rate_limiting(
        app,
        settings,
        exempt=(health.health_check, health.readiness_check, health.liveness_check),
    )
    app.middleware("http")(logging_middleware)

    # Routers
    app.include_router(health.router)
    app.include_router(companies.router)
    app.include_router(risks.router)
    app.include_router(scoring.router)

    return app


# Default app instance for uvicorn
app = create_app()
