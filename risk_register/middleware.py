"""Application middleware — rate limiting, CORS, request logging, lifespan."""

from __future__ import annotations

import logging
import re
import time
import uuid
from collections.abc import Callable, Iterable
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from risk_register.config import Settings
from risk_register.repository import StoreUnavailable

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

# /api/companies/{company_id}/... and /api/risks/{risk_id}
_SUBJECT_PATH = re.compile(r"^/api/(?P<kind>companies|risks)/(?P<subject>[^/]+)")
_SUBJECT_KEYS = {"companies": "company_id", "risks": "risk_id"}


def get_limiter(settings: Settings) -> Limiter:
    """Per-client limiter applying the configured default limit to every API route."""
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit_default],
        enabled=settings.rate_limit_enabled,
    )


def configure_cors(app: FastAPI, settings: Settings) -> None:
    """Let the configured front-end origins call the API and read export headers."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", REQUEST_ID_HEADER],
    )


def configure_rate_limiting(
    app: FastAPI,
    settings: Settings,
    exempt: Iterable[Callable[..., Any]] = (),
) -> Limiter:
    """Enforce the default limit on every route except the given endpoints.

    Health probes are passed in as ``exempt`` so orchestrators polling them
    never eat into a client's budget.
    """
    limiter = get_limiter(settings)
    for endpoint in exempt:
        limiter.exempt(endpoint)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    return limiter


def request_context(path: str) -> dict[str, str]:
    """Return the company or risk a request path is about, if any."""
    match = _SUBJECT_PATH.match(path)
    if match is None:
        return {}
    return {_SUBJECT_KEYS[match.group("kind")]: match.group("subject")}


async def logging_middleware(request: Request, call_next) -> Response:
    """Bind request id and subject to the log context, then log the request.

    Anything logged while handling the request, such as a persistence
    failure, carries the same ``request_id`` and ``company_id``/``risk_id``.
    """
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        **request_context(request.url.path),
    )

    start_time = time.monotonic()
    response = await call_next(request)
    duration_ms = round((time.monotonic() - start_time) * 1000, 2)

    logger.info(
        "http_request",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=duration_ms,
    )
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


def configure_structured_logging(settings: Settings) -> None:
    """Configure structlog for JSON or console output, tagged with the service name."""
    logging.basicConfig(format="%(message)s", level=settings.log_level.upper())
    # Requests are logged by logging_middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    def add_service(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", settings.app_name)
        event_dict.setdefault("storage_backend", settings.storage_backend)
        return event_dict

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_service,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown handlers."""
    settings = app.state.settings
    configure_structured_logging(settings)

    repository = app.state.repository
    if isinstance(repository, StoreUnavailable):
        logger.warning("store_unavailable", reason=repository.reason)

    logger.info(
        "application_starting",
        version=settings.app_version,
        environment=settings.environment,
        storage_backend=settings.storage_backend,
    )

    yield

    logger.info("application_shutting_down")
    if not isinstance(repository, StoreUnavailable):
        await repository.close()
