"""Request dependencies shared by the routers."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

import structlog
from fastapi import HTTPException, Request

from risk_register.repository import PersistenceError, RiskRepository, StoreUnavailable

logger = structlog.get_logger()


def get_repository(request: Request) -> RiskRepository:
    """Return the app's repository, or fail with 503 if the store is not configured."""
    repository = request.app.state.repository
    if isinstance(repository, StoreUnavailable):
        logger.warning("store_unavailable", reason=repository.reason, path=request.url.path)
        raise HTTPException(status_code=503, detail=repository.message)
    return repository


@contextmanager
def persistence_errors(event: str, message: str, **context: Any) -> Iterator[None]:
    """Log a store failure and turn it into a 502 with a generic message."""
    try:
        yield
    except PersistenceError as exc:
        logger.error(event, error=str(exc), **context)
        raise HTTPException(status_code=502, detail=message) from exc
