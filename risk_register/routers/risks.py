"""Endpoints for a single risk assessment — details, edit, delete."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response

from risk_register.dependencies import get_repository, persistence_errors
from risk_register.repository import RiskRepository
from risk_register.schemas.risk import RiskDetailResponse, RiskInput, RiskResponse
from risk_register.services.risk_scoring import (
    format_risk_score,
    get_label_severity,
    get_risk_label,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/risks", tags=["risks"])


def _derived(record: dict[str, Any]) -> dict[str, Any]:
    label = get_risk_label(record["risk_score"])
    return {
        **record,
        "formatted_score": format_risk_score(record["risk_score"]),
        "risk_label": label,
        "severity": get_label_severity(label),
    }


def to_risk_response(record: dict[str, Any]) -> RiskResponse:
    """Build a response from a record, adding its label and severity."""
    return RiskResponse(**_derived(record))


async def _require_risk(repository: RiskRepository, risk_id: str) -> dict[str, Any]:
    with persistence_errors(
        "risk_fetch_failed",
        "Failed to fetch risk assessment. Please try again later.",
        risk_id=risk_id,
    ):
        record = await repository.get_risk(risk_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Risk assessment '{risk_id}' not found")
    return record


@router.get("/{risk_id}", response_model=RiskDetailResponse)
async def get_risk(
    risk_id: str,
    repository: RiskRepository = Depends(get_repository),
) -> RiskDetailResponse:
    """Get the full details of a risk assessment."""
    record = await _require_risk(repository, risk_id)

    with persistence_errors(
        "company_fetch_failed",
        "Failed to fetch risk assessment. Please try again later.",
        company_id=record["company_id"],
    ):
        company = await repository.get_company(record["company_id"])

    return RiskDetailResponse(
        **_derived(record),
        company_name=company["name"] if company else None,
    )


@router.put("/{risk_id}", response_model=RiskResponse)
async def update_risk(
    risk_id: str,
    request: RiskInput,
    repository: RiskRepository = Depends(get_repository),
) -> RiskResponse:
    """Replace the editable fields of a risk; the score is recomputed."""
    with persistence_errors(
        "risk_update_failed",
        "Failed to save risk assessment. Please try again later.",
        risk_id=risk_id,
    ):
        record = await repository.update_risk(risk_id, request.to_fields())

    if record is None:
        raise HTTPException(status_code=404, detail=f"Risk assessment '{risk_id}' not found")

    logger.info("risk_updated", risk_id=risk_id, risk_score=record["risk_score"])
    return to_risk_response(record)


@router.delete("/{risk_id}", status_code=204)
async def delete_risk(
    risk_id: str,
    repository: RiskRepository = Depends(get_repository),
) -> Response:
    """Permanently delete a risk assessment."""
    with persistence_errors(
        "risk_delete_failed",
        "Failed to delete risk assessment. Please try again later.",
        risk_id=risk_id,
    ):
        deleted = await repository.delete_risk(risk_id)

    if not deleted:
        raise HTTPException(status_code=404, detail=f"Risk assessment '{risk_id}' not found")

    logger.info("risk_deleted", risk_id=risk_id)
    return Response(status_code=204)
