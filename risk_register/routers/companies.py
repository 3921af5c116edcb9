"""Company endpoints and each company's risk register."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response

from risk_register.dependencies import get_repository, persistence_errors
from risk_register.repository import RiskRepository
from risk_register.routers.risks import to_risk_response
from risk_register.schemas.company import CompanyCreate, CompanyResponse
from risk_register.schemas.risk import RiskInput, RiskListResponse, RiskResponse
from risk_register.services.csv_export import export_csv, export_filename
from risk_register.services.risk_table import (
    ALL,
    DEFAULT_SORT_DIRECTION,
    DEFAULT_SORT_FIELD,
    query_records,
    sort_field,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/companies", tags=["companies"])


async def _require_company(repository: RiskRepository, company_id: str) -> dict[str, Any]:
    with persistence_errors(
        "company_fetch_failed",
        "Failed to fetch company. Please try again later.",
        company_id=company_id,
    ):
        company = await repository.get_company(company_id)
    if company is None:
        raise HTTPException(status_code=404, detail=f"Company '{company_id}' not found")
    return company


@router.get("", response_model=list[CompanyResponse])
async def list_companies(repository: RiskRepository = Depends(get_repository)) -> list[CompanyResponse]:
    """List all companies by name."""
    with persistence_errors("company_list_failed", "Failed to fetch companies. Please try again later."):
        companies = await repository.list_companies()
    return [CompanyResponse(**c) for c in companies]


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(
    request: CompanyCreate,
    repository: RiskRepository = Depends(get_repository),
) -> CompanyResponse:
    """Register a new company."""
    with persistence_errors("company_create_failed", "Failed to create company. Please try again later."):
        company = await repository.create_company(request.name)

    logger.info("company_created", company_id=company["id"])
    return CompanyResponse(**company)


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: str,
    repository: RiskRepository = Depends(get_repository),
) -> CompanyResponse:
    """Get a single company."""
    return CompanyResponse(**await _require_company(repository, company_id))


@router.get("/{company_id}/risks", response_model=RiskListResponse)
async def list_company_risks(
    company_id: str,
    search: str = Query(default="", max_length=200),
    category: str = Query(default=ALL),
    level: str = Query(default=ALL),
    sort: str = Query(default=DEFAULT_SORT_FIELD),
    direction: str = Query(default=DEFAULT_SORT_DIRECTION, pattern=r"^(asc|desc)$"),
    repository: RiskRepository = Depends(get_repository),
) -> RiskListResponse:
    """List a company's risks, filtered by search/category/level, then sorted."""
    await _require_company(repository, company_id)

    with persistence_errors(
        "risk_list_failed",
        "Failed to fetch risk assessments. Please try again later.",
        company_id=company_id,
    ):
        records = await repository.list_risks(company_id)

    try:
        records = query_records(records, search, category, level, sort, direction)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return RiskListResponse(
        company_id=company_id,
        total=len(records),
        sort=sort_field(sort),
        direction=direction,
        risks=[to_risk_response(r) for r in records],
    )


@router.post("/{company_id}/risks", response_model=RiskResponse, status_code=201)
async def create_company_risk(
    company_id: str,
    request: RiskInput,
    repository: RiskRepository = Depends(get_repository),
) -> RiskResponse:
    """Add a risk assessment to a company's register."""
    await _require_company(repository, company_id)

    with persistence_errors(
        "risk_create_failed",
        "Failed to save risk assessment. Please try again later.",
        company_id=company_id,
    ):
        record = await repository.create_risk(company_id, request.to_fields())

    logger.info("risk_created", company_id=company_id, risk_id=record["id"], risk_score=record["risk_score"])
    return to_risk_response(record)


@router.get("/{company_id}/risks/export")
async def export_company_risks(
    company_id: str,
    repository: RiskRepository = Depends(get_repository),
) -> Response:
    """Download every risk of the company as CSV."""
    await _require_company(repository, company_id)

    with persistence_errors(
        "risk_export_failed",
        "Failed to export risk assessments. Please try again later.",
        company_id=company_id,
    ):
        records = await repository.list_risks(company_id)

    return Response(
        content=export_csv(records),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )
