"""In-memory data store for the Risk Register.

Used during development and testing. Records live for the lifetime of
the process only.
"""

from __future__ import annotations

import uuid
from typing import Any

from risk_register.models.base import utcnow
from risk_register.repository import RiskRepository, normalize_risk_row


class InMemoryRepository(RiskRepository):
    """Dict-backed repository for development and testing."""

    def __init__(self) -> None:
        self.companies: dict[str, dict[str, Any]] = {}
        self.risks: dict[str, dict[str, Any]] = {}  # risk_id -> record

    def reset(self) -> None:
        """Clear all data — used in tests."""
        self.__init__()

    async def list_companies(self) -> list[dict[str, Any]]:
        return sorted((dict(c) for c in self.companies.values()), key=lambda c: c["name"])

    async def get_company(self, company_id: str) -> dict[str, Any] | None:
        company = self.companies.get(company_id)
        return dict(company) if company else None

    async def create_company(self, name: str) -> dict[str, Any]:
        company = {"id": str(uuid.uuid4()), "name": name, "created_at": utcnow()}
        self.companies[company["id"]] = company
        return dict(company)

    async def list_risks(self, company_id: str) -> list[dict[str, Any]]:
        records = [dict(r) for r in self.risks.values() if r["company_id"] == company_id]
        return sorted(records, key=lambda r: r["created_at"], reverse=True)

    async def get_risk(self, risk_id: str) -> dict[str, Any] | None:
        record = self.risks.get(risk_id)
        return dict(record) if record else None

    async def create_risk(self, company_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        now = utcnow()
        record = normalize_risk_row({
            **fields,
            "id": str(uuid.uuid4()),
            "company_id": company_id,
            "created_at": now,
            "updated_at": now,
        })
        self.risks[record["id"]] = record
        return dict(record)

    async def update_risk(self, risk_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        existing = self.risks.get(risk_id)
        if existing is None:
            return None
        record = normalize_risk_row({
            **existing,
            **fields,
            "id": existing["id"],
            "company_id": existing["company_id"],
            "created_at": existing["created_at"],
            "updated_at": utcnow(),
        })
        self.risks[risk_id] = record
        return dict(record)

    async def delete_risk(self, risk_id: str) -> bool:
        return self.risks.pop(risk_id, None) is not None

    async def ping(self) -> None:
        return None
