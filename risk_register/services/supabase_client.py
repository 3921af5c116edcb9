"""Client for a hosted PostgREST (Supabase) database."""

from __future__ import annotations

from typing import Any

import httpx

from risk_register.models.base import utcnow
from risk_register.repository import (
    PersistenceError,
    RiskRepository,
    normalize_company_row,
    normalize_risk_row,
    to_stored_row,
)


class SupabaseClientError(PersistenceError):
    """Raised when the hosted database API returns an error."""


class SupabaseClient:
    """HTTP client for the PostgREST row API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> list[dict[str, Any]]:
        """Send a request for a table and return the affected rows."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    f"{self.base_url}/rest/v1/{table}",
                    params=params,
                    json=json,
                    headers=self._headers(prefer),
                )
        except httpx.HTTPError as exc:
            raise SupabaseClientError(f"{method} {table} failed: {exc}") from exc

        if response.status_code >= 400:
            raise SupabaseClientError(
                f"{method} {table} failed: {response.status_code} {response.text}"
            )
        if response.status_code == 204 or not response.content:
            return []
        return response.json()

    async def select(
        self,
        table: str,
        filters: dict[str, str] | None = None,
        order: str | None = None,
    ) -> list[dict[str, Any]]:
        """Select rows matching equality filters."""
        params = {"select": "*"}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if order:
            params["order"] = order
        return await self._request("GET", table, params=params)

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a row and return it as stored."""
        rows = await self._request("POST", table, json=[row], prefer="return=representation")
        if not rows:
            raise SupabaseClientError(f"POST {table} returned no row")
        return rows[0]

    async def update(self, table: str, row_id: str, values: dict[str, Any]) -> dict[str, Any] | None:
        """Update a row by id; None if no row matched."""
        rows = await self._request(
            "PATCH",
            table,
            params={"id": f"eq.{row_id}"},
            json=values,
            prefer="return=representation",
        )
        return rows[0] if rows else None

    async def delete(self, table: str, row_id: str) -> bool:
        """Delete a row by id; False if no row matched."""
        rows = await self._request(
            "DELETE",
            table,
            params={"id": f"eq.{row_id}"},
            prefer="return=representation",
        )
        return bool(rows)


class SupabaseRepository(RiskRepository):
    """Repository over the hosted ``companies`` and ``risk_assessments`` tables."""

    def __init__(self, client: SupabaseClient) -> None:
        self.client = client

    async def list_companies(self) -> list[dict[str, Any]]:
        rows = await self.client.select("companies", order="name.asc")
        return [normalize_company_row(r) for r in rows]

    async def get_company(self, company_id: str) -> dict[str, Any] | None:
        rows = await self.client.select("companies", filters={"id": company_id})
        return normalize_company_row(rows[0]) if rows else None

    async def create_company(self, name: str) -> dict[str, Any]:
        row = await self.client.insert("companies", {"name": name})
        return normalize_company_row(row)

    async def list_risks(self, company_id: str) -> list[dict[str, Any]]:
        rows = await self.client.select(
            "risk_assessments",
            filters={"company_id": company_id},
            order="created_at.desc",
        )
        return [normalize_risk_row(r) for r in rows]

    async def get_risk(self, risk_id: str) -> dict[str, Any] | None:
        rows = await self.client.select("risk_assessments", filters={"id": risk_id})
        return normalize_risk_row(rows[0]) if rows else None

    async def create_risk(self, company_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        now = utcnow()
        row = to_stored_row({**fields, "company_id": company_id, "created_at": now, "updated_at": now})
        return normalize_risk_row(await self.client.insert("risk_assessments", row))

    async def update_risk(self, risk_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        row = await self.client.update(
            "risk_assessments",
            risk_id,
            to_stored_row({**fields, "updated_at": utcnow()}),
        )
        return normalize_risk_row(row) if row else None

    async def delete_risk(self, risk_id: str) -> bool:
        return await self.client.delete("risk_assessments", risk_id)

    async def ping(self) -> None:
        await self.client.select("companies", filters={"id": "00000000-0000-0000-0000-000000000000"})
