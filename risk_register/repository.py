"""Persistence boundary for companies and risk assessments.

Every backend speaks canonical snake_case dicts to the rest of the
application. Rows coming back from a store go through
:func:`normalize_risk_row`, which also absorbs the historical camelCase
field names and the ``risk_level`` column that holds the score.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from risk_register.config import Settings

# Fields a client may edit; risk_score is derived, never supplied
EDITABLE_RISK_FIELDS = [
    "asset",
    "threat",
    "vulnerability",
    "impact",
    "likelihood",
    "existing_controls",
    "treatment_plan",
    "owner",
    "priority",
    "category",
    "control_effectiveness",
]

RISK_FIELDS = ["id", "company_id", *EDITABLE_RISK_FIELDS, "risk_score", "created_at", "updated_at"]

OPTIONAL_TEXT_FIELDS = [
    "existing_controls",
    "treatment_plan",
    "owner",
    "priority",
    "category",
    "control_effectiveness",
]

FIELD_ALIASES = {
    "companyId": "company_id",
    "riskScore": "risk_score",
    "riskLevel": "risk_score",
    "risk_level": "risk_score",
    "existingControls": "existing_controls",
    "treatmentPlan": "treatment_plan",
    "controlEffectiveness": "control_effectiveness",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

# Column that stores the score in the hosted schema
STORED_SCORE_COLUMN = "risk_level"


class PersistenceError(Exception):
    """Raised when a read or write against the store fails."""


@dataclass(frozen=True)
class StoreUnavailable:
    """The store cannot be used with the current configuration."""

    reason: str

    @property
    def message(self) -> str:
        return f"Database connection is not available. {self.reason}"


def _parse_timestamp(value: Any) -> Any:
    if isinstance(value, str) and value:
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    # SQLite hands back naive datetimes; everything is stored as UTC
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def normalize_risk_row(row: dict[str, Any]) -> dict[str, Any]:
    """Convert a stored row into the canonical risk record dict."""
    record: dict[str, Any] = {}
    for key, value in row.items():
        record[FIELD_ALIASES.get(key, key)] = value

    for field in OPTIONAL_TEXT_FIELDS:
        if record.get(field) is None:
            record[field] = ""

    record["impact"] = int(record.get("impact") or 0)
    record["likelihood"] = int(record.get("likelihood") or 0)
    record["risk_score"] = float(record.get("risk_score") or 0.0)
    record["created_at"] = _parse_timestamp(record.get("created_at"))
    record["updated_at"] = _parse_timestamp(record.get("updated_at"))

    return {field: record.get(field) for field in RISK_FIELDS}


def normalize_company_row(row: dict[str, Any]) -> dict[str, Any]:
    """Convert a stored company row into the canonical company dict."""
    return {
        "id": str(row.get("id", "")),
        "name": row.get("name", ""),
        "created_at": _parse_timestamp(row.get("created_at") or row.get("createdAt")),
    }


def to_stored_row(fields: dict[str, Any]) -> dict[str, Any]:
    """Rename canonical fields to the hosted store's column names."""
    row = dict(fields)
    if "risk_score" in row:
        row[STORED_SCORE_COLUMN] = row.pop("risk_score")
    for key in ("created_at", "updated_at"):
        if isinstance(row.get(key), datetime):
            row[key] = row[key].isoformat()
    return row


class RiskRepository(ABC):
    """Row-oriented access to the ``companies`` and ``risk_assessments`` collections."""

    @abstractmethod
    async def list_companies(self) -> list[dict[str, Any]]:
        """Return all companies ordered by name."""

    @abstractmethod
    async def get_company(self, company_id: str) -> dict[str, Any] | None:
        """Return a company or None."""

    @abstractmethod
    async def create_company(self, name: str) -> dict[str, Any]:
        """Insert a company and return it."""

    @abstractmethod
    async def list_risks(self, company_id: str) -> list[dict[str, Any]]:
        """Return a company's risk records, newest first."""

    @abstractmethod
    async def get_risk(self, risk_id: str) -> dict[str, Any] | None:
        """Return a risk record or None."""

    @abstractmethod
    async def create_risk(self, company_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Insert a risk record for a company and return it."""

    @abstractmethod
    async def update_risk(self, risk_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        """Replace the editable fields of a risk record; None if it does not exist."""

    @abstractmethod
    async def delete_risk(self, risk_id: str) -> bool:
        """Delete a risk record; False if it did not exist."""

    @abstractmethod
    async def ping(self) -> None:
        """Raise PersistenceError if the store cannot be reached."""

    async def close(self) -> None:
        """Release any held resources."""


def build_repository(settings: Settings) -> RiskRepository | StoreUnavailable:
    """Construct the configured repository, or describe why it is unavailable."""
    if settings.storage_backend == "memory":
        from risk_register.store import InMemoryRepository

        return InMemoryRepository()

    if settings.storage_backend == "sql":
        if not settings.database_url:
            return StoreUnavailable("RISK_REGISTER_DATABASE_URL is missing")
        from risk_register.sql_store import SQLRepository

        return SQLRepository(settings.database_url)

    if not settings.supabase_url:
        return StoreUnavailable("RISK_REGISTER_SUPABASE_URL is missing")
    if not settings.supabase_anon_key:
        return StoreUnavailable("RISK_REGISTER_SUPABASE_ANON_KEY is missing")

    from risk_register.services.supabase_client import SupabaseClient, SupabaseRepository

    client = SupabaseClient(
        settings.supabase_url,
        settings.supabase_anon_key,
        timeout=settings.supabase_timeout,
    )
    return SupabaseRepository(client)
