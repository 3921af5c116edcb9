"""Schemas for company endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class CompanyCreate(BaseModel):
    """Request to register a company."""

    name: str = Field(..., max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Company name cannot be empty")
        return value


class CompanyResponse(BaseModel):
    """A company."""

    id: str
    name: str
    created_at: datetime | None = None
