"""Schemas for risk assessment endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from risk_register.constants import (
    CONTROL_EFFECTIVENESS,
    DEFAULT_IMPACT,
    DEFAULT_LIKELIHOOD,
    IMPACT_MAX,
    IMPACT_MIN,
    LIKELIHOOD_MAX,
    LIKELIHOOD_MIN,
    PRIORITIES,
)
from risk_register.services.risk_scoring import calculate_risk_score


class RiskInput(BaseModel):
    """Editable fields of a risk assessment, for create and update.

    Accepts snake_case or camelCase keys. Any risk score sent by the client
    is ignored; the score is always derived from impact and likelihood.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    asset: str = Field(..., max_length=500)
    threat: str = Field(..., max_length=500)
    vulnerability: str
    impact: int = Field(default=DEFAULT_IMPACT, ge=IMPACT_MIN, le=IMPACT_MAX)
    likelihood: int = Field(default=DEFAULT_LIKELIHOOD, ge=LIKELIHOOD_MIN, le=LIKELIHOOD_MAX)
    existing_controls: str = ""
    treatment_plan: str = ""
    owner: str = Field(default="", max_length=255)
    priority: str = ""
    category: str = Field(default="", max_length=100)
    control_effectiveness: str = ""

    @field_validator("asset", "threat", "vulnerability")
    @classmethod
    def required_text(cls, value: str, info: ValidationInfo) -> str:
        value = value.strip()
        if not value:
            raise ValueError(f"{info.field_name} is required")
        return value

    @field_validator(
        "existing_controls", "treatment_plan", "owner", "priority", "category", "control_effectiveness",
        mode="before",
    )
    @classmethod
    def optional_text(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("priority")
    @classmethod
    def known_priority(cls, value: str) -> str:
        if value and value not in PRIORITIES:
            raise ValueError(f"priority must be one of {', '.join(PRIORITIES)}")
        return value

    @field_validator("control_effectiveness")
    @classmethod
    def known_effectiveness(cls, value: str) -> str:
        if value and value not in CONTROL_EFFECTIVENESS:
            raise ValueError(f"control_effectiveness must be one of {', '.join(CONTROL_EFFECTIVENESS)}")
        return value

    def to_fields(self) -> dict[str, Any]:
        """Stored fields, with the risk score derived from impact and likelihood."""
        fields = self.model_dump(by_alias=False)
        fields["risk_score"] = calculate_risk_score(self.impact, self.likelihood)
        return fields


class RiskResponse(BaseModel):
    """A stored risk assessment with its derived label."""

    id: str
    company_id: str
    asset: str
    threat: str
    vulnerability: str
    impact: int
    likelihood: int
    risk_score: float
    formatted_score: str
    risk_label: str
    severity: str
    existing_controls: str = ""
    treatment_plan: str = ""
    owner: str = ""
    priority: str = ""
    category: str = ""
    control_effectiveness: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RiskDetailResponse(RiskResponse):
    """Full details of one assessment, including its company."""

    company_name: str | None = None


class RiskListResponse(BaseModel):
    """A company's filtered and sorted risk register."""

    company_id: str
    total: int
    sort: str
    direction: str
    risks: list[RiskResponse]
