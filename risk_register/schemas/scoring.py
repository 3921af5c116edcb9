"""Schemas for score preview and reference data."""

from __future__ import annotations

from pydantic import BaseModel


class ScorePreview(BaseModel):
    """Score, label and styling for an impact/likelihood pair."""

    impact: int
    likelihood: int
    risk_score: float
    formatted_score: str
    risk_label: str
    severity: str


class ScaleRange(BaseModel):
    minimum: int
    maximum: int


class ReferenceData(BaseModel):
    """Vocabularies and scales offered by the assessment form."""

    categories: list[str]
    priorities: list[str]
    control_effectiveness: list[str]
    risk_labels: list[str]
    impact: ScaleRange
    likelihood: ScaleRange
