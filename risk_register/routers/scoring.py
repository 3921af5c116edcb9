"""Score preview and the form's reference vocabularies."""

from __future__ import annotations

from fastapi import APIRouter, Query

from risk_register.constants import (
    CONTROL_EFFECTIVENESS,
    IMPACT_MAX,
    IMPACT_MIN,
    ISO_RISK_CATEGORIES,
    LIKELIHOOD_MAX,
    LIKELIHOOD_MIN,
    PRIORITIES,
)
from risk_register.schemas.scoring import ReferenceData, ScaleRange, ScorePreview
from risk_register.services.risk_scoring import RISK_LABELS, assess

router = APIRouter(prefix="/api", tags=["scoring"])


@router.get("/scoring/preview", response_model=ScorePreview)
async def preview_score(
    impact: str | None = Query(default=None),
    likelihood: str | None = Query(default=None),
) -> ScorePreview:
    """Score an impact/likelihood pair as the form does while editing.

    Missing or non-numeric values fall back to the form defaults and
    out-of-range values are clamped.
    """
    return ScorePreview(**assess(impact, likelihood))


@router.get("/reference", response_model=ReferenceData)
async def reference_data() -> ReferenceData:
    """Categories, priorities, effectiveness ratings and scales."""
    return ReferenceData(
        categories=ISO_RISK_CATEGORIES,
        priorities=PRIORITIES,
        control_effectiveness=CONTROL_EFFECTIVENESS,
        risk_labels=RISK_LABELS,
        impact=ScaleRange(minimum=IMPACT_MIN, maximum=IMPACT_MAX),
        likelihood=ScaleRange(minimum=LIKELIHOOD_MIN, maximum=LIKELIHOOD_MAX),
    )
