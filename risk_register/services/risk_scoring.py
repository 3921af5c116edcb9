"""Risk scoring — impact x likelihood and the four-bucket risk label."""

from __future__ import annotations

import math
from typing import Any

from risk_register.constants import (
    DEFAULT_IMPACT,
    DEFAULT_LIKELIHOOD,
    IMPACT_MAX,
    IMPACT_MIN,
    LIKELIHOOD_MAX,
    LIKELIHOOD_MIN,
)

RISK_LABELS = ["Low", "Medium", "High", "Critical"]

# Inclusive lower bounds, highest first
LABEL_THRESHOLDS = [
    (8.0, "Critical"),
    (6.0, "High"),
    (4.0, "Medium"),
]

# Presentation treatment; High and Critical share the severe styling
LABEL_SEVERITY = {
    "Low": "neutral",
    "Medium": "caution",
    "High": "severe",
    "Critical": "severe",
}


def calculate_risk_score(impact: float, likelihood: float) -> float:
    """Compute the risk score for an impact rating and a likelihood percentage.

    Likelihood is a percentage (0-100) and is converted to a fraction before
    being weighted against impact. The result is not rounded.

    Args:
        impact: Impact rating, normally 1-10.
        likelihood: Likelihood as a percentage, normally 0-100.

    Returns:
        ``impact * (likelihood / 100)``.
    """
    return impact * (likelihood / 100)


def get_risk_label(score: float) -> str:
    """Map a risk score onto Low, Medium, High or Critical."""
    for threshold, label in LABEL_THRESHOLDS:
        if score >= threshold:
            return label
    return "Low"


def get_label_severity(label: str) -> str:
    """Return the presentation severity (neutral, caution, severe) for a label."""
    return LABEL_SEVERITY.get(label, "neutral")


def format_risk_score(score: float) -> str:
    """Format a score for display with two decimals."""
    return f"{score:.2f}"


def _clamp_int(value: Any, default: int, lower: int, upper: int) -> int:
    """Parse a number, clamp it to [lower, upper] and truncate to int.

    Missing, non-numeric and NaN input gives the default; infinities clamp
    to the nearest bound.
    """
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if math.isnan(number):
        return default
    return int(max(lower, min(upper, number)))


def sanitize_impact(value: Any) -> int:
    """Coerce a raw impact value to an integer within the offered range."""
    return _clamp_int(value, DEFAULT_IMPACT, IMPACT_MIN, IMPACT_MAX)


def sanitize_likelihood(value: Any) -> int:
    """Coerce a raw likelihood value to a percentage within the offered range."""
    return _clamp_int(value, DEFAULT_LIKELIHOOD, LIKELIHOOD_MIN, LIKELIHOOD_MAX)


def assess(impact: Any, likelihood: Any) -> dict[str, Any]:
    """Sanitise raw inputs and return score, display string, label and severity."""
    clean_impact = sanitize_impact(impact)
    clean_likelihood = sanitize_likelihood(likelihood)
    score = calculate_risk_score(clean_impact, clean_likelihood)
    label = get_risk_label(score)
    return {
        "impact": clean_impact,
        "likelihood": clean_likelihood,
        "risk_score": score,
        "formatted_score": format_risk_score(score),
        "risk_label": label,
        "severity": get_label_severity(label),
    }
