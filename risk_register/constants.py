"""Fixed vocabularies and scales for risk assessments."""

from __future__ import annotations

# ISO/IEC 27001 control areas offered as categories
ISO_RISK_CATEGORIES = [
    "Access Control",
    "Asset Management",
    "Business Continuity",
    "Cryptography",
    "Human Resources Security",
    "Information Security Policies",
    "Network Security",
    "Operations Security",
    "Physical Security",
    "Software Development Security",
    "Supplier Relationships",
    "System Acquisition and Maintenance",
    "Third Party Management",
    "Vulnerability Management",
    "Other",
]

PRIORITIES = ["Not Set", "Low", "Medium", "High"]

CONTROL_EFFECTIVENESS = ["Not Set", "Low", "Medium", "High", "N/A"]

IMPACT_MIN = 1
IMPACT_MAX = 10
LIKELIHOOD_MIN = 0
LIKELIHOOD_MAX = 100

DEFAULT_IMPACT = 1
DEFAULT_LIKELIHOOD = 0
