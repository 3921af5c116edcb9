"""Database models for the Risk Register."""

from risk_register.models.base import Base
from risk_register.models.company import Company
from risk_register.models.risk_assessment import RiskAssessment

__all__ = [
    "Base",
    "Company",
    "RiskAssessment",
]
