"""Risk assessment model — one asset/threat/vulnerability triple."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from risk_register.models.base import Base, RecordMixin, utcnow


class RiskAssessment(RecordMixin, Base):
    """An ISO 27001 risk register entry belonging to a company."""

    __tablename__ = "risk_assessments"

    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id"), nullable=False, index=True
    )
    asset: Mapped[str] = mapped_column(String(500), nullable=False)
    threat: Mapped[str] = mapped_column(String(500), nullable=False)
    vulnerability: Mapped[str] = mapped_column(Text, nullable=False)
    impact: Mapped[int] = mapped_column(Integer, default=1)
    likelihood: Mapped[int] = mapped_column(Integer, default=0)
    # Stored under the historical column name
    risk_score: Mapped[float] = mapped_column("risk_level", Float, default=0.0)
    existing_controls: Mapped[str] = mapped_column(Text, default="")
    treatment_plan: Mapped[str] = mapped_column(Text, default="")
    owner: Mapped[str] = mapped_column(String(255), default="")
    priority: Mapped[str] = mapped_column(String(20), default="")
    category: Mapped[str] = mapped_column(String(100), default="")
    control_effectiveness: Mapped[str] = mapped_column(String(20), default="")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<RiskAssessment {self.id[:8]} company={self.company_id[:8]}>"
