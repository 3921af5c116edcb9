"""Company model — the owner of risk assessments."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from risk_register.models.base import Base, RecordMixin


class Company(RecordMixin, Base):
    """A company whose risks are being assessed."""

    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Company {self.name}>"
