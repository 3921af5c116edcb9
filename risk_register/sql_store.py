"""SQL-backed repository using SQLAlchemy's async engine."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from risk_register.models import Base, Company, RiskAssessment
from risk_register.models.base import utcnow
from risk_register.repository import (
    EDITABLE_RISK_FIELDS,
    PersistenceError,
    RiskRepository,
    normalize_company_row,
    normalize_risk_row,
)

_RISK_COLUMNS = ["id", "company_id", *EDITABLE_RISK_FIELDS, "risk_score", "created_at", "updated_at"]


def _company_to_dict(company: Company) -> dict[str, Any]:
    return normalize_company_row({
        "id": company.id,
        "name": company.name,
        "created_at": company.created_at,
    })


def _risk_to_dict(risk: RiskAssessment) -> dict[str, Any]:
    return normalize_risk_row({column: getattr(risk, column) for column in _RISK_COLUMNS})


class SQLRepository(RiskRepository):
    """Stores companies and risk assessments in a relational database.

    Tables are created on first use; there is no migration support.
    """

    def __init__(self, database_url: str, **engine_kwargs: Any) -> None:
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)
        self._schema_ready = False

    async def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self._schema_ready = True

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Open a session, translating driver failures into PersistenceError."""
        try:
            await self._ensure_schema()
            async with self._sessionmaker() as session:
                yield session
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc

    async def list_companies(self) -> list[dict[str, Any]]:
        async with self._session() as session:
            result = await session.scalars(select(Company).order_by(Company.name))
            return [_company_to_dict(c) for c in result.all()]

    async def get_company(self, company_id: str) -> dict[str, Any] | None:
        async with self._session() as session:
            company = await session.get(Company, company_id)
            return _company_to_dict(company) if company else None

    async def create_company(self, name: str) -> dict[str, Any]:
        async with self._session() as session:
            company = Company(name=name)
            session.add(company)
            await session.commit()
            return _company_to_dict(company)

    async def list_risks(self, company_id: str) -> list[dict[str, Any]]:
        async with self._session() as session:
            result = await session.scalars(
                select(RiskAssessment)
                .where(RiskAssessment.company_id == company_id)
                .order_by(RiskAssessment.created_at.desc())
            )
            return [_risk_to_dict(r) for r in result.all()]

    async def get_risk(self, risk_id: str) -> dict[str, Any] | None:
        async with self._session() as session:
            risk = await session.get(RiskAssessment, risk_id)
            return _risk_to_dict(risk) if risk else None

    async def create_risk(self, company_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        async with self._session() as session:
            now = utcnow()
            risk = RiskAssessment(company_id=company_id, created_at=now, updated_at=now)
            for key in (*EDITABLE_RISK_FIELDS, "risk_score"):
                if key in fields:
                    setattr(risk, key, fields[key])
            session.add(risk)
            await session.commit()
            return _risk_to_dict(risk)

    async def update_risk(self, risk_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        async with self._session() as session:
            risk = await session.get(RiskAssessment, risk_id)
            if risk is None:
                return None
            for key in (*EDITABLE_RISK_FIELDS, "risk_score"):
                if key in fields:
                    setattr(risk, key, fields[key])
            risk.updated_at = utcnow()
            await session.commit()
            return _risk_to_dict(risk)

    async def delete_risk(self, risk_id: str) -> bool:
        async with self._session() as session:
            risk = await session.get(RiskAssessment, risk_id)
            if risk is None:
                return False
            await session.delete(risk)
            await session.commit()
            return True

    async def ping(self) -> None:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc

    async def close(self) -> None:
        await self.engine.dispose()
