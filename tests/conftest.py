"""Shared test fixtures for the Risk Register test suite."""

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from risk_register.app import create_app
from risk_register.config import Settings
from risk_register.repository import PersistenceError
from risk_register.store import InMemoryRepository


def _test_settings() -> Settings:
    """Return settings suitable for testing."""
    return Settings(
        environment="development",
        debug=True,
        log_format="console",
        rate_limit_default="1000/minute",
        allowed_origins="http://localhost:3000,http://localhost:5015",
        storage_backend="memory",
    )


class RecordingRepository(InMemoryRepository):
    """In-memory repository that remembers which write operations were called."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []

    async def create_risk(self, company_id, fields):
        self.calls.append("create_risk")
        return await super().create_risk(company_id, fields)

    async def update_risk(self, risk_id, fields):
        self.calls.append("update_risk")
        return await super().update_risk(risk_id, fields)

    async def delete_risk(self, risk_id):
        self.calls.append("delete_risk")
        return await super().delete_risk(risk_id)


class FailingRepository(InMemoryRepository):
    """Repository whose reads and writes fail after companies are set up."""

    async def list_risks(self, company_id):
        raise PersistenceError("connection reset by peer")

    async def get_risk(self, risk_id):
        raise PersistenceError("connection reset by peer")

    async def create_risk(self, company_id, fields):
        raise PersistenceError("duplicate key value violates unique constraint")

    async def update_risk(self, risk_id, fields):
        raise PersistenceError("connection reset by peer")

    async def delete_risk(self, risk_id):
        raise PersistenceError("connection reset by peer")

    async def ping(self):
        raise PersistenceError("connection refused")


def run(coro):
    """Run a coroutine to completion — repositories are async."""
    return asyncio.run(coro)


@pytest.fixture
def settings():
    """Test settings."""
    return _test_settings()


@pytest.fixture
def repository():
    """Fresh recording in-memory repository."""
    return RecordingRepository()


@pytest.fixture
def app(settings, repository):
    """Create a fresh FastAPI app for testing."""
    return create_app(settings, repository=repository)


@pytest.fixture
def client(app):
    """HTTP test client."""
    return TestClient(app)


@pytest.fixture
def sample_company(repository):
    """Create a sample company in the repository."""
    return run(repository.create_company("ACME Corporation"))


@pytest.fixture
def risk_payload():
    """A valid create/update request body."""
    return {
        "category": "Access Control",
        "asset": "Customer Database",
        "threat": "Unauthorized Access",
        "vulnerability": "Weak password policies allowing brute force attacks",
        "impact": 8,
        "likelihood": 50,
        "existing_controls": "Account lockout after 5 failed attempts",
        "treatment_plan": "Implement MFA and password complexity requirements",
        "owner": "Security Team",
        "priority": "High",
        "control_effectiveness": "Medium",
    }


@pytest.fixture
def sample_risks(repository, sample_company):
    """Create a spread of risks covering every label for the sample company."""
    rows = [
        ("Network Security", "Edge Firewall", "DDoS", "No rate limiting upstream", 10, 90),  # 9.0 Critical
        ("Access Control", "Database", "Credential stuffing", "No MFA on admin accounts", 10, 70),  # 7.0 High
        ("Cryptography", "Backup Server", "Data theft", "Backups stored unencrypted", 10, 50),  # 5.0 Medium
        ("Physical Security", "Office", "Break-in", "Badge readers not audited", 5, 20),  # 1.0 Low
    ]
    created = []
    for category, asset, threat, vulnerability, impact, likelihood in rows:
        created.append(run(repository.create_risk(sample_company["id"], {
            "category": category,
            "asset": asset,
            "threat": threat,
            "vulnerability": vulnerability,
            "impact": impact,
            "likelihood": likelihood,
            "risk_score": impact * (likelihood / 100),
        })))
    repository.calls.clear()
    return created
