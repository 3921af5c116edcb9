"""API tests for company and risk assessment endpoints.

Covers: company registration, risk create/list/details/update/delete,
filtering and sorting through query parameters, validation, and CSV export.
"""

from __future__ import annotations

from datetime import date

import pytest

from conftest import run


# ─── Companies ──────────────────────────────────────────────────────────────

class TestCompanyEndpoints:

    def test_create_company(self, client):
        resp = client.post("/api/companies", json={"name": "  ACME Corporation  "})
        assert resp.status_code == 201
        data = resp.json()
        assert data["name"] == "ACME Corporation"
        assert data["id"]
        assert data["created_at"]

    def test_create_company_rejects_blank_name(self, client, repository):
        resp = client.post("/api/companies", json={"name": "   "})
        assert resp.status_code == 422
        assert "Company name cannot be empty" in resp.text
        assert repository.companies == {}

    def test_list_companies_sorted_by_name(self, client):
        for name in ("Zeta Ltd", "Alpha Co", "Mid Inc"):
            client.post("/api/companies", json={"name": name})
        names = [c["name"] for c in client.get("/api/companies").json()]
        assert names == ["Alpha Co", "Mid Inc", "Zeta Ltd"]

    def test_get_company(self, client, sample_company):
        resp = client.get(f"/api/companies/{sample_company['id']}")
        assert resp.status_code == 200
        assert resp.json()["name"] == "ACME Corporation"

    def test_get_unknown_company(self, client):
        assert client.get("/api/companies/missing").status_code == 404


# ─── Create ─────────────────────────────────────────────────────────────────

class TestCreateRisk:

    def test_create_computes_score(self, client, sample_company, risk_payload):
        resp = client.post(f"/api/companies/{sample_company['id']}/risks", json=risk_payload)
        assert resp.status_code == 201
        data = resp.json()
        assert data["risk_score"] == 4.0
        assert data["formatted_score"] == "4.00"
        assert data["risk_label"] == "Medium"
        assert data["severity"] == "caution"
        assert data["company_id"] == sample_company["id"]

    def test_client_supplied_score_is_ignored(self, client, sample_company, risk_payload):
        payload = {**risk_payload, "risk_score": 99, "riskLevel": 99}
        data = client.post(f"/api/companies/{sample_company['id']}/risks", json=payload).json()
        assert data["risk_score"] == 4.0

    def test_camel_case_fields_accepted(self, client, sample_company):
        payload = {
            "asset": "Payroll",
            "threat": "Fraud",
            "vulnerability": "No segregation of duties",
            "impact": 6,
            "likelihood": 100,
            "existingControls": "Monthly review",
            "treatmentPlan": "Dual approval",
            "controlEffectiveness": "Low",
        }
        data = client.post(f"/api/companies/{sample_company['id']}/risks", json=payload).json()
        assert data["existing_controls"] == "Monthly review"
        assert data["treatment_plan"] == "Dual approval"
        assert data["control_effectiveness"] == "Low"
        assert data["risk_label"] == "High"

    def test_defaults_for_optional_fields(self, client, sample_company):
        payload = {"asset": "Laptop", "threat": "Theft", "vulnerability": "No disk encryption"}
        data = client.post(f"/api/companies/{sample_company['id']}/risks", json=payload).json()
        assert data["impact"] == 1
        assert data["likelihood"] == 0
        assert data["risk_score"] == 0.0
        assert data["owner"] == ""
        assert data["risk_label"] == "Low"

    def test_unknown_company(self, client, risk_payload, repository):
        resp = client.post("/api/companies/missing/risks", json=risk_payload)
        assert resp.status_code == 404
        assert repository.calls == []


class TestRiskValidation:
    """Invalid input is rejected before anything reaches the store."""

    @pytest.mark.parametrize("field", ["asset", "threat", "vulnerability"])
    def test_blank_required_field(self, client, sample_company, risk_payload, repository, field):
        resp = client.post(
            f"/api/companies/{sample_company['id']}/risks",
            json={**risk_payload, field: "   "},
        )
        assert resp.status_code == 422
        assert f"{field} is required" in resp.text
        assert repository.calls == []
        assert repository.risks == {}

    def test_missing_asset(self, client, sample_company, risk_payload, repository):
        payload = dict(risk_payload)
        del payload["asset"]
        resp = client.post(f"/api/companies/{sample_company['id']}/risks", json=payload)
        assert resp.status_code == 422
        assert repository.calls == []

    @pytest.mark.parametrize("field,value", [
        ("impact", 0),
        ("impact", 11),
        ("likelihood", -1),
        ("likelihood", 101),
        ("priority", "Urgent"),
        ("control_effectiveness", "Excellent"),
    ])
    def test_out_of_range_values(self, client, sample_company, risk_payload, repository, field, value):
        resp = client.post(
            f"/api/companies/{sample_company['id']}/risks",
            json={**risk_payload, field: value},
        )
        assert resp.status_code == 422
        assert repository.calls == []

    def test_update_with_blank_asset_is_rejected(self, client, sample_risks, risk_payload, repository):
        resp = client.put(f"/api/risks/{sample_risks[0]['id']}", json={**risk_payload, "asset": ""})
        assert resp.status_code == 422
        assert repository.calls == []


# ─── List, filter, sort ─────────────────────────────────────────────────────

class TestListRisks:

    def test_default_order_is_score_descending(self, client, sample_company, sample_risks):
        data = client.get(f"/api/companies/{sample_company['id']}/risks").json()
        assert data["total"] == 4
        assert data["sort"] == "risk_score"
        assert data["direction"] == "desc"
        assert [r["risk_label"] for r in data["risks"]] == ["Critical", "High", "Medium", "Low"]

    def test_ascending_reverses(self, client, sample_company, sample_risks):
        url = f"/api/companies/{sample_company['id']}/risks"
        desc = [r["id"] for r in client.get(url, params={"direction": "desc"}).json()["risks"]]
        asc = [r["id"] for r in client.get(url, params={"direction": "asc"}).json()["risks"]]
        assert asc == list(reversed(desc))

    def test_search(self, client, sample_company, sample_risks):
        data = client.get(
            f"/api/companies/{sample_company['id']}/risks",
            params={"search": "BACKUP"},
        ).json()
        assert [r["asset"] for r in data["risks"]] == ["Backup Server"]

    def test_category_filter(self, client, sample_company, sample_risks):
        data = client.get(
            f"/api/companies/{sample_company['id']}/risks",
            params={"category": "access control"},
        ).json()
        assert [r["asset"] for r in data["risks"]] == ["Database"]

    def test_search_and_category_compose(self, client, sample_company, sample_risks):
        url = f"/api/companies/{sample_company['id']}/risks"
        assert client.get(url, params={"search": "data", "category": "all"}).json()["total"] == 2
        assert client.get(url, params={"search": "data", "category": "Network Security"}).json()["total"] == 0

    def test_level_filter(self, client, sample_company, sample_risks):
        data = client.get(
            f"/api/companies/{sample_company['id']}/risks",
            params={"level": "high"},
        ).json()
        assert [r["risk_label"] for r in data["risks"]] == ["High"]

    def test_sort_by_text_field(self, client, sample_company, sample_risks):
        data = client.get(
            f"/api/companies/{sample_company['id']}/risks",
            params={"sort": "asset", "direction": "asc"},
        ).json()
        assert [r["asset"] for r in data["risks"]] == ["Backup Server", "Database", "Edge Firewall", "Office"]

    def test_unknown_sort_field(self, client, sample_company, sample_risks):
        resp = client.get(f"/api/companies/{sample_company['id']}/risks", params={"sort": "colour"})
        assert resp.status_code == 422

    def test_sort_by_stored_score_column(self, client, sample_company, sample_risks):
        data = client.get(
            f"/api/companies/{sample_company['id']}/risks",
            params={"sort": "risk_level", "direction": "asc"},
        ).json()
        assert data["sort"] == "risk_score"
        assert [r["risk_label"] for r in data["risks"]] == ["Low", "Medium", "High", "Critical"]

    def test_bad_direction(self, client, sample_company, sample_risks):
        resp = client.get(f"/api/companies/{sample_company['id']}/risks", params={"direction": "up"})
        assert resp.status_code == 422

    def test_risks_scoped_to_company(self, client, repository, sample_risks):
        other = run(repository.create_company("Other Co"))
        data = client.get(f"/api/companies/{other['id']}/risks").json()
        assert data["total"] == 0
        assert data["risks"] == []

    def test_unknown_company(self, client):
        assert client.get("/api/companies/missing/risks").status_code == 404


# ─── Details, update, delete ────────────────────────────────────────────────

class TestRiskDetails:

    def test_details_include_company_name(self, client, sample_risks):
        data = client.get(f"/api/risks/{sample_risks[0]['id']}").json()
        assert data["company_name"] == "ACME Corporation"
        assert data["risk_label"] == "Critical"
        assert data["severity"] == "severe"
        assert data["formatted_score"] == "9.00"

    def test_unknown_risk(self, client):
        assert client.get("/api/risks/missing").status_code == 404


class TestUpdateRisk:

    def test_update_recomputes_score(self, client, sample_risks, risk_payload):
        target = sample_risks[3]
        resp = client.put(f"/api/risks/{target['id']}", json={**risk_payload, "impact": 10, "likelihood": 80})
        assert resp.status_code == 200
        data = resp.json()
        assert data["risk_score"] == 8.0
        assert data["risk_label"] == "Critical"
        assert data["asset"] == risk_payload["asset"]
        assert data["company_id"] == target["company_id"]

    def test_update_persists(self, client, sample_risks, risk_payload, repository):
        target = sample_risks[3]
        client.put(f"/api/risks/{target['id']}", json={**risk_payload, "impact": 6, "likelihood": 100})
        stored = run(repository.get_risk(target["id"]))
        assert stored["risk_score"] == 6.0
        assert stored["created_at"] == target["created_at"]
        assert stored["updated_at"] >= target["updated_at"]
        assert repository.calls == ["update_risk"]

    def test_update_unknown_risk(self, client, risk_payload):
        assert client.put("/api/risks/missing", json=risk_payload).status_code == 404


class TestDeleteRisk:

    def test_delete(self, client, sample_risks, repository):
        resp = client.delete(f"/api/risks/{sample_risks[0]['id']}")
        assert resp.status_code == 204
        assert run(repository.get_risk(sample_risks[0]["id"])) is None

    def test_delete_twice(self, client, sample_risks):
        client.delete(f"/api/risks/{sample_risks[0]['id']}")
        assert client.delete(f"/api/risks/{sample_risks[0]['id']}").status_code == 404


# ─── Export ─────────────────────────────────────────────────────────────────

class TestExport:

    def test_export_csv(self, client, sample_company, sample_risks):
        resp = client.get(f"/api/companies/{sample_company['id']}/risks/export")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert f"risk-assessment-{date.today().isoformat()}.csv" in resp.headers["content-disposition"]
        lines = resp.text.split("\n")
        assert lines[0].startswith("ID,Category,Asset,Threat")
        assert len(lines) == 5

    def test_export_ignores_filters(self, client, sample_company, sample_risks):
        resp = client.get(
            f"/api/companies/{sample_company['id']}/risks/export",
            params={"search": "nothing-matches"},
        )
        assert len(resp.text.split("\n")) == 5

    def test_export_unknown_company(self, client):
        assert client.get("/api/companies/missing/risks/export").status_code == 404


# ─── End to end ─────────────────────────────────────────────────────────────

class TestEndToEnd:

    def test_create_score_classify_and_rank(self, client):
        company = client.post("/api/companies", json={"name": "Initech"}).json()
        url = f"/api/companies/{company['id']}/risks"

        low = client.post(url, json={
            "asset": "Printer", "threat": "Paper jam", "vulnerability": "Old firmware",
            "impact": 2, "likelihood": 30,
        }).json()
        assert low["risk_label"] == "Low"

        created = client.post(url, json={
            "asset": "Customer Database", "threat": "Unauthorized Access",
            "vulnerability": "Weak password policies", "impact": 8, "likelihood": 50,
        }).json()
        assert created["risk_score"] == 4.0
        assert created["risk_label"] == "Medium"

        listed = client.get(url).json()["risks"]
        assert [r["id"] for r in listed] == [created["id"], low["id"]]
