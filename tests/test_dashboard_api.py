import os
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from backend import app as app_module
from backend.db import SessionLocal, init_db
from backend.db_models import DependentORM, Form1098ORM, UserORM, W2FormORM
from backend.seed import DEMO_USER_ID

os.environ["AUTH_BYPASS"] = "true"

client = TestClient(app_module.app)


def _clear_tables():
    with SessionLocal() as db:
        db.query(Form1098ORM).delete()
        db.query(W2FormORM).delete()
        db.query(DependentORM).delete()
        db.query(UserORM).delete()
        db.commit()


@pytest.fixture(autouse=True)
def setup_db(monkeypatch, tmp_path):
    monkeypatch.setenv("AUTH_BYPASS", "true")
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path))
    init_db()
    _clear_tables()
    yield
    _clear_tables()


def test_dashboard_returns_profile_and_tax_info():
    resp = client.get("/api/dashboard/")
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["id"] == DEMO_USER_ID
    assert user["tax_info"]["form_completion_status"] == "not_started"
    assert user["tax_info"]["filing_status"] == "single"
    assert user["tax_info"]["dependents"] == []


def test_dashboard_is_also_served_under_its_legacy_path():
    resp = client.get("/api/dashboard/dashboard")
    assert resp.status_code == 200
    assert resp.json() == client.get("/api/dashboard/").json()


def test_update_profile():
    resp = client.put("/api/dashboard/profile", json={"first_name": "Dana"})
    assert resp.status_code == 200
    assert resp.json()["user"]["first_name"] == "Dana"
    assert resp.json()["user"]["last_name"] == "User"


def test_tax_info_merges_and_marks_in_progress():
    resp = client.put(
        "/api/dashboard/tax-info",
        json={
            "filing_status": "head_of_household",
            "address": {"city": "Austin", "state": "TX"},
            "income": {"wages": 50000, "interest": "120.50"},
            "deductions": {"itemized_deductions": {"mortgage_interest": 8400}},
        },
    )
    assert resp.status_code == 200
    tax_info = resp.json()["tax_info"]
    assert tax_info["filing_status"] == "head_of_household"
    assert tax_info["form_completion_status"] == "in_progress"
    assert tax_info["income"]["wages"] == "50000"
    assert tax_info["income"]["interest"] == "120.50"
    # untouched categories keep their stored value
    assert tax_info["income"]["dividends"] == 0
    assert tax_info["deductions"]["standard_deduction"] is True
    assert tax_info["deductions"]["itemized_deductions"]["mortgage_interest"] == "8400"
    assert tax_info["deductions"]["itemized_deductions"]["medical_expenses"] == 0

    resp = client.put("/api/dashboard/tax-info", json={"address": {"zip_code": "73301"}})
    assert resp.json()["tax_info"]["address"] == {"city": "Austin", "state": "TX", "zip_code": "73301"}


def test_tax_info_rejects_unknown_filing_status():
    resp = client.put("/api/dashboard/tax-info", json={"filing_status": "complicated"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation failed"


def test_tax_info_rejects_negative_income():
    resp = client.put("/api/dashboard/tax-info", json={"income": {"wages": -1}})
    assert resp.status_code == 400


def test_tax_info_rejects_oversized_amounts():
    resp = client.put("/api/dashboard/tax-info", json={"income": {"wages": "1" + "0" * 30}})
    assert resp.status_code == 400
    resp = client.put(
        "/api/dashboard/tax-info",
        json={"deductions": {"itemized_deductions": {"mortgage_interest": "1E+30"}}},
    )
    assert resp.status_code == 400
    resp = client.put("/api/dashboard/tax-info", json={"income": {"wages": "12.345"}})
    assert resp.status_code == 400

    calc = client.get("/api/dashboard/calculate-tax").json()["calculation"]
    assert Decimal(calc["total_income"]) == 0


def test_dependents_lifecycle():
    first = client.post("/api/dashboard/add-dependent", json={"name": "Sam", "relationship": "child"})
    assert first.status_code == 200
    assert first.json()["dependent"]["relationship"] == "child"
    second = client.post(
        "/api/dashboard/add-dependent",
        json={"name": "Pat", "relationship": "parent", "birth_date": "1950-02-01"},
    )
    names = [d["name"] for d in second.json()["dependents"]]
    assert names == ["Sam", "Pat"]

    resp = client.delete(f"/api/dashboard/remove-dependent/{first.json()['dependent']['id']}")
    assert resp.status_code == 200
    assert [d["name"] for d in resp.json()["dependents"]] == ["Pat"]

    assert client.delete("/api/dashboard/remove-dependent/missing").status_code == 404


def test_dependent_relationship_is_validated():
    resp = client.post("/api/dashboard/add-dependent", json={"name": "Rex", "relationship": "pet"})
    assert resp.status_code == 400


def test_calculate_tax_uses_income_and_dependents():
    client.put("/api/dashboard/tax-info", json={"income": {"wages": 50000}})
    client.post("/api/dashboard/add-dependent", json={"name": "Sam", "relationship": "child"})
    client.post("/api/dashboard/add-dependent", json={"name": "Alex", "relationship": "child"})

    resp = client.get("/api/dashboard/calculate-tax")
    assert resp.status_code == 200
    body = resp.json()
    assert body["tax_year"] == 2022
    calc = body["calculation"]
    assert calc["dependents_count"] == 2
    assert calc["tax_owed"] == "2617.00"
    assert calc["effective_rate"] == "5.23"


def test_calculate_tax_falls_back_to_configured_year(monkeypatch):
    monkeypatch.setenv("TAX_YEAR", "2030")
    client.put("/api/dashboard/tax-info", json={"income": {"wages": 50000}})

    resp = client.get("/api/dashboard/calculate-tax")
    assert resp.status_code == 200
    body = resp.json()
    assert body["tax_year"] == 2022
    assert body["calculation"]["tax_owed"] == "6617.00"


def test_calculate_tax_with_no_income():
    calc = client.get("/api/dashboard/calculate-tax").json()["calculation"]
    assert Decimal(calc["tax_owed"]) == 0
    assert Decimal(calc["effective_rate"]) == 0


def test_upload_w9_stores_file(tmp_path):
    resp = client.post(
        "/api/dashboard/upload-w9",
        files={"w9_form": ("my w9.pdf", b"%PDF-1.4 fake", "application/pdf")},
    )
    assert resp.status_code == 200
    file_name = resp.json()["file_name"]
    assert file_name.startswith(f"w9-{DEMO_USER_ID}-")
    assert file_name.endswith(".pdf")
    assert (tmp_path / "w9-forms" / file_name).read_bytes() == b"%PDF-1.4 fake"

    tax_info = client.get("/api/dashboard/").json()["user"]["tax_info"]
    assert tax_info["w9_uploaded"] is True
    assert tax_info["form_completion_status"] == "in_progress"


def test_upload_w9_rejects_disallowed_type():
    resp = client.post("/api/dashboard/upload-w9", files={"w9_form": ("notes.txt", b"hello", "text/plain")})
    assert resp.status_code == 400


def test_upload_w9_rejects_empty_and_oversized(monkeypatch):
    resp = client.post("/api/dashboard/upload-w9", files={"w9_form": ("w9.pdf", b"", "application/pdf")})
    assert resp.status_code == 400

    monkeypatch.setenv("MAX_UPLOAD_BYTES", "10")
    resp = client.post("/api/dashboard/upload-w9", files={"w9_form": ("w9.pdf", b"x" * 11, "application/pdf")})
    assert resp.status_code == 413
    assert resp.json()["detail"] == "File too large"


def test_upload_w9_requires_file():
    resp = client.post("/api/dashboard/upload-w9")
    assert resp.status_code == 400
