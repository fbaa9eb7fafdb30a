import os
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from backend import app as app_module
from backend.db import SessionLocal, init_db
from backend.db_models import DependentORM, Form1098ORM, UserORM, W2FormORM

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


def _create(**fields):
    body = {"lender_name": "First Community Bank"}
    body.update(fields)
    return client.post("/api/form1098/", json=body)


def test_draft_defaults_from_profile():
    client.put(
        "/api/dashboard/tax-info",
        json={
            "ssn": "123-45-6789",
            "address": {"street": "1 Main St", "city": "Austin", "state": "TX", "zip_code": "73301"},
            "deductions": {"itemized_deductions": {"mortgage_interest": 8400}},
        },
    )
    resp = _create()
    assert resp.status_code == 201
    form = resp.json()["form"]
    assert form["status"] == "draft"
    assert form["tax_year"] == 2022
    assert form["borrower_name"] == "Demo User"
    assert form["borrower_ssn"] == "123-45-6789"
    assert form["borrower_address"] == "1 Main St\nAustin, TX 73301"
    assert Decimal(form["mortgage_interest_received"]) == Decimal("8400")
    assert form["generated_date"] is None


def test_explicit_values_override_defaults(monkeypatch):
    monkeypatch.setenv("TAX_YEAR", "2023")
    resp = _create(borrower_name="Jordan Smith", mortgage_interest_received="1234.5", real_estate_taxes=900)
    form = resp.json()["form"]
    assert form["borrower_name"] == "Jordan Smith"
    assert form["tax_year"] == 2023
    assert Decimal(form["mortgage_interest_received"]) == Decimal("1234.50")
    assert Decimal(form["real_estate_taxes"]) == Decimal("900")


def test_lender_name_is_required():
    resp = client.post("/api/form1098/", json={"lender_tin": "12-3456789"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation failed"


def test_generate_and_download_pdf(tmp_path):
    form_id = _create(mortgage_interest_received="5000", property_address="1 Main St").json()["form"]["id"]

    resp = client.get(f"/api/form1098/{form_id}/pdf")
    assert resp.status_code == 404

    resp = client.post(f"/api/form1098/{form_id}/generate")
    assert resp.status_code == 200
    form = resp.json()["form"]
    assert form["status"] == "generated"
    assert form["generated_date"] is not None
    assert (tmp_path / "form1098" / f"form1098-{form_id}.pdf").is_file()

    resp = client.get(f"/api/form1098/{form_id}/pdf")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")


def test_list_get_and_delete():
    form_id = _create().json()["form"]["id"]
    client.post(f"/api/form1098/{form_id}/generate")

    assert [f["id"] for f in client.get("/api/form1098/").json()["forms"]] == [form_id]
    assert client.get(f"/api/form1098/{form_id}").json()["form"]["lender_name"] == "First Community Bank"

    assert client.delete(f"/api/form1098/{form_id}").status_code == 200
    assert client.get(f"/api/form1098/{form_id}").status_code == 404
    assert client.post(f"/api/form1098/{form_id}/generate").status_code == 404


def test_box_amounts_must_fit_the_form():
    assert _create(mortgage_interest_received="1" + "0" * 20).status_code == 400
    assert _create(real_estate_taxes="12.345").status_code == 400
    assert _create(points_paid_purchase="9999999999.99").status_code == 201
