import os
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from backend import app as app_module
from backend.db import SessionLocal, init_db
from backend.db_models import DependentORM, Form1098ORM, UserORM, W2FormORM
from backend.routers import w2 as w2_router
from test_w2_extractor import SAMPLE_W2

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


@pytest.fixture
def sample_text(monkeypatch):
    monkeypatch.setattr(w2_router, "extract_document_text", lambda filename, data: SAMPLE_W2)


def _upload(name="w2.pdf", content=b"%PDF-1.4 w2", content_type="application/pdf", **data):
    return client.post("/api/w2/upload", files={"w2_form": (name, content, content_type)}, data=data)


def test_upload_extracts_and_persists_fields(sample_text, tmp_path):
    resp = _upload()
    assert resp.status_code == 200
    body = resp.json()
    form = body["w2_form"]
    assert form["employer"] == "Acme Widgets Inc"
    assert form["employer_ein"] == "12-3456789"
    assert form["tax_year"] == 2022
    assert Decimal(form["wages"]) == Decimal("52345.67")
    assert Decimal(form["federal_tax_withheld"]) == Decimal("6100")
    assert form["allocated_tips"] is None
    assert form["state_tax_info"] == [{"state": "CA", "state_wages": "52345.67", "state_tax": "2100.50"}]
    assert form["is_processed"] is True
    assert form["extracted_data"]["fields"]["allocated_tips"] == "Not found"
    assert "allocated_tips" in form["processing_notes"]
    assert "employer_address" in body["missing_fields"]
    assert body["income"] is None

    stored = list((tmp_path / "w2-forms").iterdir())
    assert len(stored) == 1
    assert stored[0].name.startswith("w2-demo-user-")


def test_apply_to_income_sums_box_one_wages(sample_text):
    _upload()
    resp = _upload(apply_to_income="true")
    assert resp.status_code == 200
    assert Decimal(resp.json()["income"]["wages"]) == Decimal("104691.34")

    tax_info = client.get("/api/dashboard/").json()["user"]["tax_info"]
    assert Decimal(tax_info["income"]["wages"]) == Decimal("104691.34")


def test_image_upload_keeps_placeholders():
    resp = _upload(name="scan.png", content=b"\x89PNG\r\n", content_type="image/png")
    assert resp.status_code == 200
    form = resp.json()["w2_form"]
    assert form["is_processed"] is False
    assert form["wages"] is None
    assert all(value == "Not found" for value in form["extracted_data"]["fields"].values())


def test_list_get_and_delete(sample_text):
    form_id = _upload().json()["w2_form"]["id"]

    listing = client.get("/api/w2/")
    assert [f["id"] for f in listing.json()["w2_forms"]] == [form_id]

    resp = client.get(f"/api/w2/{form_id}")
    assert resp.status_code == 200
    with SessionLocal() as db:
        stored_path = Path(db.get(W2FormORM, form_id).file_path)
    assert stored_path.exists()

    assert client.delete(f"/api/w2/{form_id}").status_code == 200
    assert not stored_path.exists()
    assert client.get(f"/api/w2/{form_id}").status_code == 404
    assert client.delete(f"/api/w2/{form_id}").status_code == 404


def test_upload_rejects_disallowed_type():
    resp = _upload(name="w2.exe", content=b"MZ", content_type="application/octet-stream")
    assert resp.status_code == 400


def test_oversized_amount_is_stored_as_missing(monkeypatch, tmp_path):
    text = "Wages, tips, other compensation " + "9" * 40 + "\nFederal income tax withheld 1,200"
    monkeypatch.setattr(w2_router, "extract_document_text", lambda filename, data: text)
    resp = _upload()
    assert resp.status_code == 200
    form = resp.json()["w2_form"]
    assert form["wages"] is None
    assert Decimal(form["federal_tax_withheld"]) == Decimal("1200")
    assert "wages" in resp.json()["missing_fields"]
    assert len(list((tmp_path / "w2-forms").iterdir())) == 1
