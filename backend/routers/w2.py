from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from backend.config import get_settings
from backend.db import get_db
from backend.db_models import UserORM, W2FormORM
from backend.deps import get_current_user
from backend.schemas import MessageResponse, W2FormRead, W2ListResponse, W2UploadResponse
from backend.uploads import build_stored_name, read_validated_upload, store_upload
from intake.document_text import extract_document_text
from intake.field_extractor import NOT_FOUND
from intake.w2_extractor import W2Record, extract_w2_record, placeholder_fields, record_amount

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/w2", tags=["w2"])

# ORM text column -> canonical record field.
_COLUMN_FIELDS = {
    "employer": "employer_name",
    "employer_address": "employer_address",
    "employer_ein": "employer_ein",
    "employee_name": "employee_name",
    "employee_ssn": "employee_ssn",
    "employee_address": "employee_address",
}
_BOX_COLUMNS = (
    "wages",
    "federal_tax_withheld",
    "social_security_wages",
    "social_security_tax",
    "medicare_wages",
    "medicare_tax",
    "social_security_tips",
    "allocated_tips",
    "dependent_care_benefits",
    "nonqualified_plans",
)


def _found(record: W2Record, name: str) -> Optional[str]:
    value = record.get(name)
    return None if value in (None, NOT_FOUND) else value


def _state_tax_info(record: W2Record) -> List[Dict[str, Any]]:
    state = _found(record, "state")
    state_wages = record_amount(record, "state_wages")
    state_tax = record_amount(record, "state_tax")
    if state is None and state_wages is None and state_tax is None:
        return []
    return [{
        "state": state,
        "state_wages": None if state_wages is None else str(state_wages),
        "state_tax": None if state_tax is None else str(state_tax),
    }]


def build_w2_form(user_id: str, file_name: str, file_path: Path, record: W2Record) -> W2FormORM:
    """Map an extracted record onto a W-2 row; placeholders become NULL columns."""
    missing = placeholder_fields(record)
    tax_year = _found(record, "tax_year")

    form = W2FormORM(
        user_id=user_id,
        file_name=file_name,
        file_path=str(file_path),
        tax_year=int(tax_year) if tax_year and tax_year.isdigit() else None,
        state_tax_info=_state_tax_info(record),
        is_processed=len(missing) < len(record),
        extracted_data={"fields": record, "extracted_at": datetime.utcnow().isoformat()},
        processing_notes=f"Fields not found: {', '.join(missing)}" if missing else None,
    )
    for column, field in _COLUMN_FIELDS.items():
        setattr(form, column, _found(record, field))
    for column in _BOX_COLUMNS:
        setattr(form, column, record_amount(record, column))
    return form


def apply_wages_to_income(db: Session, user: UserORM) -> Dict[str, Any]:
    """Set ``income.wages`` to the sum of box 1 across the user's W-2s."""
    forms = db.query(W2FormORM).filter(W2FormORM.user_id == user.id).all()
    total = sum((f.wages for f in forms if f.wages is not None), Decimal("0"))
    user.income = {**(user.income or {}), "wages": str(total)}
    return user.income


def _get_owned(db: Session, user: UserORM, form_id: str) -> W2FormORM:
    form = (
        db.query(W2FormORM)
        .filter(W2FormORM.id == form_id, W2FormORM.user_id == user.id)
        .first()
    )
    if not form:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="W-2 form not found")
    return form


@router.post("/upload", response_model=W2UploadResponse)
async def upload_w2(
    w2_form: UploadFile = File(...),
    apply_to_income: bool = Form(False),
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> W2UploadResponse:
    settings = get_settings()
    filename, content = await read_validated_upload(w2_form, settings["max_upload_bytes"])
    record = extract_w2_record(extract_document_text(filename, content))

    stored_name = build_stored_name("w2", user.id, filename)
    path = store_upload(settings, "w2-forms", stored_name, content)
    form = build_w2_form(user.id, filename, path, record)
    db.add(form)
    db.flush()

    income = None
    if apply_to_income:
        income = apply_wages_to_income(db, user)
    db.commit()
    db.refresh(form)
    logger.info("Stored W-2 %s for user %s (%s)", form.id, user.id, form.processing_notes or "all fields found")

    return W2UploadResponse(
        message="W-2 form uploaded successfully",
        w2_form=W2FormRead.model_validate(form),
        missing_fields=placeholder_fields(record),
        income=income,
    )


@router.get("/", response_model=W2ListResponse)
def list_w2_forms(user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)) -> W2ListResponse:
    forms = (
        db.query(W2FormORM)
        .filter(W2FormORM.user_id == user.id)
        .order_by(W2FormORM.created_at.desc())
        .all()
    )
    return W2ListResponse(w2_forms=[W2FormRead.model_validate(f) for f in forms])


@router.get("/{form_id}", response_model=W2FormRead)
def get_w2_form(
    form_id: str,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> W2FormRead:
    return W2FormRead.model_validate(_get_owned(db, user, form_id))


@router.delete("/{form_id}", response_model=MessageResponse)
def delete_w2_form(
    form_id: str,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    form = _get_owned(db, user, form_id)
    file_path = Path(form.file_path) if form.file_path else None
    db.delete(form)
    db.commit()
    if file_path is not None:
        file_path.unlink(missing_ok=True)
    return MessageResponse(message="W-2 form deleted successfully")
