from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from backend.config import get_settings
from backend.db import get_db
from backend.db_models import Form1098ORM, UserORM
from backend.deps import get_current_user
from backend.form1098 import create_draft, get_owned_form
from backend.form1098_pdf import write_form1098
from backend.schemas import (
    Form1098Create,
    Form1098ListResponse,
    Form1098Read,
    Form1098Response,
    MessageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/form1098", tags=["form1098"])


def _require_form(db: Session, user: UserORM, form_id: str) -> Form1098ORM:
    form = get_owned_form(db, user, form_id)
    if not form:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form 1098 not found")
    return form


@router.post("/", response_model=Form1098Response, status_code=status.HTTP_201_CREATED)
def create_form1098(
    payload: Form1098Create,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Form1098Response:
    form = create_draft(db, user, payload, get_settings()["tax_year"])
    return Form1098Response(message="Form 1098 draft created", form=Form1098Read.model_validate(form))


@router.get("/", response_model=Form1098ListResponse)
def list_form1098s(user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)) -> Form1098ListResponse:
    forms = (
        db.query(Form1098ORM)
        .filter(Form1098ORM.user_id == user.id)
        .order_by(Form1098ORM.created_at.desc())
        .all()
    )
    return Form1098ListResponse(forms=[Form1098Read.model_validate(f) for f in forms])


@router.get("/{form_id}", response_model=Form1098Response)
def get_form1098(
    form_id: str,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Form1098Response:
    return Form1098Response(form=Form1098Read.model_validate(_require_form(db, user, form_id)))


@router.post("/{form_id}/generate", response_model=Form1098Response)
def generate_form1098(
    form_id: str,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Form1098Response:
    form = _require_form(db, user, form_id)
    directory = Path(get_settings()["upload_dir"]) / "form1098"
    path = write_form1098(form, directory)

    form.pdf_path = str(path)
    form.generated_date = datetime.utcnow()
    form.status = "generated"
    db.commit()
    db.refresh(form)
    logger.info("Generated Form 1098 PDF %s", path)
    return Form1098Response(message="Form 1098 generated", form=Form1098Read.model_validate(form))


@router.get("/{form_id}/pdf")
def download_form1098(
    form_id: str,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FileResponse:
    form = _require_form(db, user, form_id)
    if not form.pdf_path or not Path(form.pdf_path).is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="PDF not generated yet")
    return FileResponse(
        form.pdf_path,
        media_type="application/pdf",
        filename=f"form1098-{form.tax_year}-{form.id}.pdf",
    )


@router.delete("/{form_id}", response_model=MessageResponse)
def delete_form1098(
    form_id: str,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    form = _require_form(db, user, form_id)
    pdf_path = Path(form.pdf_path) if form.pdf_path else None
    db.delete(form)
    db.commit()
    if pdf_path is not None:
        pdf_path.unlink(missing_ok=True)
    return MessageResponse(message="Form 1098 deleted successfully")
