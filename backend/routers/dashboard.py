from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from backend.config import get_settings
from backend.db import get_db
from backend.db_models import DependentORM, UserORM
from backend.deps import get_current_user
from backend.schemas import (
    DashboardResponse,
    DashboardUser,
    DependentCreate,
    DependentRead,
    DependentsResponse,
    ProfileUpdate,
    TaxCalculation,
    TaxCalculationResponse,
    TaxInfo,
    TaxInfoResponse,
    TaxInfoUpdate,
    UserRead,
    UserResponse,
    W9UploadResponse,
)
from backend.tax_estimator import estimate_tax, load_tax_table
from backend.uploads import build_stored_name, read_validated_upload, store_upload
from loader import resolve_year

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _dependents(user: UserORM):
    return [DependentRead.model_validate(d) for d in user.dependents]


def _tax_info(user: UserORM) -> TaxInfo:
    return TaxInfo(
        filing_status=user.filing_status,
        tax_classification=user.tax_classification,
        business_name=user.business_name,
        ssn=user.ssn,
        ein=user.ein,
        address=user.address or {},
        income=user.income or {},
        deductions=user.deductions or {},
        w9_uploaded=user.w9_uploaded,
        w9_upload_date=user.w9_upload_date,
        w9_file_name=user.w9_file_name,
        form_completion_status=user.form_completion_status,
        dependents=_dependents(user),
    )


def _merge(current: Optional[Dict[str, Any]], updates: Dict[str, Any]) -> Dict[str, Any]:
    # New dict so SQLAlchemy sees the JSON column change.
    return {**(current or {}), **updates}


@router.get("/", response_model=DashboardResponse)
@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(user: UserORM = Depends(get_current_user)) -> DashboardResponse:
    base = UserRead.model_validate(user).model_dump()
    return DashboardResponse(user=DashboardUser(**base, tax_info=_tax_info(user)))


@router.put("/profile", response_model=UserResponse)
def update_profile(
    payload: ProfileUpdate,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return UserResponse(message="Profile updated successfully", user=UserRead.model_validate(user))


@router.put("/tax-info", response_model=TaxInfoResponse)
def update_tax_info(
    payload: TaxInfoUpdate,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaxInfoResponse:
    for field in ("filing_status", "tax_classification", "business_name", "ssn", "ein"):
        value = getattr(payload, field)
        if value is not None:
            setattr(user, field, value)

    if payload.address is not None:
        user.address = _merge(user.address, payload.address.model_dump(exclude_none=True))
    if payload.income is not None:
        user.income = _merge(user.income, payload.income.model_dump(mode="json", exclude_none=True))
    if payload.deductions is not None:
        updates = payload.deductions.model_dump(mode="json", exclude_none=True)
        current = dict(user.deductions or {})
        if "itemized_deductions" in updates:
            updates["itemized_deductions"] = _merge(
                current.get("itemized_deductions"), updates["itemized_deductions"]
            )
        user.deductions = _merge(current, updates)

    user.form_completion_status = "in_progress"
    db.commit()
    db.refresh(user)
    logger.info("Updated tax info for user %s", user.id)
    return TaxInfoResponse(message="Tax information updated successfully", tax_info=_tax_info(user))


@router.post("/upload-w9", response_model=W9UploadResponse)
async def upload_w9(
    w9_form: UploadFile = File(...),
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> W9UploadResponse:
    settings = get_settings()
    filename, content = await read_validated_upload(w9_form, settings["max_upload_bytes"])
    stored_name = build_stored_name("w9", user.id, filename)
    store_upload(settings, "w9-forms", stored_name, content)

    user.w9_uploaded = True
    user.w9_upload_date = datetime.utcnow()
    user.w9_file_name = stored_name
    user.form_completion_status = "in_progress"
    db.commit()
    db.refresh(user)

    return W9UploadResponse(
        message="W-9 form uploaded successfully",
        file_name=stored_name,
        upload_date=user.w9_upload_date,
    )


@router.get("/dependents", response_model=DependentsResponse)
def list_dependents(user: UserORM = Depends(get_current_user)) -> DependentsResponse:
    return DependentsResponse(dependents=_dependents(user))


@router.post("/add-dependent", response_model=DependentsResponse)
def add_dependent(
    payload: DependentCreate,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DependentsResponse:
    dependent = DependentORM(
        user_id=user.id,
        name=payload.name.strip(),
        relationship_type=payload.relationship,
        ssn=payload.ssn,
        birth_date=payload.birth_date,
    )
    db.add(dependent)
    db.commit()
    db.refresh(dependent)
    db.refresh(user)
    return DependentsResponse(
        message="Dependent added successfully",
        dependent=DependentRead.model_validate(dependent),
        dependents=_dependents(user),
    )


@router.delete("/remove-dependent/{dependent_id}", response_model=DependentsResponse)
def remove_dependent(
    dependent_id: str,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DependentsResponse:
    dependent = (
        db.query(DependentORM)
        .filter(DependentORM.id == dependent_id, DependentORM.user_id == user.id)
        .first()
    )
    if not dependent:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dependent not found")
    db.delete(dependent)
    db.commit()
    db.refresh(user)
    return DependentsResponse(message="Dependent removed successfully", dependents=_dependents(user))


@router.get("/calculate-tax", response_model=TaxCalculationResponse)
def calculate_tax(user: UserORM = Depends(get_current_user)) -> TaxCalculationResponse:
    tax_year = resolve_year(get_settings()["tax_year"])
    result = estimate_tax(user.income, len(user.dependents), load_tax_table(tax_year))
    return TaxCalculationResponse(tax_year=tax_year, calculation=TaxCalculation(**asdict(result)))
