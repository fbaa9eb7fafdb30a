"""Form 1098 drafts built from a request plus the filer's stored profile."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from backend.db_models import Form1098ORM, UserORM
from backend.schemas import Form1098Create

logger = logging.getLogger(__name__)


def _full_name(user: UserORM) -> str:
    parts = [p for p in (user.first_name, user.last_name) if p]
    return " ".join(parts) or user.email


def _format_address(address: Optional[Dict[str, Any]]) -> Optional[str]:
    if not address:
        return None
    street = address.get("street")
    locality = ", ".join(p for p in (address.get("city"), address.get("state")) if p)
    if address.get("zip_code"):
        locality = f"{locality} {address['zip_code']}".strip()
    lines = [p for p in (street, locality) if p]
    return "\n".join(lines) or None


def stored_mortgage_interest(user: UserORM) -> Decimal:
    """Itemized mortgage interest from the user's deductions, zero when absent."""
    itemized = (user.deductions or {}).get("itemized_deductions") or {}
    raw = itemized.get("mortgage_interest")
    if raw in (None, ""):
        return Decimal("0")
    try:
        return Decimal(str(raw))
    except InvalidOperation:
        logger.warning("Ignoring malformed stored mortgage interest %r for user %s", raw, user.id)
        return Decimal("0")


def build_draft(user: UserORM, payload: Form1098Create, default_tax_year: int) -> Form1098ORM:
    data = payload.model_dump()
    data["borrower_name"] = data.get("borrower_name") or _full_name(user)
    data["borrower_ssn"] = data.get("borrower_ssn") or user.ssn
    data["borrower_address"] = data.get("borrower_address") or _format_address(user.address)
    if data.get("mortgage_interest_received") is None:
        data["mortgage_interest_received"] = stored_mortgage_interest(user)
    data["tax_year"] = data.get("tax_year") or default_tax_year

    return Form1098ORM(user_id=user.id, status="draft", metadata_json={"source": "dashboard"}, **data)


def create_draft(db: Session, user: UserORM, payload: Form1098Create, default_tax_year: int) -> Form1098ORM:
    form = build_draft(user, payload, default_tax_year)
    db.add(form)
    db.commit()
    db.refresh(form)
    logger.info("Created Form 1098 draft %s for user %s (tax year %s)", form.id, user.id, form.tax_year)
    return form


def get_owned_form(db: Session, user: UserORM, form_id: str) -> Optional[Form1098ORM]:
    return (
        db.query(Form1098ORM)
        .filter(Form1098ORM.id == form_id, Form1098ORM.user_id == user.id)
        .first()
    )
