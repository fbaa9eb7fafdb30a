"""Assemble a canonical W-2 record from document text."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List, Optional

from intake.field_extractor import NOT_FOUND, extract_field, extract_money_field, to_decimal
from rules.w2_patterns import MONEY_FIELDS, TEXT_FIELDS, W2_FIELDS

logger = logging.getLogger(__name__)

W2Record = Dict[str, str]


def extract_w2_record(text: str) -> W2Record:
    """Best-effort W-2 record; every field is present, missing ones hold ``NOT_FOUND``."""
    record: W2Record = {}
    for name, patterns in TEXT_FIELDS.items():
        record[name] = extract_field(text, patterns) or NOT_FOUND
    for name, patterns in MONEY_FIELDS.items():
        record[name] = extract_money_field(text, patterns) or NOT_FOUND

    missing = placeholder_fields(record)
    if missing:
        logger.warning("W-2 fields not found: %s", ", ".join(missing))
    return record


def placeholder_fields(record: Dict[str, Optional[str]]) -> List[str]:
    """Names of canonical fields that were not extracted."""
    return [name for name in W2_FIELDS if record.get(name) in (None, NOT_FOUND)]


def record_amount(record: Dict[str, Optional[str]], name: str) -> Optional[Decimal]:
    if name not in MONEY_FIELDS:
        raise KeyError(f"{name} is not a money field")
    return to_decimal(record.get(name))
