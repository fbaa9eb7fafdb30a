"""Ordered pattern matching over text decoded from uploaded tax documents.

Each logical field (employer name, box 1 wages, ...) is described by an ordered list of
recognizer rules. The first rule whose capture group yields a non-empty value wins; later
rules are only tried when earlier ones miss. Rules overlap on purpose so that different
phrasings of the same box label still resolve, which means callers must list the most
specific phrasing first.

Nothing in this module raises for a missing or unparseable value: absent fields come back
as ``None`` and the caller decides how to treat them.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Pattern

logger = logging.getLogger(__name__)

NOT_FOUND = "Not found"

CENTS = Decimal("0.01")
# Integer digits an extracted amount may carry; matches the Numeric(12, 2) box columns.
MAX_AMOUNT_DIGITS = 10


@dataclass(frozen=True)
class RecognizerRule:
    """A single pattern plus the index of the group holding the field value."""

    pattern: str
    group: int = 1
    _compiled: Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", re.compile(self.pattern, re.IGNORECASE))

    def capture(self, text: str) -> Optional[str]:
        match = self._compiled.search(text)
        if not match:
            return None
        try:
            value = match.group(self.group)
        except IndexError:
            logger.warning("Rule %r has no group %d", self.pattern, self.group)
            return None
        if value is None:
            return None
        value = value.strip()
        return value or None


def rule_list(*patterns: str | tuple[str, int]) -> tuple[RecognizerRule, ...]:
    """Build an ordered rule list from bare patterns or ``(pattern, group)`` pairs."""
    built = []
    for item in patterns:
        if isinstance(item, tuple):
            built.append(RecognizerRule(item[0], item[1]))
        else:
            built.append(RecognizerRule(item))
    return tuple(built)


def extract_field(text: str, patterns: Iterable[RecognizerRule]) -> Optional[str]:
    """Return the first non-empty capture from ``patterns`` in order, or ``None``."""
    if not text:
        return None
    for rule in patterns:
        value = rule.capture(text)
        if value is not None:
            return value
    return None


def normalize_money(raw: str) -> Optional[str]:
    """Normalize a captured amount to a plain two-decimal string.

    Thousands separators and a leading dollar sign are dropped. Values that do not
    parse as a decimal, or that run past ``MAX_AMOUNT_DIGITS`` integer digits, are
    reported as missing.
    """
    cleaned = raw.replace(",", "").replace("$", "").strip()
    if not cleaned:
        return None
    if "." not in cleaned:
        cleaned = f"{cleaned}.00"
    try:
        amount = Decimal(cleaned)
        if not amount.is_finite() or amount.adjusted() >= MAX_AMOUNT_DIGITS:
            raise InvalidOperation(cleaned)
        return str(amount.quantize(CENTS))
    except InvalidOperation:
        logger.warning("Malformed amount %r; treating as not found", raw)
        return None


def extract_money_field(text: str, patterns: Iterable[RecognizerRule]) -> Optional[str]:
    """Like :func:`extract_field` but returns a normalized decimal string."""
    raw = extract_field(text, patterns)
    if raw is None:
        return None
    return normalize_money(raw)


def to_decimal(value: Optional[str]) -> Optional[Decimal]:
    """Parse a normalized record value; placeholders and junk map to ``None``."""
    if value is None or value == NOT_FOUND:
        return None
    try:
        return Decimal(value)
    except InvalidOperation:
        return None


__all__ = [
    "NOT_FOUND",
    "RecognizerRule",
    "extract_field",
    "extract_money_field",
    "normalize_money",
    "rule_list",
    "to_decimal",
]

