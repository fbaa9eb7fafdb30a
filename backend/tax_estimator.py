"""Bracket-based federal tax estimate over a user's stored income.

The table and the per-dependent deduction are configuration (see ``year_params/``);
the figures are a simplified estimate, not a filing-grade computation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Sequence, Tuple

from loader import get_year_params

logger = logging.getLogger(__name__)

INCOME_CATEGORIES: Tuple[str, ...] = (
    "wages",
    "self_employment",
    "interest",
    "dividends",
    "capital_gains",
    "other",
)

ZERO = Decimal("0")
CENTS = Decimal("0.01")
HUNDRED = Decimal("100")
# Integer digits accepted per amount; keeps every intermediate inside the default 28-digit context.
MAX_AMOUNT_DIGITS = 15


@dataclass(frozen=True)
class TaxBracket:
    """``upper_bound`` of ``None`` marks the open-ended top bracket."""

    upper_bound: Optional[Decimal]
    base_tax: Decimal
    rate: Decimal


@dataclass(frozen=True)
class TaxTable:
    brackets: Tuple[TaxBracket, ...]
    dependent_deduction: Decimal

    def __post_init__(self) -> None:
        if not self.brackets:
            raise ValueError("Tax table needs at least one bracket")
        bounds = [b.upper_bound for b in self.brackets[:-1]]
        if any(bound is None for bound in bounds):
            raise ValueError("Only the last bracket may be unbounded")
        if self.brackets[-1].upper_bound is not None:
            raise ValueError("Last bracket must be unbounded")
        if any(lo >= hi for lo, hi in zip(bounds, bounds[1:])):
            raise ValueError("Bracket bounds must be strictly increasing")

    def locate(self, income: Decimal) -> Tuple[Decimal, TaxBracket]:
        """Return ``(lower_bound, bracket)`` for the bracket containing ``income``."""
        lower = ZERO
        for bracket in self.brackets:
            if bracket.upper_bound is None or income <= bracket.upper_bound:
                return lower, bracket
            lower = bracket.upper_bound
        raise AssertionError("unreachable: last bracket is unbounded")


@dataclass(frozen=True)
class TaxCalculationResult:
    total_income: Decimal
    dependents_count: int
    dependent_deduction: Decimal
    tax_owed: Decimal
    effective_rate: Decimal


def _to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return ZERO
    try:
        # str() keeps floats such as 0.1 from dragging binary noise into the sum.
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        amount = None
    if amount is None or not amount.is_finite() or amount.adjusted() >= MAX_AMOUNT_DIGITS:
        logger.warning("Ignoring malformed income amount %r", value)
        return ZERO
    return amount


def build_tax_table(params: Mapping[str, Any]) -> TaxTable:
    """Build a :class:`TaxTable` from a year-parameter mapping."""
    raw_brackets: Sequence[Mapping[str, Any]] = params.get("brackets") or []
    brackets = tuple(
        TaxBracket(
            upper_bound=None if raw.get("upper_bound") is None else _to_decimal(raw["upper_bound"]),
            base_tax=_to_decimal(raw.get("base_tax")),
            rate=_to_decimal(raw.get("rate")),
        )
        for raw in raw_brackets
    )
    return TaxTable(brackets=brackets, dependent_deduction=_to_decimal(params.get("dependent_deduction")))


def load_tax_table(year: int) -> TaxTable:
    return build_tax_table(get_year_params(year))


def total_income(income: Optional[Mapping[str, Any]]) -> Decimal:
    """Sum every amount in the aggregate; missing or malformed entries count as zero."""
    if not income:
        return ZERO
    return sum((_to_decimal(v) for v in income.values()), ZERO)


def tax_before_deductions(income: Decimal, table: TaxTable) -> Decimal:
    if income <= ZERO:
        return ZERO
    lower, bracket = table.locate(income)
    return bracket.base_tax + (income - lower) * bracket.rate


def estimate_tax(
    income: Optional[Mapping[str, Any]],
    dependents_count: int,
    table: Optional[TaxTable] = None,
    *,
    tax_year: int = 2022,
) -> TaxCalculationResult:
    """Estimate tax owed for an income aggregate and dependent count.

    Args:
        income: Mapping of income category to amount.
        dependents_count: Number of dependents claimed.
        table: Bracket table to apply; defaults to the configured table for ``tax_year``.
        tax_year: Year used to look up the configured table when ``table`` is omitted.

    Returns:
        TaxCalculationResult with tax owed rounded to cents and the effective rate as a
        percentage rounded to two places (zero when there is no income).
    """
    table = table or load_tax_table(tax_year)
    dependents_count = max(0, int(dependents_count or 0))

    total = total_income(income)
    tax = tax_before_deductions(total, table)
    deduction = table.dependent_deduction * dependents_count
    tax = max(ZERO, tax - deduction)

    if total > ZERO:
        effective_rate = (tax / total * HUNDRED).quantize(CENTS, rounding=ROUND_HALF_UP)
    else:
        effective_rate = ZERO

    return TaxCalculationResult(
        total_income=total,
        dependents_count=dependents_count,
        dependent_deduction=deduction,
        tax_owed=tax.quantize(CENTS, rounding=ROUND_HALF_UP),
        effective_rate=effective_rate,
    )
