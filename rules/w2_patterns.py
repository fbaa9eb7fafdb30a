"""Recognizer rules for W-2 text, ordered from most to least specific per field."""

from __future__ import annotations

from typing import Dict, Tuple

from intake.field_extractor import RecognizerRule, rule_list

# Amount capture; the lookahead keeps a bare box number ("2 Federal ...") from being read as a value.
AMOUNT = r"\$?\s*(?!\d{1,2}[a-z]?\s+[a-z])(\d[\d,]*(?:\.\d+)?)"
GAP = r"[^\d$]*"
SSN = r"(\d{3}-?\d{2}-?\d{4}|X{3}-?X{2}-?\d{4})"
EIN = r"(\d{2}-?\d{7})"
LINE = r"([^\n]+)"


def _box(number: str) -> str:
    return rf"\bbox\s*{number}\b{GAP}{AMOUNT}"


def _line(number: str, label: str) -> str:
    return rf"(?m)^\s*{number}\s+{label}{GAP}{AMOUNT}"


TEXT_FIELDS: Dict[str, Tuple[RecognizerRule, ...]] = {
    "employer_name": rule_list(
        rf"employer'?s\s+name,?\s+address,?\s+and\s+zip\s+code\s*[:\-]?\s*{LINE}",
        rf"employer'?s\s+name\s*[:\-]?\s*{LINE}",
        rf"\bemployer\s*[:\-]\s*{LINE}",
    ),
    "employer_ein": rule_list(
        rf"employer\s+identification\s+number\s*(?:\(EIN\))?{GAP}{EIN}",
        rf"\bEIN\b{GAP}{EIN}",
        r"\b(\d{2}-\d{7})\b",
    ),
    "employer_address": rule_list(
        rf"employer'?s\s+address\s*[:\-]?\s*{LINE}",
    ),
    "employee_name": rule_list(
        r"employee'?s\s+first\s+name\s+and\s+initial[^\n]*\n\s*([^\n]+)",
        rf"employee'?s\s+name\s*[:\-]?\s*{LINE}",
        rf"\bemployee\s*[:\-]\s*{LINE}",
    ),
    "employee_ssn": rule_list(
        rf"employee'?s\s+social\s+security\s+number{GAP}{SSN}",
        rf"\bSSN\b{GAP}{SSN}",
        r"\b(\d{3}-\d{2}-\d{4})\b",
    ),
    "employee_address": rule_list(
        rf"employee'?s\s+address(?:\s+and\s+zip\s+code)?\s*[:\-]?\s*{LINE}",
    ),
    "tax_year": rule_list(
        r"wage\s+and\s+tax\s+statement\s*(20\d{2})\b",
        r"\btax\s+year\s*[:\-]?\s*(20\d{2})\b",
        r"form\s+w-?2\b[^\n]*?\b(20\d{2})\b",
    ),
    "state": rule_list(
        r"\b15\s+state\s*[:\-]?\s*((?-i:[A-Z]{2}))\b",
        r"\bstate\s*[:\-]\s*((?-i:[A-Z]{2}))\b",
    ),
}

MONEY_FIELDS: Dict[str, Tuple[RecognizerRule, ...]] = {
    "wages": rule_list(
        rf"wages,?\s+tips,?\s+(?:and\s+)?other\s+comp(?:ensation)?{GAP}{AMOUNT}",
        _box("1"),
        _line("1", "wages"),
    ),
    "federal_tax_withheld": rule_list(
        rf"federal\s+income\s+tax\s+withheld{GAP}{AMOUNT}",
        rf"federal\s+(?:tax\s+)?withholding{GAP}{AMOUNT}",
        _box("2"),
    ),
    "social_security_wages": rule_list(
        rf"social\s+security\s+wages{GAP}{AMOUNT}",
        _box("3"),
    ),
    "social_security_tax": rule_list(
        rf"social\s+security\s+tax\s+withheld{GAP}{AMOUNT}",
        rf"social\s+security\s+tax{GAP}{AMOUNT}",
        _box("4"),
    ),
    "medicare_wages": rule_list(
        rf"medicare\s+wages\s+and\s+tips{GAP}{AMOUNT}",
        rf"medicare\s+wages{GAP}{AMOUNT}",
        _box("5"),
    ),
    "medicare_tax": rule_list(
        rf"medicare\s+tax\s+withheld{GAP}{AMOUNT}",
        rf"medicare\s+tax{GAP}{AMOUNT}",
        _box("6"),
    ),
    "social_security_tips": rule_list(
        rf"social\s+security\s+tips{GAP}{AMOUNT}",
        _box("7"),
    ),
    "allocated_tips": rule_list(
        rf"allocated\s+tips{GAP}{AMOUNT}",
        _box("8"),
    ),
    "dependent_care_benefits": rule_list(
        rf"dependent\s+care\s+benefits{GAP}{AMOUNT}",
        _box("10"),
    ),
    "nonqualified_plans": rule_list(
        rf"nonqualified\s+plans{GAP}{AMOUNT}",
        _box("11"),
    ),
    "state_wages": rule_list(
        rf"state\s+wages,?\s+tips,?\s+etc\.?{GAP}{AMOUNT}",
        rf"state\s+wages{GAP}{AMOUNT}",
        _box("16"),
    ),
    "state_tax": rule_list(
        rf"state\s+income\s+tax{GAP}{AMOUNT}",
        _box("17"),
    ),
}

W2_FIELDS: Tuple[str, ...] = tuple(TEXT_FIELDS) + tuple(MONEY_FIELDS)
