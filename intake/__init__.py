"""Text extraction and field recognition for uploaded tax documents."""

from .field_extractor import NOT_FOUND, RecognizerRule, extract_field, extract_money_field

__all__ = [
    "NOT_FOUND",
    "RecognizerRule",
    "extract_field",
    "extract_money_field",
]
