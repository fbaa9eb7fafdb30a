from intake.field_extractor import (
    NOT_FOUND,
    RecognizerRule,
    extract_field,
    extract_money_field,
    normalize_money,
    rule_list,
    to_decimal,
)
from intake.w2_extractor import extract_w2_record
from rules.w2_patterns import W2_FIELDS


def test_first_matching_rule_wins():
    rules = rule_list(r"employer'?s name:\s*(\w+)", r"employer:\s*(\w+)")
    text = "Employer: Generic\nEmployer's name: Specific"
    assert extract_field(text, rules) == "Specific"


def test_empty_capture_falls_through_to_next_rule():
    rules = rule_list(r"employer name:[ \t]*([^\n]*)", r"employer:\s*(\w+)")
    text = "Employer name:\nEmployer: Acme"
    assert extract_field(text, rules) == "Acme"


def test_matching_is_case_insensitive():
    rules = rule_list(r"tax year\s*(\d{4})")
    assert extract_field("TAX YEAR 2022", rules) == "2022"


def test_explicit_group_index_is_used():
    rules = rule_list((r"(box)\s+1\s+(\d+)", 2))
    assert extract_field("Box 1 500", rules) == "500"


def test_missing_group_is_treated_as_no_match():
    rule = RecognizerRule(r"(a)", group=3)
    assert rule.capture("a") is None


def test_no_match_and_empty_text_return_none():
    rules = rule_list(r"wages\s*(\d+)")
    assert extract_field("nothing to see", rules) is None
    assert extract_field("", rules) is None


def test_money_strips_separators_and_pads_cents():
    rules = rule_list(r"wages\s*(\$?[\d,\.]+)")
    assert extract_money_field("Wages 1,234,567", rules) == "1234567.00"
    assert extract_money_field("Wages $52,345.67", rules) == "52345.67"
    assert extract_money_field("Wages 12.5", rules) == "12.50"


def test_malformed_amount_is_not_found():
    rules = rule_list(r"wages\s*([\d,\.]+)")
    assert extract_money_field("Wages 1.2.3", rules) is None
    assert normalize_money("") is None


def test_money_result_is_never_a_float():
    rules = rule_list(r"wages\s*([\d,\.]+)")
    value = extract_money_field("Wages 0.1", rules)
    assert isinstance(value, str)
    assert value == "0.10"


def test_to_decimal_maps_placeholders_to_none():
    assert to_decimal(NOT_FOUND) is None
    assert to_decimal(None) is None
    assert to_decimal("junk") is None
    assert str(to_decimal("10.50")) == "10.50"


def test_text_without_labels_yields_only_placeholders():
    record = extract_w2_record("lorem ipsum dolor sit amet")
    assert set(record) == set(W2_FIELDS)
    assert all(value == NOT_FOUND for value in record.values())


def test_oversized_amount_is_not_found():
    rules = rule_list(r"wages\s*([\d,\.]+)")
    assert extract_money_field("Wages " + "9" * 40, rules) is None
    assert extract_money_field("Wages 12,345,678,901", rules) is None
    assert extract_money_field("Wages 9,999,999,999.99", rules) == "9999999999.99"


def test_oversized_w2_box_degrades_to_placeholder():
    record = extract_w2_record("Wages, tips, other compensation " + "9" * 40)
    assert record["wages"] == NOT_FOUND
