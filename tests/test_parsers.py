"""Tests for receipt text parsing."""

from decimal import Decimal

import pytest

from expense_report.core.parsers import (
    AMOUNT_MATCHERS,
    extract_amount,
    match_bare_decimal,
    match_bare_number,
    match_sum_to_pay,
    match_total,
    parse_amount,
    parse_receipt_date,
)


def test_hebrew_total_with_shekel_sign():
    assert extract_amount('סה"כ ₪45.90') == "45.90"


def test_labeled_total_beats_earlier_numbers():
    text = """
קפה נחת
רח' הרצל 12
אספרסו 12.00
קרואסון 14.50
סה"כ 26.50
מזומן 50.00
""".strip()
    assert extract_amount(text) == "26.50"


@pytest.mark.parametrize("text,expected", [
    ("סה״כ 45.90", "45.90"),
    ("סהכ: 18", "18"),
    ("סך הכל ₪ 99.00", "99.00"),
    ("Subtotal 40.00\nTax 5.90\nTotal 45.90", "45.90"),
    ("TOTAL: NIS 120", "120"),
])
def test_total_label_variants(text, expected):
    assert extract_amount(text) == expected


@pytest.mark.parametrize("text,expected", [
    ('סה"כ 1,234.50', "1234.50"),
    ('סה"כ לתשלום: 2,500.00', "2500.00"),
    ("Total 12,000", "12000"),
    ("Total 45.90.", "45.90"),
])
def test_thousands_separators_are_normalised(text, expected):
    assert extract_amount(text) == expected


@pytest.mark.parametrize("text", ["Total 45.9", "סה\"כ 1,2345", "קבלה 12,50", "Total 3.125"])
def test_partial_number_is_never_returned(text):
    assert extract_amount(text) == ""


def test_bare_patterns_do_not_split_numbers():
    assert match_bare_decimal("מחיר 1,234.50") == "1234.50"
    assert match_bare_number("ref 45.9") is None
    assert match_bare_number("45.9 then 7") == "7"


def test_sum_to_pay_used_when_no_total_line():
    assert extract_amount('מנה 30.00\nסה"כ לתשלום: 88.00') == "88.00"
    assert extract_amount("Items 3\nAmount due 17.20") == "17.20"


def test_fallback_prefers_first_decimal_number():
    assert extract_amount("12 items, total weight 3.50kg") == "3.50"


def test_fallback_bare_integer():
    assert extract_amount("קבלה 4471") == "4471"


@pytest.mark.parametrize("text", ["", "אין כאן סכום", "thank you!"])
def test_no_match_returns_empty_string(text):
    assert extract_amount(text) == ""


def test_matchers_are_ordered_and_independent():
    assert AMOUNT_MATCHERS == [match_total, match_sum_to_pay, match_bare_decimal, match_bare_number]
    assert match_total("no label 10.00") is None
    assert match_sum_to_pay("לתשלום 7.00") == "7.00"
    assert match_bare_decimal("12 items 3.50kg") == "3.50"
    assert match_bare_number("abc 12 def") == "12"


def test_custom_matcher_list():
    assert extract_amount("Total 5.00 and 7.25", matchers=[match_bare_decimal]) == "5.00"


@pytest.mark.parametrize("value,expected", [
    ("10.00", Decimal("10.00")),
    ("10.5", Decimal("10.5")),
    (" 7 ", Decimal("7")),
    ("0", Decimal("0")),
])
def test_parse_amount_valid(value, expected):
    assert parse_amount(value) == expected


@pytest.mark.parametrize("value", ["", None, "1.234", "-5", "12,50", "abc", "1e3"])
def test_parse_amount_invalid(value):
    assert parse_amount(value) is None


@pytest.mark.parametrize("text,expected", [
    ("תאריך: 05/03/2026 14:22", "2026-03-05"),
    ("5.3.26", "2026-03-05"),
    ("Date 2026-03-05", "2026-03-05"),
    ("31/02/2026 then 01/02/2026", "2026-02-01"),
])
def test_parse_receipt_date(text, expected):
    assert parse_receipt_date(text) == expected


def test_parse_receipt_date_missing():
    assert parse_receipt_date("no date here") is None
    assert parse_receipt_date("") is None
