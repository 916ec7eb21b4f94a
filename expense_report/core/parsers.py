"""
Parsers for extracting information from receipt text.
"""

import re
import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional

# Integer part, optionally with thousands separators (1,234)
_INTEGER = r"(?:\d{1,3}(?:,\d{3})+|\d+)"
# A number must not continue into more digits (45.9, 1,2345)
_NUMBER_END = r"(?![.,]?\d)"
_NUMBER_START = r"(?<![\d.,])"

# Optional separator and currency marker between a label and its amount
_AMOUNT_TAIL = (r"\s*[:\-=]?\s*(?:₪|ש[\"״]ח|NIS|ILS)?\s*("
                + _INTEGER + r"(?:\.\d{2})?)" + _NUMBER_END)

TOTAL_PATTERN = re.compile(
    r"(?:סה[\"״'׳]?כ|סך\s+הכו?ל|\btotal\b)" + _AMOUNT_TAIL,
    flags=re.IGNORECASE,
)
SUM_TO_PAY_PATTERN = re.compile(
    r"(?:(?:סכום\s+)?לתשלום|\bamount\s+due\b|\bto\s+pay\b)" + _AMOUNT_TAIL,
    flags=re.IGNORECASE,
)
BARE_DECIMAL_PATTERN = re.compile(_NUMBER_START + _INTEGER + r"\.\d{2}" + _NUMBER_END)
BARE_NUMBER_PATTERN = re.compile(_NUMBER_START + _INTEGER + _NUMBER_END)

DATE_PATTERNS = [
    re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b"),               # YYYY-MM-DD
    re.compile(r"\b(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{4}|\d{2})\b"),  # DD/MM/YYYY, DD.MM.YY
]

_VALID_AMOUNT = re.compile(r"^\d+(?:\.\d{1,2})?$")

Matcher = Callable[[str], Optional[str]]


def _pattern_matcher(pattern: re.Pattern) -> Matcher:
    def match(text: str) -> Optional[str]:
        m = pattern.search(text)
        if not m:
            return None
        found = m.group(1) if pattern.groups else m.group(0)
        return found.replace(",", "")
    return match


match_total = _pattern_matcher(TOTAL_PATTERN)
match_sum_to_pay = _pattern_matcher(SUM_TO_PAY_PATTERN)
match_bare_decimal = _pattern_matcher(BARE_DECIMAL_PATTERN)
match_bare_number = _pattern_matcher(BARE_NUMBER_PATTERN)

# Highest priority first
AMOUNT_MATCHERS: List[Matcher] = [
    match_total,
    match_sum_to_pay,
    match_bare_decimal,
    match_bare_number,
]


def extract_amount(text: str, matchers: Optional[List[Matcher]] = None) -> str:
    """
    Extract the total amount from receipt text.

    Matchers are tried in order and the first hit wins. Returns an empty
    string when nothing matches, which means the amount needs manual entry.
    """
    if not text:
        return ""
    for matcher in matchers or AMOUNT_MATCHERS:
        found = matcher(text)
        if found:
            return found
    return ""


def parse_amount(value: Optional[str]) -> Optional[Decimal]:
    """Parse a non-negative amount with at most two decimals, else None."""
    s = (value or "").strip()
    if not _VALID_AMOUNT.match(s):
        return None
    try:
        return Decimal(s)
    except InvalidOperation:
        return None


def parse_receipt_date(text: str) -> Optional[str]:
    """Extract the first valid date from receipt text as YYYY-MM-DD."""
    for pat in DATE_PATTERNS:
        for m in pat.finditer(text or ""):
            g = m.groups()
            if len(g[0]) == 4:
                y, mo, d = int(g[0]), int(g[1]), int(g[2])
            else:
                # Israeli receipts print day first
                d, mo, y = int(g[0]), int(g[1]), int(g[2])
                if y < 100:
                    y += 2000
            try:
                return dt.date(y, mo, d).isoformat()
            except ValueError:
                continue
    return None
