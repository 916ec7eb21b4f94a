"""
Utility functions and constants for expense reports.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

# File type constants
IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp", ".webp", ".gif"}
PDF_EXTS = {".pdf"}

# Browser CSS pixel (96 DPI) in millimetres
MM_PER_PX = 25.4 / 96
MM_PER_PT = 25.4 / 72

DEFAULT_EXPORT_NAME = "expenses.pdf"
MAX_DESCRIPTION_LEN = 30
CURRENCY = "₪"


def today_iso() -> str:
    """Return today's date as YYYY-MM-DD."""
    return dt.date.today().isoformat()


def is_iso_date(s: Optional[str]) -> bool:
    """Check that a string is a valid YYYY-MM-DD date."""
    if not s:
        return False
    try:
        dt.date.fromisoformat(s)
        return True
    except ValueError:
        return False


def format_date(s: Optional[str]) -> str:
    """Format an ISO date as DD/MM/YYYY; anything else is returned unchanged."""
    if not is_iso_date(s):
        return s or ""
    return dt.date.fromisoformat(s).strftime("%d/%m/%Y")


def format_amount(v: Optional[Decimal]) -> str:
    """Format amount with exactly two decimals."""
    if v is None:
        return ""
    return f"{v.quantize(Decimal('0.01')):.2f}"
