"""
Hand the finished report off to the user's mail client.

A mailto: link cannot carry attachments, so the body asks the user to attach
the exported file.
"""

import webbrowser
from decimal import Decimal
from typing import Callable, Optional
from urllib.parse import quote

from .models import EmployeeDetails
from .utils import CURRENCY, DEFAULT_EXPORT_NAME, format_amount

SUBJECT_TEMPLATE = "דוח החזר הוצאות - {name} ({id})"
BODY_TEMPLATE = (
    "שלום,\n\n"
    "מצורף דוח החזר הוצאות.\n"
    "שם העובד: {name}\n"
    "מספר עובד: {id}\n"
    'סה"כ: {total} {currency}\n\n'
    "נא לצרף את הקובץ {filename}."
)


def build_mailto_link(recipient: str, subject: str, body: str) -> str:
    """Build a mailto: URL with percent-encoded subject and body."""
    return f"mailto:{quote(recipient or '', safe='@,')}?subject={quote(subject)}&body={quote(body)}"


def report_mailto_link(details: EmployeeDetails, total: Decimal,
                       recipient: str = "", filename: str = DEFAULT_EXPORT_NAME) -> str:
    """Compose link for an expense report."""
    values = {
        "name": details.name,
        "id": details.id,
        "total": format_amount(total),
        "currency": CURRENCY,
        "filename": filename,
    }
    return build_mailto_link(recipient, SUBJECT_TEMPLATE.format(**values), BODY_TEMPLATE.format(**values))


def open_mail_client(link: str, opener: Optional[Callable[[str], bool]] = None) -> bool:
    """Open the compose link; fire-and-forget, returns whether a handler accepted it."""
    opener = opener or webbrowser.open
    try:
        return bool(opener(link))
    except webbrowser.Error as e:
        print(f"[WARN] Could not open mail client: {e}")
        return False
