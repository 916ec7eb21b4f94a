#!/usr/bin/env python3
"""
Main CLI entrypoint for expense reports.
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Callable, Optional

from expense_report.core.llm import PROVIDER_NAMES
from expense_report.core.models import EmployeeDetails
from expense_report.core.ocr import DEFAULT_OCR_LANG
from expense_report.core.processor import ExpenseSession
from expense_report.core.storage import (DEFAULT_DB_PATH, init_store_db,
                                         load_employee_details, save_employee_details)
from expense_report.core.utils import DEFAULT_EXPORT_NAME, MAX_DESCRIPTION_LEN, format_date

FIELD_KEYS = {"a": "amount", "d": "date", "t": "description"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="OCR receipts and build a Hebrew expense reimbursement report (PDF)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # OCR two receipts, review the entries and write expenses.pdf
  expense-report receipts/taxi.jpg receipts/lunch.png

  # Non-interactive, with saved employee details, then open a mail draft
  expense-report --no-review --mail-to finance@example.com scans/*.jpg

  # First run: store employee details for next time
  expense-report --name "ישראל ישראלי" --id 12345 receipt.jpg
        """
    )
    parser.add_argument("receipts", nargs="+", type=Path,
                        help="Receipt images or PDFs, in report order")
    parser.add_argument("--name", help="Employee name (saved for next runs)")
    parser.add_argument("--id", dest="employee_id", help="Employee id (saved for next runs)")
    parser.add_argument("--output", "-o", type=Path, default=Path(DEFAULT_EXPORT_NAME),
                        help=f"Output PDF (default: ./{DEFAULT_EXPORT_NAME})")
    parser.add_argument("--db", type=Path,
                        help=f"Settings database (default: EXPENSE_REPORT_DB env or {DEFAULT_DB_PATH})")
    parser.add_argument("--ocr-lang",
                        help=f"Tesseract language(s) (default: OCR_LANG env or {DEFAULT_OCR_LANG})")
    parser.add_argument("--font",
                        help="TrueType font with Hebrew glyphs (default: EXPENSE_REPORT_FONT env or system font)")
    parser.add_argument("--mail-to", metavar="ADDRESS",
                        help="Open a mail draft to ADDRESS after export")
    parser.add_argument("--no-review", action="store_true",
                        help="Skip the interactive review of entries")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Show detailed parsing information for debugging")

    # LLM configuration
    parser.add_argument("--llm-provider", choices=PROVIDER_NAMES,
                        help="LLM provider for description/date suggestions (or LLM_PROVIDER env var)")
    parser.add_argument("--llm-model",
                        help="LLM model to use (uses provider default if not specified, or LLM_MODEL env var)")
    parser.add_argument("--no-llm", action="store_true",
                        help="Disable LLM suggestions even if LLM_PROVIDER is set")
    return parser


def resolve_employee(args, db_path: Path,
                     input_fn: Callable[[str], str] = input) -> Optional[EmployeeDetails]:
    """Employee details from args, falling back to saved values, then prompting."""
    saved = load_employee_details(db_path)
    name = args.name or (saved.name if saved else "")
    employee_id = args.employee_id or (saved.id if saved else "")

    if not name:
        name = input_fn("שם העובד: ").strip()
    if not employee_id:
        employee_id = input_fn("מספר עובד: ").strip()

    try:
        details = EmployeeDetails(name=name, id=employee_id)
    except ValueError as e:
        print(f"[ERROR] {e}")
        return None

    if details != saved:
        save_employee_details(db_path, details)
    return details


def print_entries(session: ExpenseSession):
    print(f"{'#':>3}  {'Date':<10}  {'Amount':>10}  Description")
    for i, entry in enumerate(session.store, 1):
        print(f"{i:>3}  {format_date(entry.date):<10}  {entry.amount or '-':>10}  {entry.description}")
    print(f"     Total: {session.store.total():.2f}")


def review_entries(session: ExpenseSession, input_fn: Callable[[str], str] = input):
    """Interactive edit loop: pick an entry, a field, a new value; empty input finishes."""
    while True:
        print_entries(session)
        choice = input_fn("Entry # to edit (Enter to finish): ").strip()
        if not choice:
            return
        if not choice.isdigit():
            print("[WARN] Enter an entry number")
            continue
        index = int(choice) - 1
        key = input_fn("Field: [a]mount, [d]ate (YYYY-MM-DD), [t]ext description: ").strip().lower()
        field = FIELD_KEYS.get(key[:1])
        if not field:
            print("[WARN] Unknown field")
            continue
        value = input_fn(f"New {field}: ").strip()
        if field == "description" and len(value) > MAX_DESCRIPTION_LEN:
            print(f"[WARN] Description cut to {MAX_DESCRIPTION_LEN} characters")
        if not session.update(index, field, value):
            print(f"[WARN] No entry #{choice}")


def main(argv=None) -> int:
    """Main CLI entrypoint."""
    args = build_parser().parse_args(argv)

    db_path = args.db or Path(os.getenv("EXPENSE_REPORT_DB", DEFAULT_DB_PATH.as_posix()))
    ocr_lang = args.ocr_lang or os.getenv("OCR_LANG", DEFAULT_OCR_LANG)
    font_path = args.font or os.getenv("EXPENSE_REPORT_FONT")

    llm_provider = None if args.no_llm else (args.llm_provider or os.getenv("LLM_PROVIDER"))
    if llm_provider and llm_provider not in PROVIDER_NAMES:
        print(f"[ERROR] Invalid LLM provider: {llm_provider}")
        print(f"[ERROR] Must be one of: {', '.join(PROVIDER_NAMES)}")
        return 1
    llm_model = args.llm_model or os.getenv("LLM_MODEL")
    if llm_provider:
        print(f"[INFO] LLM: {llm_provider} ({llm_model or 'default'})")

    init_store_db(db_path)
    details = resolve_employee(args, db_path)
    if details is None:
        return 1
    print(f"[INFO] Employee: {details.name} ({details.id})")

    session = ExpenseSession(
        details,
        ocr_lang=ocr_lang,
        llm_provider=llm_provider,
        llm_model=llm_model,
        font_path=font_path,
        verbose=args.verbose,
    )

    for receipt in args.receipts:
        session.upload(receipt)

    if not len(session.store):
        print("[ERROR] No receipts could be processed.")
        return 1

    if not args.no_review:
        review_entries(session)

    report = session.export(args.output)
    if report is None:
        return 1
    print(f"[OK] Wrote {args.output} (total {report.total})")

    if args.mail_to:
        if session.send_mail(args.mail_to, args.output.name):
            print(f"[OK] Opened mail draft to {args.mail_to}; attach {args.output.name} before sending")
        else:
            print(f"[WARN] No mail client available. Link:\n{session.mail_link(args.mail_to, args.output.name)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
