"""
Expense session orchestration: receipt upload -> OCR -> entry, entries -> report.
"""

from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from .errors import RecognitionError, RenderError, UploadError, UploadInProgressError
from .llm import suggest_fields
from .mail import open_mail_client, report_mailto_link
from .models import EmployeeDetails, ExpenseEntry, ExpenseStore
from .ocr import DEFAULT_OCR_LANG, check_receipt_file, recognize_receipt
from .parsers import extract_amount, parse_receipt_date
from .reporting import RenderedReport, ReportLayout, build_report_pdf
from .utils import DEFAULT_EXPORT_NAME, today_iso


class UploadState(str, Enum):
    """Upload lifecycle: IDLE -> UPLOADING -> RECOGNIZING -> APPENDED, or -> FAILED -> IDLE."""
    IDLE = "idle"
    UPLOADING = "uploading"
    RECOGNIZING = "recognizing"
    APPENDED = "appended"
    FAILED = "failed"


BUSY_STATES = {UploadState.UPLOADING, UploadState.RECOGNIZING}

_NOTIFY_TAGS = {"info": "[INFO]", "success": "[OK]", "warn": "[WARN]", "error": "[ERROR]"}


def print_notifier(title: str, message: str, level: str = "info"):
    """Default notifier: one tagged console line."""
    print(f"{_NOTIFY_TAGS.get(level, '[INFO]')} {title}: {message}")


class ExpenseSession:
    """One employee's report: uploads receipts, holds entries, exports the PDF."""

    def __init__(self, details: EmployeeDetails,
                 recognizer: Callable[[Path, str], str] = recognize_receipt,
                 ocr_lang: str = DEFAULT_OCR_LANG,
                 notify: Callable[..., None] = print_notifier,
                 llm_provider: Optional[str] = None,
                 llm_model: Optional[str] = None,
                 font_path: Optional[str] = None,
                 layout: Optional[ReportLayout] = None,
                 verbose: bool = False):
        """
        Initialize an expense session.

        Args:
            details: Employee submitting the report
            recognizer: OCR callable (path, lang) -> text
            ocr_lang: Tesseract language hint
            notify: Callback (title, message, level) for user-visible notices
            llm_provider: Provider for description/date suggestions, None disables
            llm_model: LLM model name (uses provider default if not specified)
            font_path: TrueType font with Hebrew glyphs for the PDF
            layout: Report layout (default ReportLayout())
            verbose: Whether to show verbose debugging output
        """
        self.details = details
        self.recognizer = recognizer
        self.ocr_lang = ocr_lang
        self.notify = notify
        self.llm_provider = llm_provider
        self.llm_model = llm_model
        self.font_path = font_path
        self.layout = layout or ReportLayout()
        self.verbose = verbose

        self.store = ExpenseStore()
        self.state = UploadState.IDLE
        self.transitions: List[UploadState] = [UploadState.IDLE]

    @property
    def busy(self) -> bool:
        """True while a receipt is being read or recognized."""
        return self.state in BUSY_STATES

    def _set_state(self, state: UploadState):
        self.state = state
        self.transitions.append(state)
        if self.verbose:
            print(f"  [DEBUG] Upload state: {state.value}")

    def upload(self, path: Path) -> Optional[ExpenseEntry]:
        """
        Recognize a receipt and append it as a new entry.

        Returns:
            The new entry, or None if the upload failed (nothing is appended)

        Raises:
            UploadInProgressError: if another upload is still running
        """
        if self.busy:
            raise UploadInProgressError(self.state.value)

        path = Path(path)
        self.transitions = [self.state]
        self._set_state(UploadState.UPLOADING)
        self.notify("מעבד קבלה", f"אנא המתן... ({path.name})", "info")

        try:
            check_receipt_file(path)
            self._set_state(UploadState.RECOGNIZING)
            text = self.recognizer(path, self.ocr_lang)
        except (UploadError, RecognitionError) as e:
            return self._fail(e)
        except Exception as e:
            return self._fail(RecognitionError(f"OCR failed for {path.name}: {e}"))

        entry = self._build_entry(text, path)
        index = self.store.append(entry)
        self._set_state(UploadState.APPENDED)

        if entry.amount:
            self.notify("קבלה נוספה בהצלחה", "אנא השלם את הפרטים החסרים", "success")
        else:
            self.notify("קבלה נוספה", f"לא זוהה סכום בקבלה #{index + 1}, יש להזין ידנית", "warn")
        return entry

    def _fail(self, error: Exception) -> None:
        self._set_state(UploadState.FAILED)
        self.notify("שגיאה", f"אירעה שגיאה בעיבוד הקבלה: {error}", "error")
        self._set_state(UploadState.IDLE)
        return None

    def _build_entry(self, text: str, path: Path) -> ExpenseEntry:
        amount = extract_amount(text)
        suggestion = suggest_fields(text, self.llm_provider, self.llm_model)
        date = suggestion["date"] or parse_receipt_date(text) or today_iso()

        if self.verbose:
            print(f"  [DEBUG] Amount: '{amount or '(none)'}'")
            print(f"  [DEBUG] Date: {date}")
            print(f"  [DEBUG] LLM: {suggestion['reasoning']}")
            if not amount:
                print("  [DEBUG] First 5 lines of OCR text:")
                for i, line in enumerate(text.splitlines()[:5], 1):
                    print(f"    {i}: {line[:80]}")

        return ExpenseEntry(
            amount=amount,
            date=date,
            description=suggestion["description"],
            attachment_ref=path.as_posix(),
        )

    def update(self, index: int, field: str, value: str) -> bool:
        """Edit one field of an entry; invalid index or field is a no-op."""
        return self.store.update(index, field, value)

    def export(self, out_pdf: Path = Path(DEFAULT_EXPORT_NAME)) -> Optional[RenderedReport]:
        """Render the report to `out_pdf`. Returns None if it could not be rendered or written."""
        try:
            pdf_bytes, report = build_report_pdf(self.details, self.store.entries(),
                                                 font_path=self.font_path, layout=self.layout)
        except (RenderError, OSError) as e:
            self.notify("שגיאה", f"Could not render the report: {e}", "error")
            return None

        try:
            out_pdf.parent.mkdir(parents=True, exist_ok=True)
            out_pdf.write_bytes(pdf_bytes)
        except OSError as e:
            self.notify("שגיאה", f"Could not write {out_pdf}: {e}", "error")
            return None

        if report.failed_attachments:
            failed = "; ".join(f"#{i} ({error})" for i, error in report.attachment_errors.items())
            self.notify("אזהרה", f"Could not embed receipts {failed}", "warn")
        self.notify("הדוח נוצר", f"{out_pdf} ({report.pages} pages)", "success")
        return report

    def mail_link(self, recipient: str = "", filename: str = DEFAULT_EXPORT_NAME) -> str:
        return report_mailto_link(self.details, self.store.total(), recipient, filename)

    def send_mail(self, recipient: str = "", filename: str = DEFAULT_EXPORT_NAME) -> bool:
        """Open the mail client with a prefilled message; delivery is not tracked."""
        return open_mail_client(self.mail_link(recipient, filename))
