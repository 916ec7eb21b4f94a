"""
PDF generation for expense reports.

The layout works in millimetres from the top-left corner of an A4 page and
only talks to a renderer through a handful of primitives (new page, line,
image, right-aligned text, RTL flag). ReportLabRenderer implements them on
reportlab and pypdf.
"""

import io
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .errors import RenderError
from .models import EmployeeDetails, ExpenseEntry
from .textimage import RENDER_SCALE, render_text_as_image
from .utils import CURRENCY, MM_PER_PT, MM_PER_PX, PDF_EXTS, format_amount, format_date

# A4 in millimetres
PAGE_WIDTH = 210.0
PAGE_HEIGHT = 297.0
BOTTOM_LIMIT = PAGE_HEIGHT - 20

TITLE = "טופס החזר הוצאות"
NAME_LABEL = "שם"
ID_LABEL = "מספר עובד"
TOTAL_LABEL = 'סה"כ'
RECEIPT_LABEL = "קבלה מספר"
EMPLOYEE_SIGNATURE = "חתימת העובד: _________________"
MANAGER_SIGNATURE = "חתימת מנהל: _________________"
ATTACHMENT_ERROR = "שגיאה בטעינת הקובץ"

# Table geometry: columns run right to left (date, description, amount)
TABLE_LEFT = 20.0
TABLE_RIGHT = 190.0
COLUMN_DIVIDERS = (150.0, 90.0)
FIRST_TABLE_TOP = 65.0
CONT_TABLE_TOP = 20.0
ROW_HEIGHT = 10.0
CELL_PADDING = 3.0
TEXT_OFFSET = 2.0
HEADERS = ("תאריך", "פירוט", "סכום")
# Space needed below the table for the total and both signature lines
FOOTER_HEIGHT = 50.0

# Attachment area inside the margins
ATTACH_LEFT = 20.0
ATTACH_TOP = 40.0
ATTACH_MAX_WIDTH = PAGE_WIDTH - 40
ATTACH_MAX_HEIGHT = PAGE_HEIGHT - 60

TITLE_SIZE = 16
HEADER_SIZE = 14
TEXT_SIZE = 12


@dataclass
class Placement:
    """Where and how big an attachment image is drawn."""
    x: float
    y: float
    width: float
    height: float
    scale: float


@dataclass
class RenderedReport:
    """Summary of a rendered report."""
    total: str
    pages: int
    summary_pages: int
    attachment_pages: int
    failed_attachments: List[int] = field(default_factory=list)
    attachment_errors: Dict[int, str] = field(default_factory=dict)


def fit_scale(width: float, height: float,
              max_width: float = ATTACH_MAX_WIDTH,
              max_height: float = ATTACH_MAX_HEIGHT) -> float:
    """Uniform scale that fits width x height into the box without upscaling."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid image size: {width}x{height}")
    return min(max_width / width, max_height / height, 1.0)


def place_attachment(width: float, height: float) -> Placement:
    """Scale an attachment into the page area and centre it both ways."""
    scale = fit_scale(width, height)
    w, h = width * scale, height * scale
    x = ATTACH_LEFT + (ATTACH_MAX_WIDTH - w) / 2
    y = ATTACH_TOP + (ATTACH_MAX_HEIGHT - h) / 2
    return Placement(x, y, w, h, scale)


def load_attachment(ref: str) -> Tuple[object, float, float]:
    """
    Load an attachment as a PIL image with its natural size in millimetres.

    Raster images are measured at 96 DPI; PDFs use their first page box.

    Raises:
        RenderError: if the attachment cannot be loaded
    """
    path = Path(ref)
    try:
        if path.suffix.lower() in PDF_EXTS:
            from .ocr import rasterize_pdf_page
            img, w_pt, h_pt = rasterize_pdf_page(path)
            return img, w_pt * MM_PER_PT, h_pt * MM_PER_PT

        from PIL import Image, ImageOps
        img = Image.open(path)
        img.load()
        # Phone photos carry their rotation in EXIF
        img = ImageOps.exif_transpose(img)
        w_px, h_px = img.size
        return img, w_px * MM_PER_PX, h_px * MM_PER_PX
    except Exception as e:
        raise RenderError(f"Could not load attachment {path.name}: {e}", {"ref": ref}) from e


def flatten_image(img):
    """Convert to RGB/L, compositing any transparency onto white."""
    if img.mode in ("RGB", "L"):
        return img
    if img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info:
        from PIL import Image

        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, "white")
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return img.convert("RGB")


class ReportLabRenderer:
    """Layout primitives on top of a reportlab canvas."""

    def __init__(self, title: str = TITLE, author: str = "", font_path: Optional[str] = None):
        from reportlab.lib.pagesizes import A4
        from reportlab.pdfgen import canvas

        self._buffer = io.BytesIO()
        self.canvas = canvas.Canvas(self._buffer, pagesize=A4)
        self.title = title
        self.author = author
        self.font_path = font_path
        self.rtl = False
        self.page_count = 0
        self._data: Optional[bytes] = None

    def _pt(self, value_mm: float) -> float:
        from reportlab.lib.units import mm
        return value_mm * mm

    def _y(self, top_mm: float, height_mm: float = 0.0) -> float:
        """Convert a top-left y (mm) to reportlab's bottom-left points."""
        return self._pt(PAGE_HEIGHT - top_mm - height_mm)

    def new_page(self):
        if self.page_count:
            self.canvas.showPage()
        self.page_count += 1

    def set_rtl(self):
        self.rtl = True

    def line(self, x1: float, y1: float, x2: float, y2: float):
        self.canvas.line(self._pt(x1), self._y(y1), self._pt(x2), self._y(y2))

    def image(self, img, x: float, y: float, width: float, height: float):
        from reportlab.lib.utils import ImageReader

        self.canvas.drawImage(ImageReader(flatten_image(img)), self._pt(x), self._y(y, height),
                              width=self._pt(width), height=self._pt(height))

    def text(self, text: str, right: float, y: float, size: float = TEXT_SIZE) -> Tuple[float, float]:
        """Draw text ending at `right`; returns its (width, height) in mm."""
        img = render_text_as_image(text, size, font_path=self.font_path)
        width = img.width / RENDER_SCALE * MM_PER_PT
        height = img.height / RENDER_SCALE * MM_PER_PT
        self.image(img, right - width, y, width, height)
        return width, height

    def to_bytes(self) -> bytes:
        """Finish the document and return the PDF bytes."""
        if self._data is None:
            self.canvas.save()
            self._data = self._finalize(self._buffer.getvalue())
        return self._data

    def _finalize(self, data: bytes) -> bytes:
        from pypdf import PdfReader, PdfWriter
        from pypdf.generic import DictionaryObject, NameObject

        writer = PdfWriter()
        writer.append(PdfReader(io.BytesIO(data)))
        if self.rtl:
            writer._root_object[NameObject("/ViewerPreferences")] = DictionaryObject({
                NameObject("/Direction"): NameObject("/R2L"),
            })
        metadata = {"/Title": self.title}
        if self.author:
            metadata["/Author"] = self.author
        writer.add_metadata(metadata)
        out = io.BytesIO()
        writer.write(out)
        return out.getvalue()

    def save(self, out_pdf: Path):
        out_pdf.write_bytes(self.to_bytes())


class ReportLayout:
    """Lays out the summary table and one page per attached receipt."""

    def __init__(self, attachment_loader: Callable[[str], Tuple[object, float, float]] = load_attachment):
        self.attachment_loader = attachment_loader

    def render(self, details: EmployeeDetails, entries: Sequence[ExpenseEntry], renderer) -> RenderedReport:
        renderer.set_rtl()
        total = sum((e.parsed_amount or Decimal("0") for e in entries), Decimal("0"))
        total_str = format_amount(total)

        summary_pages = self._render_summary(renderer, details, entries, total_str)

        attachment_pages = 0
        errors: Dict[int, str] = {}
        for index, entry in enumerate(entries, 1):
            if not entry.attachment_ref:
                continue
            attachment_pages += 1
            error = self._render_attachment(renderer, index, entry)
            if error:
                errors[index] = error

        return RenderedReport(
            total=total_str,
            pages=summary_pages + attachment_pages,
            summary_pages=summary_pages,
            attachment_pages=attachment_pages,
            failed_attachments=list(errors),
            attachment_errors=errors,
        )

    def _render_summary(self, r, details: EmployeeDetails,
                        entries: Sequence[ExpenseEntry], total: str) -> int:
        r.new_page()
        pages = 1
        r.text(TITLE, TABLE_RIGHT, 20, TITLE_SIZE)
        r.text(f"{NAME_LABEL}: {details.name}", TABLE_RIGHT, 35)
        r.text(f"{ID_LABEL}: {details.id}", TABLE_RIGHT, 45)

        top = FIRST_TABLE_TOP
        y = self._table_header(r, top)
        for entry in entries:
            if y + ROW_HEIGHT > BOTTOM_LIMIT:
                self._table_grid(r, top, y)
                r.new_page()
                pages += 1
                top = CONT_TABLE_TOP
                y = self._table_header(r, top)
            self._table_row(r, y, entry)
            y += ROW_HEIGHT
        self._table_grid(r, top, y)

        if y + FOOTER_HEIGHT > BOTTOM_LIMIT:
            r.new_page()
            pages += 1
            y = CONT_TABLE_TOP - 5

        r.text(f"{TOTAL_LABEL}: {total} {CURRENCY}", TABLE_RIGHT, y + 7)
        r.text(EMPLOYEE_SIGNATURE, TABLE_RIGHT, y + 30)
        r.text(MANAGER_SIGNATURE, TABLE_RIGHT, y + 40)
        return pages

    def _column_rights(self) -> List[float]:
        edges = [TABLE_RIGHT, *COLUMN_DIVIDERS]
        return [edge - CELL_PADDING for edge in edges]

    def _table_header(self, r, top: float) -> float:
        r.line(TABLE_LEFT, top, TABLE_RIGHT, top)
        for header, right in zip(HEADERS, self._column_rights()):
            r.text(header, right, top + TEXT_OFFSET)
        return top + ROW_HEIGHT

    def _table_row(self, r, y: float, entry: ExpenseEntry):
        r.line(TABLE_LEFT, y, TABLE_RIGHT, y)
        cells = (format_date(entry.date), entry.description, entry.amount)
        for value, right in zip(cells, self._column_rights()):
            if value:
                r.text(value, right, y + TEXT_OFFSET)

    def _table_grid(self, r, top: float, bottom: float):
        r.line(TABLE_LEFT, bottom, TABLE_RIGHT, bottom)
        for x in (TABLE_LEFT, TABLE_RIGHT, *COLUMN_DIVIDERS):
            r.line(x, top, x, bottom)

    def _render_attachment(self, r, index: int, entry: ExpenseEntry) -> Optional[str]:
        """Draw one receipt page; returns the error if the image was replaced by the error text."""
        r.new_page()
        r.text(f"{RECEIPT_LABEL} {index} - {format_date(entry.date)}", TABLE_RIGHT, 20, HEADER_SIZE)
        try:
            img, width, height = self.attachment_loader(entry.attachment_ref)
            placement = place_attachment(width, height)
            r.image(img, placement.x, placement.y, placement.width, placement.height)
        except Exception as e:
            r.text(ATTACHMENT_ERROR, TABLE_RIGHT, ATTACH_TOP)
            return str(e) or type(e).__name__
        return None


def build_report_pdf(details: EmployeeDetails, entries: Sequence[ExpenseEntry],
                     font_path: Optional[str] = None,
                     layout: Optional[ReportLayout] = None) -> Tuple[bytes, RenderedReport]:
    """Render the expense report and return (pdf_bytes, summary)."""
    renderer = ReportLabRenderer(author=details.name, font_path=font_path)
    report = (layout or ReportLayout()).render(details, entries, renderer)
    return renderer.to_bytes(), report
