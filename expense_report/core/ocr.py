"""
OCR functionality for receipt images and PDFs.
"""

import io
from pathlib import Path
from typing import Tuple

from .errors import RecognitionError, UploadError
from .utils import IMAGE_EXTS, PDF_EXTS

DEFAULT_OCR_LANG = "heb"

# Zoom used when rasterizing PDF pages (2x = 144 DPI)
PDF_RASTER_ZOOM = 2


def check_receipt_file(path: Path) -> str:
    """
    Validate an uploaded receipt file.

    Returns:
        Lower-cased file extension

    Raises:
        UploadError: if the file is missing, unreadable or of an unsupported type
    """
    ext = path.suffix.lower()
    if ext not in IMAGE_EXTS | PDF_EXTS:
        raise UploadError(f"Unsupported file type: {path.name}",
                          {"supported": sorted(IMAGE_EXTS | PDF_EXTS)})
    if not path.is_file():
        raise UploadError(f"Receipt file not found: {path}")
    try:
        with path.open("rb") as f:
            f.read(1)
    except OSError as e:
        raise UploadError(f"Could not read {path.name}: {e}") from e
    return ext


def rasterize_pdf_page(pdf_path: Path, page_no: int = 0) -> Tuple[object, float, float]:
    """
    Render one PDF page to a PIL image.

    Returns:
        Tuple of (image, page_width_pt, page_height_pt)
    """
    import fitz
    from PIL import Image

    doc = fitz.open(pdf_path.as_posix())
    try:
        page = doc[page_no]
        mat = fitz.Matrix(PDF_RASTER_ZOOM, PDF_RASTER_ZOOM)
        pix = page.get_pixmap(matrix=mat, alpha=False)
        img = Image.open(io.BytesIO(pix.tobytes("png")))
        img.load()
        return img, page.rect.width, page.rect.height
    finally:
        doc.close()


def pdf_to_text(pdf_path: Path) -> str:
    """Extract the text layer of a PDF using PyMuPDF."""
    import fitz

    doc = fitz.open(pdf_path.as_posix())
    chunks = []
    for page in doc:
        chunks.append(page.get_text())
    doc.close()
    return "\n".join(chunks)


def ocr_image(img, lang: str = DEFAULT_OCR_LANG) -> str:
    """OCR a PIL image to text."""
    import pytesseract

    # Grayscale improves recognition on phone photos
    if img.mode != "L":
        img = img.convert("L")
    try:
        return pytesseract.image_to_string(img, lang=lang)
    except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
        raise RecognitionError(f"OCR failed: {e}", {"lang": lang}) from e


def recognize_receipt(path: Path, lang: str = DEFAULT_OCR_LANG) -> str:
    """
    Recognize the text of a receipt file.

    - For images: OCR directly
    - For PDFs: use the text layer if there is one, otherwise OCR the first page

    Raises:
        UploadError: if the file cannot be used
        RecognitionError: if the OCR engine fails
    """
    ext = check_receipt_file(path)

    if ext in PDF_EXTS:
        try:
            text = pdf_to_text(path)
        except Exception as e:
            raise UploadError(f"Could not open PDF {path.name}: {e}") from e
        if text.strip():
            return text
        img, _, _ = rasterize_pdf_page(path)
        return ocr_image(img, lang)

    from PIL import Image, UnidentifiedImageError
    try:
        img = Image.open(path)
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise UploadError(f"Could not read image {path.name}: {e}") from e
    return ocr_image(img, lang)
