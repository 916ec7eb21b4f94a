"""Tests for receipt file validation and OCR wiring."""

import pytest
import pytesseract
from reportlab.pdfgen import canvas

from expense_report.core import ocr
from expense_report.core.errors import RecognitionError, UploadError


def test_unsupported_extension(tmp_path):
    doc = tmp_path / "receipt.docx"
    doc.write_bytes(b"x")
    with pytest.raises(UploadError, match="Unsupported"):
        ocr.check_receipt_file(doc)


def test_missing_file(tmp_path):
    with pytest.raises(UploadError, match="not found"):
        ocr.check_receipt_file(tmp_path / "gone.jpg")


def test_check_returns_extension(make_image):
    assert ocr.check_receipt_file(make_image("scan.PNG")) == ".png"


def test_corrupt_image_is_upload_error(tmp_path):
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"definitely not a png")
    with pytest.raises(UploadError):
        ocr.recognize_receipt(bad)


def test_image_ocr_passes_language(make_image, monkeypatch):
    calls = []

    def fake_image_to_string(img, lang=None):
        calls.append((img.mode, lang))
        return 'סה"כ 12.00'

    monkeypatch.setattr(pytesseract, "image_to_string", fake_image_to_string)
    assert ocr.recognize_receipt(make_image(), lang="heb") == 'סה"כ 12.00'
    assert calls == [("L", "heb")]


def test_tesseract_failure_is_recognition_error(make_image, monkeypatch):
    def broken(img, lang=None):
        raise pytesseract.TesseractError(1, "failed loading language 'heb'")

    monkeypatch.setattr(pytesseract, "image_to_string", broken)
    with pytest.raises(RecognitionError):
        ocr.recognize_receipt(make_image())


def test_pdf_text_layer_is_used(tmp_path, monkeypatch):
    pdf = tmp_path / "invoice.pdf"
    c = canvas.Canvas(pdf.as_posix())
    c.drawString(72, 720, "Total 12.50")
    c.showPage()
    c.save()

    def not_called(*args, **kwargs):
        raise AssertionError("OCR should not run on a PDF with text")

    monkeypatch.setattr(pytesseract, "image_to_string", not_called)
    assert "Total 12.50" in ocr.recognize_receipt(pdf)


def test_scanned_pdf_is_rasterized_and_ocred(tmp_path, monkeypatch):
    pdf = tmp_path / "scan.pdf"
    c = canvas.Canvas(pdf.as_posix())
    c.rect(100, 100, 200, 200, fill=1)
    c.showPage()
    c.save()

    monkeypatch.setattr(pytesseract, "image_to_string", lambda img, lang=None: "לתשלום 9.90")
    assert ocr.recognize_receipt(pdf) == "לתשלום 9.90"


def test_rasterize_pdf_page_reports_page_size(tmp_path):
    pdf = tmp_path / "a.pdf"
    c = canvas.Canvas(pdf.as_posix(), pagesize=(200, 100))
    c.showPage()
    c.save()
    img, width, height = ocr.rasterize_pdf_page(pdf)
    assert (width, height) == (200, 100)
    assert img.size == (200 * ocr.PDF_RASTER_ZOOM, 100 * ocr.PDF_RASTER_ZOOM)
