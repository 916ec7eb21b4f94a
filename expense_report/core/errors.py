"""
Exceptions raised by the expense report pipeline.

Hierarchy:
    ExpenseReportError (base)
    ├── UploadError
    │   └── UploadInProgressError
    ├── RecognitionError
    └── RenderError
"""

from typing import Optional


class ExpenseReportError(Exception):
    """
    Base exception for all expense report errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class UploadError(ExpenseReportError):
    """Raised when a receipt file is missing, unreadable or unsupported."""


class UploadInProgressError(UploadError):
    """Raised when an upload is attempted while another one is being processed."""

    def __init__(self, state: str):
        super().__init__("Another receipt is still being processed", {"state": state})


class RecognitionError(ExpenseReportError):
    """Raised when the OCR engine fails on a receipt."""


class RenderError(ExpenseReportError):
    """Raised when an attachment cannot be embedded in the report."""
