"""
Expense Report

Turn receipt photos into a reviewed, right-to-left (Hebrew) expense
reimbursement PDF: OCR each receipt, pick out the total, let the employee
fix the entries, and lay out a summary page plus one page per receipt.
"""

__version__ = "1.0.0"
__author__ = "Expense Report Contributors"

from expense_report.core.models import EmployeeDetails, ExpenseEntry, ExpenseStore
from expense_report.core.parsers import extract_amount
from expense_report.core.processor import ExpenseSession

__all__ = ["EmployeeDetails", "ExpenseEntry", "ExpenseStore", "ExpenseSession", "extract_amount"]
