"""Tests for employee details and the expense store."""

import dataclasses
from decimal import Decimal

import pytest

from expense_report.core.models import EmployeeDetails, ExpenseEntry, ExpenseStore


def _entry(amount="10.00", description=""):
    return ExpenseEntry(amount=amount, date="2026-03-05", description=description)


@pytest.mark.parametrize("name,emp_id", [("", "1"), ("Dana", ""), ("   ", "1")])
def test_employee_details_require_both_fields(name, emp_id):
    with pytest.raises(ValueError):
        EmployeeDetails(name=name, id=emp_id)


def test_employee_details_are_immutable(employee):
    with pytest.raises(dataclasses.FrozenInstanceError):
        employee.name = "other"


def test_append_preserves_insertion_order():
    store = ExpenseStore()
    for desc in ("a", "b", "c"):
        store.append(_entry(description=desc))
    assert [e.description for e in store] == ["a", "b", "c"]
    assert len(store) == 3


def test_update_changes_field_in_place():
    store = ExpenseStore([_entry()])
    assert store.update(0, "amount", "12.30") is True
    assert store[0].amount == "12.30"


@pytest.mark.parametrize("index", [1, 5, -1])
def test_update_out_of_range_is_noop(index):
    store = ExpenseStore([_entry()])
    assert store.update(index, "amount", "99.00") is False
    assert store[0].amount == "10.00"


def test_update_unknown_field_is_noop():
    store = ExpenseStore([_entry()])
    assert store.update(0, "vendor", "x") is False
    assert not hasattr(store[0], "vendor")


def test_description_is_limited_to_30_chars():
    store = ExpenseStore([_entry(description="x" * 40)])
    assert store[0].description == "x" * 30
    store.update(0, "description", "y" * 35)
    assert store[0].description == "y" * 30


def test_total_treats_blank_and_invalid_as_zero():
    store = ExpenseStore([_entry("10.00"), _entry(""), _entry("5.50"), _entry("abc")])
    assert store.total() == Decimal("15.50")
    assert store[3].amount == "abc"


def test_entries_returns_copy():
    store = ExpenseStore([_entry()])
    entries = store.entries()
    entries.append(_entry())
    assert len(store) == 1
