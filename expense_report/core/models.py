"""
Data models for expense reports.
"""

from dataclasses import dataclass, asdict, fields
from decimal import Decimal
from typing import Iterator, List, Optional

from .parsers import parse_amount
from .utils import MAX_DESCRIPTION_LEN


@dataclass(frozen=True)
class EmployeeDetails:
    """Identity of the employee submitting the report."""
    name: str
    id: str

    def __post_init__(self):
        if not (self.name or "").strip():
            raise ValueError("Employee name is required")
        if not (self.id or "").strip():
            raise ValueError("Employee id is required")

    def to_dict(self):
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class ExpenseEntry:
    """A single reimbursable expense."""
    amount: str
    date: str
    description: str = ""
    attachment_ref: Optional[str] = None

    def __post_init__(self):
        self.description = (self.description or "")[:MAX_DESCRIPTION_LEN]

    @property
    def parsed_amount(self) -> Optional[Decimal]:
        return parse_amount(self.amount)

    def to_dict(self):
        """Convert to dictionary."""
        return asdict(self)


EDITABLE_FIELDS = frozenset(f.name for f in fields(ExpenseEntry))


class ExpenseStore:
    """Ordered, index-addressed sequence of expense entries."""

    def __init__(self, entries: Optional[List[ExpenseEntry]] = None):
        self._entries: List[ExpenseEntry] = list(entries or [])

    def append(self, entry: ExpenseEntry) -> int:
        """Append an entry and return its index."""
        self._entries.append(entry)
        return len(self._entries) - 1

    def update(self, index: int, field: str, value: str) -> bool:
        """
        Set one field of the entry at `index`.

        Out-of-range indexes and unknown fields are ignored.

        Returns:
            True if the entry was changed
        """
        if not 0 <= index < len(self._entries) or field not in EDITABLE_FIELDS:
            return False
        if field == "description":
            value = (value or "")[:MAX_DESCRIPTION_LEN]
        setattr(self._entries[index], field, value)
        return True

    def total(self) -> Decimal:
        """Sum of all parsable amounts; anything else counts as zero."""
        return sum((e.parsed_amount or Decimal("0") for e in self._entries), Decimal("0"))

    def entries(self) -> List[ExpenseEntry]:
        return list(self._entries)

    def __getitem__(self, index: int) -> ExpenseEntry:
        return self._entries[index]

    def __iter__(self) -> Iterator[ExpenseEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
