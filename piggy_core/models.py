"""Data models for the expense ledger domain."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Dict

__all__ = ["Expense", "ExpenseData", "parse_calendar_date"]


ISO_DATE_PATTERN = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})"
    r"(?P<time>[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d{3}(?:\d{3})?)?)?(?:Z|[+-]\d{2}:\d{2})?)?",
    re.ASCII,
)


def parse_calendar_date(value: str) -> date:
    """Parse ``YYYY-MM-DD`` or ``YYYY-MM-DDTHH:MM[:SS][offset]`` into a calendar date.

    Raises ``ValueError`` for anything else, including the basic and week
    forms some interpreters accept.
    """
    text = value.strip()
    match = ISO_DATE_PATTERN.fullmatch(text)
    if match is None:
        raise ValueError(f"Not an ISO date: {value!r}")
    if match.group("time") is None:
        year, month, day = (int(part) for part in match.group(1, 2, 3))
        return date(year, month, day)
    # Timestamps keep the calendar day they were written with.
    return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


@dataclass(frozen=True)
class ExpenseData:
    """The mutable fields of an expense, as produced by validation."""

    description: str
    amount: float
    category: str
    date: str
    payment_method: str
    recurring: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Expense:
    id: int
    description: str
    amount: float
    category: str
    date: str
    payment_method: str
    recurring: int = 0

    @classmethod
    def from_data(cls, expense_id: int, data: ExpenseData) -> "Expense":
        return cls(id=expense_id, **data.to_dict())

    def data(self) -> ExpenseData:
        """Return the record without its id, e.g. to merge partial edits."""
        payload = self.to_dict()
        del payload["id"]
        return ExpenseData(**payload)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to JSON-friendly natives."""
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "category": self.category,
            "date": self.date,
            "payment_method": self.payment_method,
            "recurring": self.recurring,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        """Hydrate an Expense from JSON-native data."""
        return cls(
            id=int(data["id"]),
            description=data["description"],
            amount=float(data["amount"]),
            category=data["category"],
            date=data["date"],
            payment_method=data["payment_method"],
            recurring=int(data.get("recurring", 0)),
        )
