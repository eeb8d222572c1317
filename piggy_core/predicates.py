"""Composable filters and orderings over expense records.

A :class:`Predicate` is a conjunction of typed clauses. It never touches the
store itself, so the same value drives listing, summation and CSV export.
Dates are compared as ``YYYY-MM-DD`` strings, which sort chronologically.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from .exceptions import ValidationError
from .models import Expense
from .validators import normalize_date

__all__ = [
    "CategoryIs",
    "DateOnOrAfter",
    "DateOnOrBefore",
    "FilterSpec",
    "Predicate",
    "SortOrder",
    "build_predicate",
]


@dataclass(frozen=True)
class CategoryIs:
    category: str

    def matches(self, expense: Expense) -> bool:
        return expense.category == self.category


@dataclass(frozen=True)
class DateOnOrAfter:
    start: str

    def matches(self, expense: Expense) -> bool:
        return expense.date >= self.start


@dataclass(frozen=True)
class DateOnOrBefore:
    end: str

    def matches(self, expense: Expense) -> bool:
        return expense.date <= self.end


Clause = Union[CategoryIs, DateOnOrAfter, DateOnOrBefore]


@dataclass(frozen=True)
class Predicate:
    """All clauses must hold; an empty predicate matches every record."""

    clauses: Tuple[Clause, ...] = ()

    def matches(self, expense: Expense) -> bool:
        return all(clause.matches(expense) for clause in self.clauses)

    def __call__(self, expense: Expense) -> bool:
        return self.matches(expense)

    def __and__(self, other: "Predicate") -> "Predicate":
        return Predicate(self.clauses + other.clauses)


def build_predicate(
    category: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Predicate:
    clauses: List[Clause] = []
    if category:
        clauses.append(CategoryIs(category))
    if start_date:
        clauses.append(DateOnOrAfter(start_date))
    if end_date:
        clauses.append(DateOnOrBefore(end_date))
    return Predicate(tuple(clauses))


class SortOrder(Enum):
    DATE = "date"
    AMOUNT = "amount"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortOrder":
        # Anything other than "amount" falls back to newest first.
        return cls.AMOUNT if value == cls.AMOUNT.value else cls.DATE

    def sort(self, expenses: Iterable[Expense]) -> List[Expense]:
        if self is SortOrder.AMOUNT:
            return sorted(expenses, key=lambda exp: exp.amount, reverse=True)
        # Same-day records list the most recently inserted one first.
        return sorted(expenses, key=lambda exp: (exp.date, exp.id), reverse=True)


@dataclass(frozen=True)
class FilterSpec:
    category: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    sort_by: SortOrder = SortOrder.DATE

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "FilterSpec":
        """Build a filter from request/CLI parameters; blank values are ignored."""
        cleaned = {k: v for k, v in params.items() if v not in (None, "")}
        errors: List[str] = []
        dates = {}
        for key in ("startDate", "endDate"):
            if key not in cleaned:
                dates[key] = None
                continue
            dates[key] = normalize_date(cleaned[key])
            if dates[key] is None:
                errors.append(f"Invalid {key}.")
        if errors:
            raise ValidationError(errors)
        return cls(
            category=cleaned.get("category"),
            start_date=dates["startDate"],
            end_date=dates["endDate"],
            sort_by=SortOrder.parse(cleaned.get("sortBy")),
        )

    def predicate(self) -> Predicate:
        return build_predicate(self.category, self.start_date, self.end_date)
