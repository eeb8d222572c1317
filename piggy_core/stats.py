"""Monthly statistics computed from the ledger."""

from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from .ledger import LedgerStore
from .models import Expense
from .predicates import Predicate, SortOrder, build_predicate

RECENT_LIMIT = 5


@dataclass(frozen=True)
class MonthRange:
    start: date
    end: date

    def predicate(self) -> Predicate:
        return build_predicate(start_date=self.start.isoformat(), end_date=self.end.isoformat())


def month_range(offset: int, today: date) -> MonthRange:
    """Return the first and last day of the month ``offset`` months from ``today``.

    ``offset=-1`` in January resolves to December of the previous year.
    """
    year, month_index = divmod(today.year * 12 + (today.month - 1) + offset, 12)
    month = month_index + 1
    last_day = calendar.monthrange(year, month)[1]
    return MonthRange(date(year, month, 1), date(year, month, last_day))


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    total: float

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "total": self.total}


@dataclass(frozen=True)
class MonthlyStats:
    total_this_month: float
    total_last_month: float
    category_breakdown: List[CategoryTotal]
    last_five_transactions: List[Expense]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalThisMonth": self.total_this_month,
            "totalLastMonth": self.total_last_month,
            "categoryBreakdown": [row.to_dict() for row in self.category_breakdown],
            "lastFiveTransactions": [expense.to_dict() for expense in self.last_five_transactions],
        }


class StatsService:
    """Aggregates the ledger into the dashboard's monthly figures."""

    def __init__(self, store: LedgerStore, clock: Callable[[], date] = date.today) -> None:
        self._store = store
        self._clock = clock

    def monthly_stats(self, today: Optional[date] = None) -> MonthlyStats:
        today = today or self._clock()
        this_month = month_range(0, today).predicate()
        last_month = month_range(-1, today).predicate()
        return MonthlyStats(
            total_this_month=self._store.sum(this_month),
            total_last_month=self._store.sum(last_month),
            category_breakdown=self.category_breakdown(this_month),
            last_five_transactions=self._store.query(order=SortOrder.DATE, limit=RECENT_LIMIT),
        )

    def category_breakdown(self, predicate: Predicate) -> List[CategoryTotal]:
        """Per-category totals over matching records; empty categories are left out."""
        totals: Dict[str, float] = defaultdict(float)
        for expense in self._store.query(predicate):
            totals[expense.category] += expense.amount
        return [CategoryTotal(category, total) for category, total in sorted(totals.items())]
