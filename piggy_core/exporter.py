"""CSV export of expense listings."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from .models import Expense

CSV_HEADER = "id,description,amount,category,date,payment_method"


def format_amount(amount: float) -> str:
    """Render an amount in its shortest positional form: ``25.5``, ``40``, ``0.00001``."""
    if amount.is_integer():
        return str(int(amount))
    return format(Decimal(repr(amount)), "f")


def expense_to_row(expense: Expense) -> str:
    # Quotes inside the description are written as-is; existing exports rely on this layout.
    return ",".join(
        [
            str(expense.id),
            f'"{expense.description}"',
            format_amount(expense.amount),
            expense.category,
            expense.date,
            expense.payment_method,
        ]
    )


def export_csv(expenses: Iterable[Expense]) -> str:
    """Serialise expenses to CSV text in the order given; ``recurring`` is not exported."""
    return "\n".join([CSV_HEADER, *(expense_to_row(expense) for expense in expenses)])
