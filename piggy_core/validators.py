"""Validation helpers shared across the API and the CLI."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from .exceptions import ValidationError
from .models import ExpenseData, parse_calendar_date

__all__ = [
    "CATEGORIES",
    "PAYMENT_METHODS",
    "ValidationResult",
    "coerce_amount",
    "normalize_date",
    "require_valid",
    "validate_expense",
]

CATEGORIES = ("Food", "Transport", "Entertainment", "Bills", "Other")

PAYMENT_METHODS = ("Cash", "Card", "Bank Transfer")

DESCRIPTION_REQUIRED = "Description is required."
AMOUNT_INVALID = "Amount must be a positive number."
CATEGORY_INVALID = "Invalid category."
PAYMENT_METHOD_INVALID = "Invalid payment method."
DATE_INVALID = "Invalid date format. Use ISO date string."


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: List[str]
    parsed: ExpenseData


def coerce_amount(raw: object) -> float:
    """Convert raw input to a float, returning NaN when it is not numeric."""
    if isinstance(raw, bool) or raw is None:
        return math.nan
    if not isinstance(raw, (int, float, str)):
        return math.nan
    try:
        return float(raw.strip() if isinstance(raw, str) else raw)
    except (ValueError, OverflowError):
        return math.nan


def normalize_date(raw: object) -> Optional[str]:
    """Return ``raw`` as ``YYYY-MM-DD`` or None when it is not a calendar date."""
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        return parse_calendar_date(raw).isoformat()
    except ValueError:
        return None


def validate_expense(payload: Mapping[str, Any]) -> ValidationResult:
    """Check every field of an expense submission and collect all failures.

    The parsed record is always returned, even when invalid, so callers can
    echo back what was understood (``amount`` is NaN when it was not numeric).
    """
    errors: List[str] = []

    description = payload.get("description")
    if not isinstance(description, str) or not description.strip():
        errors.append(DESCRIPTION_REQUIRED)

    amount = coerce_amount(payload.get("amount"))
    if not math.isfinite(amount) or amount <= 0:
        errors.append(AMOUNT_INVALID)

    category = payload.get("category")
    if category not in CATEGORIES:
        errors.append(CATEGORY_INVALID)

    payment_method = payload.get("payment_method")
    if payment_method not in PAYMENT_METHODS:
        errors.append(PAYMENT_METHOD_INVALID)

    raw_date = payload.get("date")
    expense_date = normalize_date(raw_date)
    if expense_date is None:
        errors.append(DATE_INVALID)

    parsed = ExpenseData(
        description=description.strip() if isinstance(description, str) else description,
        amount=amount,
        category=category,
        date=expense_date if expense_date is not None else raw_date,
        payment_method=payment_method,
        recurring=1 if payload.get("recurring") else 0,
    )
    return ValidationResult(is_valid=not errors, errors=errors, parsed=parsed)


def require_valid(payload: Mapping[str, Any]) -> ExpenseData:
    """Validate ``payload`` and raise :class:`ValidationError` on any failure."""
    result = validate_expense(payload)
    if not result.is_valid:
        raise ValidationError(result.errors)
    return result.parsed
