"""Core query, filter and aggregation logic for the expense tracker."""

from .exceptions import PersistenceError, RecordNotFoundError, ValidationError
from .exporter import export_csv
from .ledger import LedgerStore
from .models import Expense, ExpenseData
from .predicates import FilterSpec, Predicate, SortOrder, build_predicate
from .stats import MonthRange, MonthlyStats, StatsService, month_range
from .storage import JSONStorage
from .validators import CATEGORIES, PAYMENT_METHODS, ValidationResult, validate_expense

__all__ = [
    "CATEGORIES",
    "PAYMENT_METHODS",
    "Expense",
    "ExpenseData",
    "FilterSpec",
    "JSONStorage",
    "LedgerStore",
    "MonthRange",
    "MonthlyStats",
    "PersistenceError",
    "Predicate",
    "RecordNotFoundError",
    "SortOrder",
    "StatsService",
    "ValidationError",
    "ValidationResult",
    "build_predicate",
    "export_csv",
    "month_range",
    "validate_expense",
]
