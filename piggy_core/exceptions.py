"""Domain-specific exceptions for the expense ledger core."""

from __future__ import annotations

from typing import Iterable, List


class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors))


class RecordNotFoundError(LookupError):
    """Raised when an expense record cannot be located."""


class PersistenceError(IOError):
    """Raised when the persistence layer encounters unrecoverable issues."""
