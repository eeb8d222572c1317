"""The ledger: a persistent table of expense records."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from filelock import Timeout

from .exceptions import PersistenceError, RecordNotFoundError
from .models import Expense, ExpenseData
from .predicates import Predicate, SortOrder
from .storage import JSONStorage

logger = logging.getLogger(__name__)


class LedgerStore:
    """Stores expenses and mediates persistence.

    Every operation holds a thread lock plus a file lock shared with other
    processes on the same data directory, and re-reads the document first,
    so it always works on the latest committed state. Each write is saved
    before the in-memory table is swapped. Ids are never reused: the last
    issued id is persisted with the records.
    """

    def __init__(self, storage: JSONStorage, resource: str = "expenses.json") -> None:
        self._storage = storage
        self._resource = resource
        self._lock = threading.RLock()
        self._file_lock = storage.lock(resource)
        self._expenses: Dict[int, Expense] = {}
        self._last_id = 0
        with self._transaction():
            pass  # Hydrate in-memory cache from persistence on construction.

    # Public API -----------------------------------------------------------
    def insert(self, data: ExpenseData) -> Expense:
        with self._transaction():
            expense = Expense.from_data(self._last_id + 1, data)
            expenses = dict(self._expenses)
            expenses[expense.id] = expense
            self._commit(expenses, expense.id)
            logger.debug("Inserted expense %s", expense.id)
            return expense

    def get(self, expense_id: int) -> Expense:
        """Return an expense or raise if it does not exist."""
        with self._transaction():
            return self._get_or_raise(expense_id)

    def update(self, expense_id: int, data: ExpenseData) -> Expense:
        with self._transaction():
            self._get_or_raise(expense_id)
            updated = Expense.from_data(expense_id, data)
            expenses = dict(self._expenses)
            expenses[expense_id] = updated
            self._commit(expenses, self._last_id)
            logger.debug("Updated expense %s", expense_id)
            return updated

    def delete(self, expense_id: int) -> bool:
        """Remove an expense; False means there was nothing to remove."""
        with self._transaction():
            if expense_id not in self._expenses:
                return False
            expenses = dict(self._expenses)
            del expenses[expense_id]
            self._commit(expenses, self._last_id)
            logger.debug("Deleted expense %s", expense_id)
            return True

    def query(
        self,
        predicate: Optional[Predicate] = None,
        order: SortOrder = SortOrder.DATE,
        limit: Optional[int] = None,
    ) -> List[Expense]:
        with self._transaction():
            records = order.sort(self._matching(predicate))
        return records if limit is None else records[:limit]

    def sum(self, predicate: Optional[Predicate] = None) -> float:
        with self._transaction():
            return sum((expense.amount for expense in self._matching(predicate)), 0.0)

    def load(self) -> None:
        """Load existing expenses from persistence."""
        document = self._storage.load(self._resource)
        try:
            expenses = {
                expense.id: expense
                for expense in (Expense.from_dict(raw) for raw in document.get("expenses", []))
            }
            last_id = int(document.get("last_id", 0))
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Malformed expense record in {self._resource}") from exc
        with self._lock:
            self._expenses = expenses
            self._last_id = max([last_id, *expenses])

    # Internal helpers -----------------------------------------------------
    @contextmanager
    def _transaction(self) -> Iterator[None]:
        with self._lock:
            try:
                self._file_lock.acquire()
            except Timeout as exc:
                raise PersistenceError(f"Timed out waiting for the lock on {self._resource}") from exc
            try:
                self.load()
                yield
            finally:
                self._file_lock.release()

    def _matching(self, predicate: Optional[Predicate]) -> List[Expense]:
        records = list(self._expenses.values())
        if predicate is None:
            return records
        return [expense for expense in records if predicate.matches(expense)]

    def _commit(self, expenses: Dict[int, Expense], last_id: int) -> None:
        document = {
            "last_id": last_id,
            "expenses": [expense.to_dict() for expense in expenses.values()],
        }
        try:
            self._storage.save(self._resource, document)
        except PersistenceError:
            raise
        except Exception as exc:  # pragma: no cover
            raise PersistenceError("Unexpected error while saving expenses") from exc
        self._expenses = expenses
        self._last_id = last_id

    def _get_or_raise(self, expense_id: int) -> Expense:
        try:
            return self._expenses[expense_id]
        except KeyError as exc:
            raise RecordNotFoundError(f"Expense {expense_id} not found") from exc
