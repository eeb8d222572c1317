"""Console interface for the expense ledger."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from piggy_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from piggy_core.exporter import export_csv
from piggy_core.ledger import LedgerStore
from piggy_core.models import Expense
from piggy_core.predicates import FilterSpec
from piggy_core.stats import MonthlyStats, StatsService
from piggy_core.storage import JSONStorage
from piggy_core.validators import CATEGORIES, PAYMENT_METHODS, normalize_date, require_valid


def _parse_date(value: str) -> str:
    normalized = normalize_date(value)
    if normalized is None:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}'. Expected format YYYY-MM-DD.")
    return normalized


def _format_expense(expense: Expense) -> str:
    recurring = " (recurring)" if expense.recurring else ""
    return (
        f"[{expense.id}] {expense.date} {expense.amount:.2f}{recurring}\n"
        f"  Category: {expense.category} | Payment: {expense.payment_method}\n"
        f"  Description: {expense.description}\n"
    )


def _format_stats(stats: MonthlyStats) -> str:
    lines = [
        f"This month: {stats.total_this_month:.2f}",
        f"Last month: {stats.total_last_month:.2f}",
        "By category:",
    ]
    lines.extend(f"  {row.category}: {row.total:.2f}" for row in stats.category_breakdown)
    if not stats.category_breakdown:
        lines.append("  -")
    lines.append("Recent transactions:")
    lines.extend(
        f"  [{expense.id}] {expense.date} {expense.description} {expense.amount:.2f}"
        for expense in stats.last_five_transactions
    )
    return "\n".join(lines)


def _filter_spec(args: argparse.Namespace) -> FilterSpec:
    return FilterSpec.from_params({
        "category": args.category,
        "startDate": args.start_date,
        "endDate": args.end_date,
        "sortBy": args.sort_by,
    })


def handle_add(args: argparse.Namespace, store: LedgerStore) -> None:
    payload = {
        "description": args.description,
        "amount": args.amount,
        "category": args.category,
        "payment_method": args.payment_method,
        "date": args.date,
        "recurring": args.recurring,
    }
    expense = store.insert(require_valid(payload))
    print("Expense added:\n" + _format_expense(expense))


def handle_list(args: argparse.Namespace, store: LedgerStore) -> None:
    spec = _filter_spec(args)
    predicate = spec.predicate()
    expenses = store.query(predicate, spec.sort_by)
    if not expenses:
        print("No expenses found.")
        return
    total = store.sum(predicate)
    print(f"Found {len(expenses)} expenses (total {total:.2f}):")
    for expense in expenses:
        print(_format_expense(expense))


def handle_edit(args: argparse.Namespace, store: LedgerStore) -> None:
    existing = store.get(args.id)
    changes = {
        "description": args.description,
        "amount": args.amount,
        "category": args.category,
        "payment_method": args.payment_method,
        "date": args.date,
        "recurring": args.recurring,
    }
    # Unspecified options keep the stored value; the merged record is re-validated in full.
    payload: Dict[str, Any] = {
        **existing.data().to_dict(),
        **{k: v for k, v in changes.items() if v is not None},
    }
    expense = store.update(args.id, require_valid(payload))
    print("Expense updated:\n" + _format_expense(expense))


def handle_delete(args: argparse.Namespace, store: LedgerStore) -> None:
    if not store.delete(args.id):
        raise RecordNotFoundError(f"Expense {args.id} not found")
    print(f"Expense {args.id} deleted.")


def handle_stats(args: argparse.Namespace, store: LedgerStore) -> None:
    print(_format_stats(StatsService(store).monthly_stats()))


def handle_export(args: argparse.Namespace, store: LedgerStore) -> None:
    spec = _filter_spec(args)
    text = export_csv(store.query(spec.predicate(), spec.sort_by))
    if args.output is None:
        print(text)
        return
    try:
        args.output.write_text(text + "\n", encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Unable to write to {args.output}") from exc
    print(f"Exported to {args.output}")


HANDLERS = {
    "add": handle_add,
    "list": handle_list,
    "edit": handle_edit,
    "delete": handle_delete,
    "stats": handle_stats,
    "export": handle_export,
}


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--category", choices=CATEGORIES)
    parser.add_argument("--start-date", type=_parse_date)
    parser.add_argument("--end-date", type=_parse_date)
    parser.add_argument("--sort-by", choices=("date", "amount"), default="date")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Safe Piggy expense tracker CLI")
    parser.add_argument(
        "--data-dir",
        default="data",
        type=Path,
        help="Directory to store JSON data (default: ./data)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser("add", help="Add a new expense")
    add.add_argument("description")
    add.add_argument("amount")
    add.add_argument("category", help=f"One of: {', '.join(CATEGORIES)}")
    add.add_argument("payment_method", help=f"One of: {', '.join(PAYMENT_METHODS)}")
    add.add_argument("date", help="YYYY-MM-DD")
    add.add_argument("--recurring", action="store_true")

    list_parser = subparsers.add_parser("list", help="List expenses")
    _add_filter_arguments(list_parser)

    edit = subparsers.add_parser("edit", help="Edit an existing expense")
    edit.add_argument("id", type=int)
    edit.add_argument("--description")
    edit.add_argument("--amount")
    edit.add_argument("--category")
    edit.add_argument("--payment-method")
    edit.add_argument("--date")
    recurring = edit.add_mutually_exclusive_group()
    recurring.add_argument("--recurring", dest="recurring", action="store_true", default=None)
    recurring.add_argument("--no-recurring", dest="recurring", action="store_false", default=None)

    delete = subparsers.add_parser("delete", help="Delete an expense")
    delete.add_argument("id", type=int)

    subparsers.add_parser("stats", help="Show monthly statistics")

    export = subparsers.add_parser("export", help="Export expenses as CSV")
    _add_filter_arguments(export)
    export.add_argument("--output", "-o", type=Path, help="Write to a file instead of stdout")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s - %(message)s",
    )

    try:
        store = LedgerStore(JSONStorage(args.data_dir))
        HANDLERS[args.command](args, store)
    except ValidationError as exc:
        for message in exc.errors:
            print(f"Validation error: {message}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
