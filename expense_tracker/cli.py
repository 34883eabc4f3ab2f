"""Console interface for the expense tracker."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from expense_core import analytics
from expense_core.exceptions import NotFoundError, PersistenceError, ValidationError
from expense_core.filters import FilterCriteria
from expense_core.models import (
    EXPENSE_CATEGORIES,
    Expense,
    category_color,
    category_label,
    parse_date,
)
from expense_core.services import ExpenseService
from expense_core.storage import JSONStorage

EMPTY_MESSAGE = "No expenses found matching your filters."


def _parse_date(value: str) -> str:
    try:
        parse_date(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        ) from exc
    return value


def _parse_amount(value: str) -> str:
    try:
        amount = Decimal(value)
    except Exception as exc:  # pragma: no cover - delegated to service
        raise argparse.ArgumentTypeError("Amount must be a numeric value") from exc
    if not amount.is_finite() or amount <= 0:
        raise argparse.ArgumentTypeError("Amount must be greater than zero")
    return value


def _load_service(data_dir: Path) -> ExpenseService:
    return ExpenseService(JSONStorage(data_dir))


def _money(amount: Decimal) -> str:
    return f"${amount:,.2f}"


def _format_expense(expense: Expense) -> str:
    day = expense.date.strftime("%b %d, %Y").replace(" 0", " ")
    return (
        f"[{expense.id}] {day:<13} {category_label(expense.category):<14} "
        f"{_money(expense.amount):>12}  {expense.description}"
    )


def _format_series(title: str, series: analytics.Series) -> List[str]:
    lines = [f"{title}:"]
    for label, value in zip(series.labels, series.values):
        lines.append(f"  {label:<10} {_money(value):>12}")
    return lines


def handle_add(args: argparse.Namespace, service: ExpenseService) -> None:
    payload = {
        "date": args.date or date.today().isoformat(),
        "category": args.category,
        "amount": args.amount,
        "description": args.description,
    }
    expense = service.add(payload)
    print("Expense added:\n" + _format_expense(expense))


def handle_list(args: argparse.Namespace, service: ExpenseService) -> None:
    criteria = FilterCriteria.from_mapping({
        "category": args.category,
        "date_from": args.date_from,
        "date_to": args.date_to,
    })
    expenses = service.list(criteria)
    if not expenses:
        print(EMPTY_MESSAGE)
        return
    total = analytics.total_sum(expenses)
    print(f"Found {len(expenses)} expenses (total {_money(total)}):")
    for expense in expenses:
        print(_format_expense(expense))


def handle_edit(args: argparse.Namespace, service: ExpenseService) -> None:
    changes = {
        "date": args.date,
        "category": args.category,
        "amount": args.amount,
        "description": args.description,
    }
    cleaned = {k: v for k, v in changes.items() if v is not None}
    expense = service.update(args.id, cleaned)
    print("Expense updated:\n" + _format_expense(expense))


def handle_delete(args: argparse.Namespace, service: ExpenseService) -> None:
    if service.delete(args.id):
        print(f"Expense {args.id} deleted.")
    else:
        print(f"Expense {args.id} not found; nothing deleted.")


def handle_summary(args: argparse.Namespace, service: ExpenseService) -> None:
    now: analytics.Moment = (
        parse_date(args.as_of) if args.as_of else datetime.now()
    )
    records = service.list()
    print(f"Total expenses:  {_money(analytics.total_sum(records)):>12}")
    print(f"This week:       {_money(analytics.current_week_sum(records, now)):>12}")
    print(f"This month:      {_money(analytics.current_month_sum(records, now)):>12}")

    totals = analytics.category_totals(records)
    print("By category:")
    if not totals:
        print("  (none)")
    for category, amount in totals.items():
        print(f"  {category_label(category):<14} {_money(amount):>12}")

    lines: List[str] = []
    lines.extend(_format_series("Last 4 weeks", analytics.weekly_series(records, now)))
    lines.extend(_format_series("Last 6 months", analytics.monthly_series(records, now)))
    print("\n".join(lines))


def handle_categories(args: argparse.Namespace, service: ExpenseService) -> None:
    for name in EXPENSE_CATEGORIES:
        print(f"{name:<14} {category_color(name)}")


HANDLERS = {
    "add": handle_add,
    "list": handle_list,
    "edit": handle_edit,
    "delete": handle_delete,
    "summary": handle_summary,
    "categories": handle_categories,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Expense Tracker CLI")
    parser.add_argument(
        "--data-dir",
        default=Path(os.getenv("EXPENSE_TRACKER_DATA_DIR", "data")),
        type=Path,
        help="Directory to store JSON data (default: $EXPENSE_TRACKER_DATA_DIR or ./data)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Add a new expense")
    add_parser.add_argument("amount", type=_parse_amount)
    add_parser.add_argument("category", choices=EXPENSE_CATEGORIES)
    add_parser.add_argument("--date", type=_parse_date, help="Defaults to today")
    add_parser.add_argument("--description")

    list_parser = subparsers.add_parser("list", help="List expenses, newest first")
    list_parser.add_argument("--category")
    list_parser.add_argument("--from", dest="date_from", type=_parse_date)
    list_parser.add_argument("--to", dest="date_to", type=_parse_date)

    edit_parser = subparsers.add_parser("edit", help="Edit an existing expense")
    edit_parser.add_argument("id")
    edit_parser.add_argument("--amount", type=_parse_amount)
    edit_parser.add_argument("--category", choices=EXPENSE_CATEGORIES)
    edit_parser.add_argument("--date", type=_parse_date)
    edit_parser.add_argument("--description")

    delete_parser = subparsers.add_parser("delete", help="Delete an expense")
    delete_parser.add_argument("id")

    summary_parser = subparsers.add_parser("summary", help="Show totals and spending trends")
    summary_parser.add_argument(
        "--as-of", dest="as_of", type=_parse_date, help="Reference date (default: now)"
    )

    subparsers.add_parser("categories", help="List the available categories")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        service = _load_service(args.data_dir)
        HANDLERS[args.command](args, service)
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except NotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
