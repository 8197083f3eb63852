"""Console interface for the expense tracker."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

from expense_store.config import default_data_dir
from expense_store.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from expense_store.models import Transaction
from expense_store.periods import PERIODS
from expense_store.storage import FileBlobStore
from expense_store.store import ExpenseStore, export_filename
from expense_store.validators import KINDS


def _parse_date(value: str) -> str:
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        ) from exc
    return value


def _parse_amount(value: str) -> str:
    try:
        Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError("Amount must be a numeric value") from exc
    return value


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid number '{value}'") from exc
    if number < 1:
        raise argparse.ArgumentTypeError("Limit must be a positive integer")
    return number


def _load_store(data_dir: Path) -> ExpenseStore:
    return ExpenseStore(FileBlobStore(data_dir))


def _money(amount: Decimal) -> str:
    return f"{amount:,.2f}"


def _format_transaction(transaction: Transaction) -> str:
    sign = "+" if transaction.kind == "income" else "-"
    return (
        f"[{transaction.id}] {transaction.date} {sign}{_money(transaction.amount)} ({transaction.kind})\n"
        f"  Category: {transaction.category}\n"
        f"  Description: {transaction.description or '-'}\n"
    )


def handle_add(args: argparse.Namespace, store: ExpenseStore) -> None:
    transaction = store.add_transaction(
        {
            "kind": args.kind,
            "amount": args.amount,
            "category": args.category,
            "date": args.date or store.today(),
            "description": args.description,
        }
    )
    if transaction.category not in {category.name for category in store.categories}:
        print(f"Warning: category '{transaction.category}' does not exist.", file=sys.stderr)
    print("Transaction added:\n" + _format_transaction(transaction))


def handle_list(args: argparse.Namespace, store: ExpenseStore) -> None:
    transactions = store.get_transactions(
        kind=args.type, category=args.category, date_from=args.date_from, date_to=args.date_to
    )
    if not transactions:
        print("No transactions found.")
        return
    shown = transactions[: args.limit] if args.limit else transactions
    print(f"Found {len(transactions)} transactions (balance {_money(store.get_balance(transactions))}):")
    for transaction in shown:
        print(_format_transaction(transaction))


def handle_show(args: argparse.Namespace, store: ExpenseStore) -> None:
    print(_format_transaction(store.get_transaction(args.id)))


def handle_delete(args: argparse.Namespace, store: ExpenseStore) -> None:
    store.delete_transaction(args.id)
    print(f"Transaction {args.id} deleted.")


def handle_summary(args: argparse.Namespace, store: ExpenseStore) -> None:
    summary = store.get_period_summary(args.period)
    print(f"Period: {args.period} ({summary.transaction_count} transactions)")
    print(f"  Income:   {_money(summary.income)} ({summary.income_count})")
    print(f"  Expenses: {_money(summary.expenses)} ({summary.expense_count})")
    trend = "positive" if summary.is_positive else "negative"
    print(f"  Balance:  {_money(summary.balance)} ({trend})")
    by_category = summary.expenses_by_category
    if by_category:
        print("Expenses by category:")
        for name, amount in sorted(by_category.items(), key=lambda item: item[1], reverse=True):
            print(f"  {name}: {_money(amount)}")


def handle_monthly(args: argparse.Namespace, store: ExpenseStore) -> None:
    for month in store.get_monthly_data():
        print(
            f"{month.label:>8}  income {_money(month.income):>12}  "
            f"expenses {_money(month.expenses):>12}  balance {_money(month.balance):>12}"
        )


def handle_trend(args: argparse.Namespace, store: ExpenseStore) -> None:
    for day in store.get_daily_balance_trend():
        print(f"{day.date} {day.label:>7}  {_money(day.balance):>12}")


def handle_category(args: argparse.Namespace, store: ExpenseStore) -> None:
    if args.command == "list":
        for category in store.categories:
            marker = " (in use)" if store.is_category_in_use(category.name) else ""
            print(f"{category.name} {category.color}{marker}")
    elif args.command == "add":
        category = store.add_category({"name": args.name, "color": args.color})
        print(f"Category {category.name} added.")
    elif args.command == "delete":
        store.delete_category(args.name)
        print(f"Category {args.name} deleted.")


def handle_clear(args: argparse.Namespace, store: ExpenseStore) -> int:
    if not args.yes:
        print("Refusing to delete all transactions without --yes.", file=sys.stderr)
        return 1
    store.clear_all_data()
    print("All transactions deleted.")
    return 0


def handle_export(args: argparse.Namespace, store: ExpenseStore) -> None:
    output = args.output or Path(export_filename(store.today()))
    try:
        output.write_text(store.export_data(), encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Unable to write export to {output}") from exc
    print(f"Exported data to {output}.")


def handle_import(args: argparse.Namespace, store: ExpenseStore) -> int:
    try:
        text = args.path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Unable to read {args.path}") from exc
    if not store.import_data(text):
        print(f"Import failed: {args.path} is not a valid export.", file=sys.stderr)
        return 1
    print(f"Imported data from {args.path}.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Expense Tracker CLI")
    parser.add_argument(
        "--data-dir",
        default=None,
        type=Path,
        help="Directory to store JSON data (default: $EXPENSE_TRACKER_DATA_DIR or ./data)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="entity", required=True)

    add_parser = subparsers.add_parser("add", help="Record an income or expense")
    add_parser.add_argument("kind", choices=sorted(KINDS))
    add_parser.add_argument("amount", type=_parse_amount)
    add_parser.add_argument("category")
    add_parser.add_argument("--date", type=_parse_date, help="Transaction date (default: today)")
    add_parser.add_argument("--description", default="")

    list_parser = subparsers.add_parser("list", help="List transactions, most recent first")
    list_parser.add_argument("--type", choices=sorted(KINDS))
    list_parser.add_argument("--category")
    list_parser.add_argument("--from", dest="date_from", type=_parse_date)
    list_parser.add_argument("--to", dest="date_to", type=_parse_date)
    list_parser.add_argument("--limit", type=_positive_int)

    show_parser = subparsers.add_parser("show", help="Show a single transaction")
    show_parser.add_argument("id")

    delete_parser = subparsers.add_parser("delete", help="Delete a transaction")
    delete_parser.add_argument("id")

    summary_parser = subparsers.add_parser("summary", help="Totals for a period")
    summary_parser.add_argument("--period", choices=PERIODS, default="all")

    subparsers.add_parser("monthly", help="Income and expenses for the last 6 months")
    subparsers.add_parser("trend", help="Running balance for the last 30 days")

    category_parser = subparsers.add_parser("category", help="Manage categories")
    category_sub = category_parser.add_subparsers(dest="command", required=True)
    category_sub.add_parser("list", help="List categories")
    category_add = category_sub.add_parser("add", help="Add a category")
    category_add.add_argument("name")
    category_add.add_argument("color")
    category_delete = category_sub.add_parser("delete", help="Delete an unused category")
    category_delete.add_argument("name")

    clear_parser = subparsers.add_parser("clear", help="Delete every transaction")
    clear_parser.add_argument("--yes", action="store_true")

    export_parser = subparsers.add_parser("export", help="Write all data to a JSON file")
    export_parser.add_argument("--output", type=Path)

    import_parser = subparsers.add_parser("import", help="Load data from an export file")
    import_parser.add_argument("path", type=Path)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    handlers = {
        "add": handle_add,
        "list": handle_list,
        "show": handle_show,
        "delete": handle_delete,
        "summary": handle_summary,
        "monthly": handle_monthly,
        "trend": handle_trend,
        "category": handle_category,
        "clear": handle_clear,
        "export": handle_export,
        "import": handle_import,
    }

    try:
        store = _load_store(args.data_dir or default_data_dir())
        status = handlers[args.entity](args, store)
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return status or 0


if __name__ == "__main__":
    raise SystemExit(main())
