"""Framework-agnostic expense store: CRUD, filtered queries and reports."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

from .exceptions import (
    CategoryInUseError,
    CorruptStateError,
    DuplicateCategoryError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from .models import (
    Category,
    DailyBalance,
    MonthlySummary,
    PeriodSummary,
    Transaction,
    fields_from_payload,
)
from .periods import (
    ALL,
    MONTH,
    WEEK,
    day_label,
    month_bounds,
    month_label,
    month_window,
    shift_month,
    week_window,
)
from .storage import BlobStore
from .validators import EXPENSE, INCOME

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "transactions"
CATEGORIES_KEY = "categories"

FALLBACK_COLOR = "#95a5a6"
DEFAULT_CATEGORIES = (
    Category("Food", "#e74c3c"),
    Category("Transport", "#3498db"),
    Category("Entertainment", "#9b59b6"),
    Category("Utilities", "#f39c12"),
    Category("Health", "#1abc9c"),
    Category("Education", "#34495e"),
    Category("Salary", "#27ae60"),
    Category("Other", FALLBACK_COLOR),
)

MONTHS_IN_REPORT = 6
DAYS_IN_TREND = 30
RECENT_LIMIT = 5

FILTER_FIELDS = ("kind", "category", "date_from", "date_to")
FILTER_ALIASES = {"type": "kind", "dateFrom": "date_from", "dateTo": "date_to"}

ZERO = Decimal("0.00")


def export_filename(day: date) -> str:
    """Name for an export file taken on ``day``."""
    return f"expense-tracker-{day.isoformat()}.json"


class ExpenseStore:
    """Owns the transaction and category collections and mediates persistence.

    Every mutation persists the whole affected collection before the in-memory
    copy is replaced, so a failed write leaves the store untouched.
    """

    def __init__(self, blobs: BlobStore, *, today: Callable[[], date] = date.today) -> None:
        self._blobs = blobs
        self._today = today
        self._transactions: List[Transaction] = []
        self._categories: List[Category] = []
        self.load()  # Hydrate in-memory collections from persistence on construction.

    # Public API -----------------------------------------------------------
    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return tuple(self._transactions)

    @property
    def categories(self) -> Tuple[Category, ...]:
        return tuple(self._categories)

    def today(self) -> date:
        return self._today()

    def load(self) -> None:
        """Load both collections, seeding the default categories when none exist."""
        transactions = self._read(TRANSACTIONS_KEY, _parse_transactions)
        categories = self._read(CATEGORIES_KEY, _parse_categories)
        self._transactions = transactions or []
        if categories:
            self._categories = categories
        else:
            logger.info("No categories persisted, seeding %d defaults", len(DEFAULT_CATEGORIES))
            self._commit_categories(list(DEFAULT_CATEGORIES))

    def add_transaction(self, payload: Dict[str, Any]) -> Transaction:
        """Store a new transaction under a fresh id and return it.

        The category is not checked against the category collection and the
        amount may be negative; only the shape of ``payload`` is validated.
        """
        transaction = Transaction(id=self._new_id(), **fields_from_payload(payload))
        self._commit_transactions([*self._transactions, transaction])
        logger.debug("Added %s transaction %s", transaction.kind, transaction.id)
        return transaction

    def get_transaction(self, transaction_id: str) -> Transaction:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        raise RecordNotFoundError(f"Transaction {transaction_id} not found")

    def delete_transaction(self, transaction_id: str) -> None:
        """Remove the matching transaction; unknown ids are ignored."""
        remaining = [t for t in self._transactions if t.id != transaction_id]
        removed = len(self._transactions) - len(remaining)
        self._commit_transactions(remaining)
        logger.debug("Deleted %d transaction(s) with id %s", removed, transaction_id)

    def add_category(self, payload: Dict[str, Any]) -> Category:
        category = Category.from_dict(payload)
        if any(existing.name == category.name for existing in self._categories):
            raise DuplicateCategoryError(f"Category {category.name!r} already exists")
        self._commit_categories([*self._categories, category])
        logger.debug("Added category %s", category.name)
        return category

    def delete_category(self, name: str) -> None:
        """Remove the named category; refuses while any transaction references it."""
        if self.is_category_in_use(name):
            raise CategoryInUseError(f"Category {name!r} is used by existing transactions")
        self._commit_categories([c for c in self._categories if c.name != name])
        logger.debug("Deleted category %s", name)

    def is_category_in_use(self, name: str) -> bool:
        return any(transaction.category == name for transaction in self._transactions)

    def category_color(self, name: str) -> str:
        """Color of the named category, or the fallback for dangling names."""
        for category in self._categories:
            if category.name == name:
                return category.color
        return FALLBACK_COLOR

    def get_transactions(self, **filters: object) -> List[Transaction]:
        """Filtered copy of the collection, most recent date first.

        Recognised filters are ``kind`` (or ``type``), ``category``,
        ``date_from`` and ``date_to`` (inclusive). Anything else, and empty
        values, impose no constraint. Equal dates keep insertion order.
        """
        criteria = _normalise_filters(filters)
        kind = criteria.get("kind")
        category = criteria.get("category")
        date_from = criteria.get("date_from")
        date_to = criteria.get("date_to")

        def matches(transaction: Transaction) -> bool:
            if kind is not None and transaction.kind != kind:
                return False
            if category is not None and transaction.category != category:
                return False
            if date_from is not None and transaction.date < date_from:
                return False
            if date_to is not None and transaction.date > date_to:
                return False
            return True

        return sorted(filter(matches, self._transactions), key=lambda t: t.date, reverse=True)

    def get_recent_transactions(self, limit: int = RECENT_LIMIT) -> List[Transaction]:
        return self.get_transactions()[:limit]

    def get_transactions_by_period(self, period: str = ALL) -> List[Transaction]:
        """Transactions inside a relative window; ``all`` or unknown periods return everything."""
        today = self._today()
        if period == WEEK:
            start, end = week_window(today)
        elif period == MONTH:
            start, end = month_window(today)
        else:
            return list(self._transactions)
        return [t for t in self._transactions if start <= t.date <= end]

    def get_total_income(self, transactions: Optional[Iterable[Transaction]] = None) -> Decimal:
        return self._sum_kind(INCOME, transactions)

    def get_total_expenses(self, transactions: Optional[Iterable[Transaction]] = None) -> Decimal:
        return self._sum_kind(EXPENSE, transactions)

    def get_balance(self, transactions: Optional[Iterable[Transaction]] = None) -> Decimal:
        records = None if transactions is None else list(transactions)
        return self.get_total_income(records) - self.get_total_expenses(records)

    def get_expenses_by_category(
        self, transactions: Optional[Iterable[Transaction]] = None
    ) -> Dict[str, Decimal]:
        records = self._transactions if transactions is None else transactions
        totals: Dict[str, Decimal] = {}
        for transaction in records:
            if transaction.kind != EXPENSE:
                continue
            totals[transaction.category] = totals.get(transaction.category, ZERO) + transaction.amount
        return totals

    def get_period_summary(self, period: str = ALL) -> PeriodSummary:
        """Totals, counts and per-category expenses for one period."""
        subset = self.get_transactions_by_period(period)
        income = self.get_total_income(subset)
        expenses = self.get_total_expenses(subset)
        income_count = sum(1 for t in subset if t.kind == INCOME)
        return PeriodSummary(
            period=period,
            income=income,
            expenses=expenses,
            balance=income - expenses,
            transaction_count=len(subset),
            income_count=income_count,
            expense_count=len(subset) - income_count,
            expenses_by_category=self.get_expenses_by_category(subset),
        )

    def get_monthly_data(self) -> List[MonthlySummary]:
        """Income, expenses and balance for the current month and the five before it."""
        current = self._today().replace(day=1)
        summaries: List[MonthlySummary] = []
        for offset in range(MONTHS_IN_REPORT - 1, -1, -1):
            first = shift_month(current, -offset)
            start, end = month_bounds(first)
            in_month = [t for t in self._transactions if start <= t.date < end]
            income = self.get_total_income(in_month)
            expenses = self.get_total_expenses(in_month)
            summaries.append(
                MonthlySummary(
                    month=first.isoformat()[:7],
                    label=month_label(first),
                    income=income,
                    expenses=expenses,
                    balance=income - expenses,
                )
            )
        return summaries

    def get_daily_balance_trend(self) -> List[DailyBalance]:
        """Running balance as of each of the last 30 days, oldest first."""
        today = self._today()
        ordered = sorted(self._transactions, key=lambda t: t.date)
        balance = ZERO
        index = 0
        trend: List[DailyBalance] = []
        for offset in range(DAYS_IN_TREND - 1, -1, -1):
            day = today - timedelta(days=offset)
            cutoff = day.isoformat()
            while index < len(ordered) and ordered[index].date <= cutoff:
                balance += ordered[index].signed_amount
                index += 1
            trend.append(DailyBalance(date=cutoff, label=day_label(day), balance=balance))
        return trend

    def clear_all_data(self) -> None:
        """Drop every transaction; categories are kept."""
        self._commit_transactions([])
        logger.info("Cleared all transactions")

    def export_data(self) -> str:
        return json.dumps(
            {
                TRANSACTIONS_KEY: [t.to_dict() for t in self._transactions],
                CATEGORIES_KEY: [c.to_dict() for c in self._categories],
            },
            indent=2,
            ensure_ascii=False,
        )

    def import_data(self, json_text: str) -> bool:
        """Replace collections from an export document.

        Each section is replaced only when its key is present. Nothing changes
        unless the whole document parses and every present section passes the
        shape check.
        """
        try:
            document = json.loads(json_text)
        except (TypeError, ValueError) as exc:
            logger.warning("Rejected import: invalid JSON (%s)", exc)
            return False
        if not isinstance(document, dict):
            logger.warning("Rejected import: expected a JSON object")
            return False

        try:
            transactions = _optional_section(document, TRANSACTIONS_KEY, _parse_transactions)
            categories = _optional_section(document, CATEGORIES_KEY, _parse_categories)
        except ValidationError as exc:
            logger.warning("Rejected import: %s", exc)
            return False

        if transactions is not None:
            self._commit_transactions(transactions)
        if categories is not None:
            self._commit_categories(categories)
        logger.info(
            "Imported data (transactions=%s, categories=%s)",
            "replaced" if transactions is not None else "kept",
            "replaced" if categories is not None else "kept",
        )
        return True

    # Internal helpers -----------------------------------------------------
    def _new_id(self) -> str:
        taken = {t.id for t in self._transactions}
        candidate = uuid4().hex
        while candidate in taken:
            candidate = uuid4().hex
        return candidate

    def _sum_kind(self, kind: str, transactions: Optional[Iterable[Transaction]]) -> Decimal:
        records = self._transactions if transactions is None else transactions
        return sum((t.amount for t in records if t.kind == kind), start=ZERO)

    def _read(self, key: str, parse: Callable[[object], list]) -> Optional[list]:
        raw = self._blobs.get(key)
        if raw is None:
            return None
        try:
            return parse(json.loads(raw))
        except ValueError as exc:
            # json.JSONDecodeError and ValidationError are both ValueErrors.
            raise CorruptStateError(f"Persisted {key} are corrupt: {exc}") from exc

    def _write(self, key: str, records: List[Dict[str, Any]]) -> None:
        try:
            self._blobs.set(key, json.dumps(records, indent=2, ensure_ascii=False))
        except PersistenceError:
            raise
        except Exception as exc:  # pragma: no cover
            raise PersistenceError(f"Unexpected error while saving {key}") from exc

    def _commit_transactions(self, records: List[Transaction]) -> None:
        self._write(TRANSACTIONS_KEY, [t.to_dict() for t in records])
        self._transactions = records

    def _commit_categories(self, records: List[Category]) -> None:
        self._write(CATEGORIES_KEY, [c.to_dict() for c in records])
        self._categories = records


def _normalise_filters(filters: Dict[str, object]) -> Dict[str, str]:
    criteria: Dict[str, str] = {}
    for key, value in filters.items():
        name = FILTER_ALIASES.get(key, key)
        if name not in FILTER_FIELDS:
            logger.debug("Ignoring unknown transaction filter %r", key)
            continue
        if value is None:
            continue
        if isinstance(value, datetime):
            value = value.date()
        text = value.isoformat() if isinstance(value, date) else str(value).strip()
        if text:
            criteria[name] = text
    return criteria


def _hydrate(raw: object, factory: Callable[[Dict[str, Any]], Any], what: str) -> list:
    if not isinstance(raw, list):
        raise ValidationError(f"{what} must be a JSON array")
    records = []
    for index, item in enumerate(raw):
        try:
            records.append(factory(item))
        except ValidationError as exc:
            raise ValidationError(f"{what}[{index}]: {exc}") from exc
    return records


def _parse_transactions(raw: object) -> List[Transaction]:
    records = _hydrate(raw, Transaction.from_dict, TRANSACTIONS_KEY)
    seen = set()
    for transaction in records:
        if transaction.id in seen:
            raise ValidationError(f"duplicate transaction id {transaction.id!r}")
        seen.add(transaction.id)
    return records


def _parse_categories(raw: object) -> List[Category]:
    records = _hydrate(raw, Category.from_dict, CATEGORIES_KEY)
    seen = set()
    for category in records:
        if category.name in seen:
            raise ValidationError(f"duplicate category name {category.name!r}")
        seen.add(category.name)
    return records


def _optional_section(
    document: Dict[str, Any], key: str, parse: Callable[[object], list]
) -> Optional[list]:
    if document.get(key) is None:
        return None
    return parse(document[key])
