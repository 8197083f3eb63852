"""Data models for the expense tracker domain."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict

from .exceptions import ValidationError
from .validators import (
    parse_amount,
    validate_date,
    validate_kind,
    validate_required_str,
    validate_str,
)

__all__ = [
    "Category",
    "DailyBalance",
    "MonthlySummary",
    "PeriodSummary",
    "Transaction",
    "fields_from_payload",
    "format_amount",
]


def format_amount(amount: Decimal) -> str:
    """Render an amount the way it is persisted: a fixed two-decimal string."""
    return f"{amount:.2f}"


def _require_mapping(data: object, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(f"{what} must be a JSON object")
    return data


@dataclass(frozen=True)
class Transaction:
    id: str
    kind: str
    date: str
    amount: Decimal
    category: str
    description: str = ""

    @property
    def signed_amount(self) -> Decimal:
        """Amount as it contributes to the balance."""
        return self.amount if self.kind == "income" else -self.amount

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the transaction to JSON-friendly natives."""
        return {
            "id": self.id,
            "kind": self.kind,
            "date": self.date,
            "amount": format_amount(self.amount),
            "category": self.category,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """Hydrate a persisted transaction, shape-checking every field."""
        data = _require_mapping(data, "transaction")
        return cls(
            id=validate_required_str(data.get("id"), "id"),
            **fields_from_payload(data),
        )


def fields_from_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate the user-supplied fields of a transaction (everything but ``id``)."""
    data = _require_mapping(data, "transaction")
    # "type" is accepted as a synonym so older exports still load.
    kind = data.get("kind", data.get("type"))
    return {
        "kind": validate_kind(kind),
        "date": validate_date(data.get("date")),
        "amount": parse_amount(data.get("amount")),
        "category": validate_required_str(data.get("category"), "category"),
        "description": validate_str(data.get("description"), "description"),
    }


@dataclass(frozen=True)
class Category:
    name: str
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        data = _require_mapping(data, "category")
        return cls(
            name=validate_required_str(data.get("name"), "name"),
            color=validate_required_str(data.get("color"), "color"),
        )


@dataclass(frozen=True)
class MonthlySummary:
    month: str
    label: str
    income: Decimal
    expenses: Decimal
    balance: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "label": self.label,
            "income": format_amount(self.income),
            "expenses": format_amount(self.expenses),
            "balance": format_amount(self.balance),
        }


@dataclass(frozen=True)
class DailyBalance:
    date: str
    label: str
    balance: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "label": self.label, "balance": format_amount(self.balance)}


@dataclass(frozen=True)
class PeriodSummary:
    """Dashboard totals for one relative period."""

    period: str
    income: Decimal
    expenses: Decimal
    balance: Decimal
    transaction_count: int
    income_count: int
    expense_count: int
    expenses_by_category: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def is_positive(self) -> bool:
        return self.balance >= 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "income": format_amount(self.income),
            "expenses": format_amount(self.expenses),
            "balance": format_amount(self.balance),
            "is_positive": self.is_positive,
            "transaction_count": self.transaction_count,
            "income_count": self.income_count,
            "expense_count": self.expense_count,
            "expenses_by_category": {
                name: format_amount(amount) for name, amount in self.expenses_by_category.items()
            },
        }
