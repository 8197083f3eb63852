"""Validation helpers shared by the store and its adapters."""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .exceptions import ValidationError

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

INCOME = "income"
EXPENSE = "expense"
KINDS = {INCOME, EXPENSE}


def _quantize_two_decimals(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_amount(raw: object, field: str = "amount") -> Decimal:
    """Convert raw input to a finite Decimal with exactly two fraction digits.

    The sign is deliberately left alone: negative amounts are stored as given.
    """
    if isinstance(raw, bool) or raw is None:
        raise ValidationError(f"{field} must be a numeric value")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:  # type: ignore[arg-type]
        raise ValidationError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")

    try:
        return _quantize_two_decimals(amount)
    except InvalidOperation as exc:
        raise ValidationError(f"{field} is too large") from exc


def validate_kind(value: object, field: str = "kind") -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    canonical = value.strip().lower()
    if canonical not in KINDS:
        raise ValidationError(f"{field} must be one of: {', '.join(sorted(KINDS))}")
    return canonical


def validate_date(value: object, field: str = "date") -> str:
    """Accept a ``date`` or a ``YYYY-MM-DD`` string and return the ISO string.

    Datetimes are truncated to their calendar date.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a YYYY-MM-DD string")
    text = value.strip()
    if not DATE_PATTERN.fullmatch(text):
        raise ValidationError(f"{field} must use the YYYY-MM-DD format")
    try:
        date.fromisoformat(text)
    except ValueError as exc:
        raise ValidationError(f"{field} is not a valid calendar date") from exc
    return text


def validate_required_str(value: object, field: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    return trimmed


def validate_str(value: object, field: str) -> str:
    """Like :func:`validate_required_str` but ``None`` and blanks become ``""``."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value.strip()
