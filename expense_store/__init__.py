"""Core store and reporting package for the expense tracker."""

from .models import Category, DailyBalance, MonthlySummary, PeriodSummary, Transaction
from .store import ExpenseStore, export_filename
from .storage import FileBlobStore, MemoryBlobStore
from .exceptions import (
    CategoryInUseError,
    CorruptStateError,
    DuplicateCategoryError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)

__all__ = [
    "Category",
    "DailyBalance",
    "MonthlySummary",
    "PeriodSummary",
    "Transaction",
    "ExpenseStore",
    "export_filename",
    "FileBlobStore",
    "MemoryBlobStore",
    "CategoryInUseError",
    "CorruptStateError",
    "DuplicateCategoryError",
    "PersistenceError",
    "RecordNotFoundError",
    "ValidationError",
]
