"""Shared fixtures for the expense tracker test suite."""

from __future__ import annotations

from datetime import date

import pytest

from expense_store.storage import MemoryBlobStore
from expense_store.store import ExpenseStore

TODAY = date(2024, 3, 15)


@pytest.fixture
def blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def store(blobs: MemoryBlobStore, today: date) -> ExpenseStore:
    return ExpenseStore(blobs, today=lambda: today)


@pytest.fixture
def add(store: ExpenseStore):
    """Shortcut for recording a transaction with sensible defaults."""

    def _add(kind: str, day: str, amount, category: str = "Food", description: str = ""):
        return store.add_transaction(
            {
                "kind": kind,
                "date": day,
                "amount": amount,
                "category": category,
                "description": description,
            }
        )

    return _add
