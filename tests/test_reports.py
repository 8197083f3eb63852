"""Tests for the monthly summary and daily balance trend reports."""

from datetime import date, timedelta
from decimal import Decimal

from expense_store.storage import MemoryBlobStore
from expense_store.store import ExpenseStore


def test_monthly_data_covers_six_months_oldest_first(store):
    months = store.get_monthly_data()
    assert [m.label for m in months] == ["Oct 23", "Nov 23", "Dec 23", "Jan 24", "Feb 24", "Mar 24"]
    assert [m.month for m in months] == [
        "2023-10", "2023-11", "2023-12", "2024-01", "2024-02", "2024-03",
    ]
    assert all(m.income == 0 and m.expenses == 0 and m.balance == 0 for m in months)


def test_monthly_data_uses_half_open_month_bounds(store, add):
    add("income", "2024-01-31", 100)
    add("income", "2024-02-01", 50)
    add("expense", "2024-02-29", 20)

    months = {m.month: m for m in store.get_monthly_data()}
    assert months["2024-01"].income == 100
    assert months["2024-02"].income == 50
    assert months["2024-02"].expenses == 20
    assert months["2024-02"].balance == 30


def test_monthly_income_sums_to_window_total(store, add):
    add("income", "2023-09-30", 999)  # before the window
    add("income", "2023-10-01", 10)
    add("income", "2023-12-24", "20.50")
    add("income", "2024-03-15", 30)
    add("income", "2024-03-20", 40)  # later this month, still inside the window

    in_window = store.get_transactions(date_from="2023-10-01", date_to="2024-03-31")
    total = sum((m.income for m in store.get_monthly_data()), Decimal("0"))
    assert total == store.get_total_income(in_window) == Decimal("100.50")


def test_monthly_data_crosses_year_boundary():
    store = ExpenseStore(MemoryBlobStore(), today=lambda: date(2025, 2, 3))
    assert [m.month for m in store.get_monthly_data()][0] == "2024-09"


def test_daily_trend_has_thirty_days_ending_today(store, today):
    trend = store.get_daily_balance_trend()
    assert len(trend) == 30
    assert trend[0].date == "2024-02-15"
    assert trend[0].label == "15 Feb"
    assert trend[-1].date == today.isoformat()
    assert trend[-1].label == "15 Mar"


def test_daily_trend_is_cumulative(store, add):
    add("income", "2024-01-01", 500)  # before the window, counts from day one
    add("expense", "2024-03-01", 100)
    add("expense", "2024-03-01", 25)
    add("income", "2024-03-10", 40)
    add("income", "2024-03-20", 1000)  # after today

    balances = {d.date: d.balance for d in store.get_daily_balance_trend()}
    assert balances["2024-02-15"] == 500
    assert balances["2024-02-29"] == 500
    assert balances["2024-03-01"] == 375
    assert balances["2024-03-09"] == 375
    assert balances["2024-03-10"] == 415
    assert balances["2024-03-15"] == 415


def test_daily_trend_matches_running_total_of_distinct_days(store, add, today):
    expected = Decimal("0")
    running = []
    for offset in range(29, -1, -1):
        day = today - timedelta(days=offset)
        amount = Decimal(offset + 1)
        kind = "income" if offset % 3 else "expense"
        add(kind, day.isoformat(), amount)
        expected += amount if kind == "income" else -amount
        running.append(expected)

    assert [d.balance for d in store.get_daily_balance_trend()] == running


def test_report_records_serialise_amounts(store, add):
    add("income", "2024-03-01", "12.5")
    month = store.get_monthly_data()[-1].to_dict()
    assert month == {
        "month": "2024-03",
        "label": "Mar 24",
        "income": "12.50",
        "expenses": "0.00",
        "balance": "12.50",
    }
    assert store.get_daily_balance_trend()[-1].to_dict()["balance"] == "12.50"
