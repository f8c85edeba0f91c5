from datetime import date
from decimal import Decimal
from itertools import count

import pytest

from ledger_engine.aggregator import (
    category_shares,
    compute_stats,
    month_insights,
    month_transactions,
    monthly_trend,
    recent_transactions,
)
from ledger_engine.core.models import CategoryTotal, MonthlyStats, NewRecord, TransactionKind
from ledger_engine.store import RecordStore

INCOME = TransactionKind.INCOME
EXPENSE = TransactionKind.EXPENSE


def make_store(rows):
    ids = count(1)
    store = RecordStore(id_factory=lambda: str(next(ids)))
    for description, amount, kind, cat, day in rows:
        store.add(
            NewRecord(
                description=description,
                amount=Decimal(amount),
                kind=kind,
                category_id=cat,
                occurred_on=day,
            )
        )
    return store


@pytest.fixture
def december():
    return make_store(
        [
            ("Salary", "5000", INCOME, "1", date(2025, 12, 5)),
            ("Supermarket", "450", EXPENSE, "4", date(2025, 12, 10)),
            ("Rent", "1500", EXPENSE, "6", date(2025, 12, 1)),
            ("Uber", "45", EXPENSE, "5", date(2025, 12, 15)),
            ("Cinema", "80", EXPENSE, "7", date(2025, 12, 20)),
            ("Market again", "50", EXPENSE, "4", date(2025, 12, 28)),
            ("November rent", "1500", EXPENSE, "6", date(2025, 11, 1)),
            ("January bonus", "300", INCOME, "2", date(2026, 1, 2)),
        ]
    )


def test_totals_only_count_the_target_month(december):
    stats = compute_stats(december, 2025, 12)

    assert stats.total_income == Decimal("5000")
    assert stats.total_expense == Decimal("2125")
    assert stats.balance == Decimal("2875")


def test_breakdown_follows_first_occurrence_in_store_order(december):
    stats = compute_stats(december, 2025, 12)

    assert stats.category_breakdown == [
        CategoryTotal("4", Decimal("500")),
        CategoryTotal("6", Decimal("1500")),
        CategoryTotal("5", Decimal("45")),
        CategoryTotal("7", Decimal("80")),
    ]


def test_breakdown_excludes_income_of_the_same_category():
    store = make_store(
        [
            ("Refund", "200", INCOME, "4", date(2025, 12, 3)),
            ("Groceries", "120", EXPENSE, "4", date(2025, 12, 4)),
        ]
    )
    stats = compute_stats(store, 2025, 12)

    assert stats.category_breakdown == [CategoryTotal("4", Decimal("120"))]


def test_empty_month_is_all_zero(december):
    assert compute_stats(december, 2024, 3) == MonthlyStats()
    assert compute_stats(RecordStore(), 2025, 12).category_breakdown == []


def test_balance_may_be_negative():
    store = make_store([("Rent", "1500", EXPENSE, "6", date(2025, 12, 1))])
    assert compute_stats(store, 2025, 12).balance == Decimal("-1500")


def test_category_shares_sorted_with_percentages(december):
    shares = category_shares(compute_stats(december, 2025, 12))

    assert [s.category_id for s in shares] == ["6", "4", "7", "5"]
    assert shares[0].percentage == pytest.approx(1500 / 2125 * 100)
    assert sum(s.percentage for s in shares) == pytest.approx(100)


def test_category_shares_guard_zero_expense():
    store = make_store([("Salary", "5000", INCOME, "1", date(2025, 12, 5))])
    assert category_shares(compute_stats(store, 2025, 12)) == []


def test_monthly_trend_crosses_year_boundary(december):
    trend = monthly_trend(december, months=3, today=date(2026, 1, 19))

    assert [(p.year, p.month) for p in trend] == [(2025, 11), (2025, 12), (2026, 1)]
    assert [p.total_expense for p in trend] == [Decimal("1500"), Decimal("2125"), Decimal("0")]
    assert trend[-1].total_income == Decimal("300")


def test_monthly_trend_needs_at_least_one_month(december):
    with pytest.raises(ValueError):
        monthly_trend(december, months=0)


def test_month_insights(december):
    info = month_insights(december, 2025, 12)

    assert info.top_category == CategoryTotal("6", Decimal("1500"))
    assert info.daily_average == Decimal("2125") / 31
    assert info.savings == Decimal("2875")
    assert info.savings_percentage == 57.5


def test_month_insights_without_income_or_expense():
    info = month_insights(RecordStore(), 2026, 2)

    assert info.top_category is None
    assert info.daily_average == 0
    assert info.savings_percentage == 0.0


def test_month_transactions_filters_kind_and_sorts_recent_first(december):
    expenses = month_transactions(december, 2025, 12, EXPENSE)

    assert [r.description for r in expenses] == [
        "Market again", "Cinema", "Uber", "Supermarket", "Rent",
    ]


def test_recent_transactions_across_months(december):
    recent = recent_transactions(december, limit=3)
    assert [r.description for r in recent] == ["January bonus", "Market again", "Cinema"]


def test_recent_transactions_ties_put_later_insertion_first():
    store = make_store(
        [
            ("First", "1", EXPENSE, "4", date(2025, 12, 1)),
            ("Second", "1", EXPENSE, "4", date(2025, 12, 1)),
        ]
    )
    assert [r.description for r in recent_transactions(store)] == ["Second", "First"]
