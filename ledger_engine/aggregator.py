# ledger_engine/aggregator.py
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from ledger_engine.core.models import (
    CategoryShare,
    CategoryTotal,
    MonthInsights,
    MonthTrend,
    MonthlyStats,
    TransactionKind,
    TransactionRecord,
)
from ledger_engine.store import RecordStore
from ledger_engine.utils import days_in_month, filter_records_by_month, shift_month

_ZERO = Decimal("0")


def compute_stats(store: RecordStore, year: int, month: int) -> MonthlyStats:
    """Income, expense, balance and expense-per-category for one calendar month.

    Records are bucketed by the year and month of ``occurred_on`` only. The
    category breakdown covers expenses alone and lists categories in the
    order they are first met while scanning the store.

    Percentages of the breakdown are left to :func:`category_shares`, which
    guards against a month without expenses.
    """
    records = filter_records_by_month(store.all(), year, month)

    total_income = _ZERO
    total_expense = _ZERO
    by_category: Dict[str, Decimal] = {}
    for record in records:
        if record.kind is TransactionKind.INCOME:
            total_income += record.amount
        else:
            total_expense += record.amount
            by_category[record.category_id] = (
                by_category.get(record.category_id, _ZERO) + record.amount
            )

    return MonthlyStats(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        category_breakdown=[
            CategoryTotal(category_id=cat, amount=amount)
            for cat, amount in by_category.items()
        ],
    )


def category_shares(stats: MonthlyStats) -> List[CategoryShare]:
    """Breakdown sorted by amount, largest first, with each category's share of expense."""
    if not stats.total_expense:
        return []
    ordered = sorted(stats.category_breakdown, key=lambda item: item.amount, reverse=True)
    return [
        CategoryShare(
            category_id=item.category_id,
            amount=item.amount,
            percentage=float(item.amount / stats.total_expense * 100),
        )
        for item in ordered
    ]


def monthly_trend(
    store: RecordStore,
    months: int = 6,
    today: Optional[date] = None,
) -> List[MonthTrend]:
    """Income and expense totals for the last ``months`` months, oldest first."""
    if months <= 0:
        raise ValueError(f"months must be greater than 0, got {months}.")
    today = today or date.today()
    trend = []
    for offset in range(months - 1, -1, -1):
        year, month = shift_month(today.year, today.month, -offset)
        stats = compute_stats(store, year, month)
        trend.append(
            MonthTrend(
                year=year,
                month=month,
                total_income=stats.total_income,
                total_expense=stats.total_expense,
            )
        )
    return trend


def month_insights(store: RecordStore, year: int, month: int) -> MonthInsights:
    stats = compute_stats(store, year, month)
    top = max(stats.category_breakdown, key=lambda item: item.amount, default=None)
    savings = stats.total_income - stats.total_expense
    savings_pct = (
        round(float(savings / stats.total_income * 100), 1) if stats.total_income > 0 else 0.0
    )
    return MonthInsights(
        top_category=top,
        daily_average=stats.total_expense / days_in_month(year, month),
        savings=savings,
        savings_percentage=savings_pct,
    )


def month_transactions(
    store: RecordStore,
    year: int,
    month: int,
    kind: Optional[TransactionKind] = None,
) -> List[TransactionRecord]:
    """Records of one month, optionally of a single kind, most recent first."""
    records = filter_records_by_month(store.all(), year, month)
    if kind is not None:
        records = [r for r in records if r.kind is TransactionKind.parse(kind)]
    return _most_recent_first(records)


def recent_transactions(store: RecordStore, limit: int = 5) -> List[TransactionRecord]:
    return _most_recent_first(store.all())[:limit]


def _most_recent_first(records: List[TransactionRecord]) -> List[TransactionRecord]:
    # Ties on date put the later insertion first.
    return sorted(reversed(records), key=lambda r: r.occurred_on, reverse=True)
