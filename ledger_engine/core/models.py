# ledger_engine/core/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def parse(cls, value) -> "TransactionKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown transaction kind '{value}'.") from None


@dataclass(frozen=True)
class Recurrence:
    day_of_month: int

    def __post_init__(self):
        if not 1 <= int(self.day_of_month) <= 31:
            raise ValueError(
                f"Recurrence day must be between 1 and 31, got {self.day_of_month}."
            )


@dataclass
class TransactionRecord:
    id: str
    description: str
    amount: Decimal
    kind: TransactionKind
    category_id: str
    occurred_on: date
    recurrence: Optional[Recurrence] = None
    series_id: Optional[str] = None


@dataclass
class NewRecord:
    """Fields a caller supplies to create a record; the store assigns the id."""

    description: str
    amount: Decimal
    kind: TransactionKind
    category_id: str
    occurred_on: date
    recurrence: Optional[Recurrence] = None
    series_id: Optional[str] = None


@dataclass(frozen=True)
class CategoryTotal:
    category_id: str
    amount: Decimal


@dataclass(frozen=True)
class CategoryShare:
    category_id: str
    amount: Decimal
    percentage: float


@dataclass
class MonthlyStats:
    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    category_breakdown: List[CategoryTotal] = field(default_factory=list)


@dataclass(frozen=True)
class MonthTrend:
    year: int
    month: int
    total_income: Decimal
    total_expense: Decimal


@dataclass(frozen=True)
class MonthInsights:
    top_category: Optional[CategoryTotal]
    daily_average: Decimal
    savings: Decimal
    savings_percentage: float
