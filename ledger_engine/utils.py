# ledger_engine/utils.py
from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Tuple

from ledger_engine.core.models import TransactionRecord


def parse_date(value) -> date:
    """
    Turn an ISO-8601 date or timestamp into a local calendar date.

    Timestamps with an offset (including a trailing ``Z``) are converted to
    local wall-clock time first, so month and day agree with how the record
    was originally dated on the device.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Could not parse date '{value}'.") from None
    else:
        raise ValueError(f"Unrecognized date value: {value!r}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.date()


def parse_amount(value) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"Could not parse amount {value!r}.")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError(f"Could not parse amount {value!r}.") from None
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount {value!r}.")
    return amount


def shift_month(year: int, month: int, months: int) -> Tuple[int, int]:
    month_index = month - 1 + months
    return year + month_index // 12, month_index % 12 + 1


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, pulling days past the end of the month back to its last day."""
    return date(year, month, min(day, monthrange(year, month)[1]))


def days_in_month(year: int, month: int) -> int:
    return monthrange(year, month)[1]


def filter_records_by_month(
    records: Iterable[TransactionRecord], year: int, month: int
) -> List[TransactionRecord]:
    """
    Return only those records whose date falls in the given year and month.
    """
    return [r for r in records if r.occurred_on.year == year and r.occurred_on.month == month]


def parse_month(month_str: str) -> Tuple[int, int]:
    """Parse a ``YYYY-MM`` string."""
    try:
        year, month = map(int, month_str.split('-'))
    except ValueError:
        raise ValueError(f"Month must look like YYYY-MM, got '{month_str}'.") from None
    if not 1 <= month <= 12:
        raise ValueError(f"Month must look like YYYY-MM, got '{month_str}'.")
    return year, month
