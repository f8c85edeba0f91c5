# ledger_engine/loaders/csv_loader.py
import logging
import re

import pandas as pd

from ledger_engine.core.categorizer import categorize
from ledger_engine.core.models import NewRecord, TransactionKind
from ledger_engine.loaders.base import BaseLoader
from ledger_engine.utils import parse_amount

logger = logging.getLogger(__name__)

# Strip everything that is not a digit, minus sign or dot
_CLEAN_AMOUNT = re.compile(r"[^\d\-.]")
_UNCATEGORIZED = 'uncategorized'


def _local_date(stamp):
    # Offset-carrying timestamps are read on the local wall clock.
    if stamp.tzinfo is not None:
        return stamp.to_pydatetime().astimezone().date()
    return stamp.date()


class CSVLoader(BaseLoader):
    """
    Loader for spreadsheet exports with a header row.

    Required columns (matched case-insensitively, by fragment):
      date, description, amount
    Optional columns:
      kind (income/expense), category

    Without a kind column the sign of the amount decides: negative rows are
    expenses, positive rows are income. Rows without an amount are skipped.
    Rows without a category are matched against the configured keyword map.
    """

    def load(self, file_path):
        df = pd.read_csv(file_path, dtype=str, keep_default_na=False)

        cols = {c.strip().lower(): c for c in df.columns}

        def find(frag):
            if frag in cols:
                return cols[frag]
            return next((orig for low, orig in cols.items() if frag in low), None)

        date_col = find('date')
        desc_col = find('description')
        amt_col = find('amount')
        kind_col = find('kind') or find('type')
        cat_col = find('category')

        for name, col in (('date', date_col), ('description', desc_col), ('amount', amt_col)):
            if col is None:
                raise ValueError(f"Missing required column '{name}' in {file_path}")

        categories = self.config.get('categories', {})
        for idx, row in df.iterrows():
            amt_raw = str(row[amt_col]).strip()
            cleaned = _CLEAN_AMOUNT.sub('', amt_raw)
            if not cleaned:
                logger.debug("Skipping row %s without amount in %s", idx, file_path)
                continue
            try:
                amount = parse_amount(cleaned)
            except ValueError:
                raise ValueError(f"Could not parse amount '{amt_raw}' in {file_path}") from None

            if kind_col is not None and str(row[kind_col]).strip():
                kind = TransactionKind.parse(row[kind_col])
            else:
                kind = TransactionKind.EXPENSE if amount < 0 else TransactionKind.INCOME
            if amount == 0:
                logger.debug("Skipping zero-amount row %s in %s", idx, file_path)
                continue

            d_raw = str(row[date_col]).strip()
            try:
                stamp = pd.to_datetime(d_raw)
            except (ValueError, OverflowError):
                stamp = pd.NaT
            if pd.isna(stamp):
                raise ValueError(
                    f"Could not parse date '{d_raw}' (row {idx} in {file_path})"
                )
            occurred_on = _local_date(stamp)

            desc = str(row[desc_col]).strip()
            category = str(row[cat_col]).strip() if cat_col is not None else ''
            if not category:
                category = categorize(desc, categories, default=_UNCATEGORIZED)

            yield NewRecord(
                description=desc,
                amount=abs(amount),
                kind=kind,
                category_id=category,
                occurred_on=occurred_on,
            )
