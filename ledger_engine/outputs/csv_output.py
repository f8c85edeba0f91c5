# ledger_engine/outputs/csv_output.py

import csv
import logging
import os

from ledger_engine.aggregator import category_shares, compute_stats
from ledger_engine.outputs.base import BaseOutput
from ledger_engine.utils import filter_records_by_month

logger = logging.getLogger(__name__)


class CSVOutput(BaseOutput):
    """
    Writes one month of the ledger to two CSV files in ``output_dir``:
    Ledger<YYYY>-<MM>.csv with the records sorted by date (oldest first),
    and Stats<YYYY>-<MM>.csv with the expense breakdown and month totals.
    """
    def __init__(self, config):
        self.config = config
        self.output_dir = config.get('output_dir', 'data')
        os.makedirs(self.output_dir, exist_ok=True)

    def write(self, store, year, month):
        suffix = f"{year:04d}-{month:02d}"
        records = sorted(
            filter_records_by_month(store.all(), year, month),
            key=lambda r: r.occurred_on,
        )

        ledger_path = os.path.join(self.output_dir, f"Ledger{suffix}.csv")
        with open(ledger_path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(
                ['id', 'date', 'description', 'kind', 'category_id', 'amount', 'recurring_day']
            )
            for r in records:
                writer.writerow([
                    r.id,
                    r.occurred_on.isoformat(),
                    r.description,
                    r.kind.value,
                    r.category_id,
                    f"{r.amount:.2f}",
                    r.recurrence.day_of_month if r.recurrence else '',
                ])

        stats = compute_stats(store, year, month)
        stats_path = os.path.join(self.output_dir, f"Stats{suffix}.csv")
        with open(stats_path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(['category_id', 'amount', 'percentage'])
            for share in category_shares(stats):
                writer.writerow(
                    [share.category_id, f"{share.amount:.2f}", f"{share.percentage:.1f}"]
                )
            writer.writerow([])
            writer.writerow(['total_income', f"{stats.total_income:.2f}", ''])
            writer.writerow(['total_expense', f"{stats.total_expense:.2f}", ''])
            writer.writerow(['balance', f"{stats.balance:.2f}", ''])

        logger.info("Written %d transactions to %s", len(records), ledger_path)
        return [ledger_path, stats_path]
