# ledger_engine/recurring.py
from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Optional

from ledger_engine.core.models import NewRecord, TransactionRecord
from ledger_engine.store import RecordStore
from ledger_engine.utils import clamp_day, filter_records_by_month, shift_month

logger = logging.getLogger(__name__)


def _copy_to(record: TransactionRecord, occurred_on: date) -> NewRecord:
    return NewRecord(
        description=record.description,
        amount=record.amount,
        kind=record.kind,
        category_id=record.category_id,
        occurred_on=occurred_on,
        recurrence=record.recurrence,
        series_id=record.series_id,
    )


def _is_occurrence(candidate: TransactionRecord, template: TransactionRecord, due: date) -> bool:
    if candidate.occurred_on != due:
        return False
    if candidate.series_id is not None:
        return candidate.series_id == template.series_id
    # A manually entered payment carries no series; recognise it by value.
    return (
        candidate.category_id == template.category_id
        and candidate.amount == template.amount
    )


class RecurrenceProjector:
    """
    Materializes recurring records into the current month.

    ``clock`` supplies today's local date; tests pass a fixed one.
    """

    def __init__(self, store: RecordStore, clock: Callable[[], date] = date.today):
        self.store = store
        self.clock = clock

    def project_current_month(self, today: Optional[date] = None) -> List[TransactionRecord]:
        """
        Add the missing current-month occurrence of every recurring record.

        Every record with a recurrence marker acts as a template, earlier
        projections included, so a series keeps propagating month after
        month. Running this twice in the same month adds nothing the second
        time. Returns the records it inserted.
        """
        today = today or self.clock()
        created = []
        with self.store.lock:
            for template in self.store.all():
                if template.recurrence is None:
                    continue
                due = clamp_day(today.year, today.month, template.recurrence.day_of_month)
                current = filter_records_by_month(self.store.all(), today.year, today.month)
                if any(_is_occurrence(r, template, due) for r in current):
                    continue
                record_id = self.store.add(_copy_to(template, due))
                created.append(self.store.get(record_id))
                logger.info(
                    "Projected recurring '%s' (%s) to %s",
                    template.description, template.series_id, due.isoformat(),
                )
        return created

    def copy_from_previous_month(self, today: Optional[date] = None) -> List[TransactionRecord]:
        """
        Duplicate every record of the previous month into the current month.

        The day of month is kept, clamped to the last day of the current
        month. Nothing is deduplicated: a second call copies everything
        again.
        """
        today = today or self.clock()
        prev_year, prev_month = shift_month(today.year, today.month, -1)
        created = []
        with self.store.lock:
            for record in filter_records_by_month(self.store.all(), prev_year, prev_month):
                target = clamp_day(today.year, today.month, record.occurred_on.day)
                record_id = self.store.add(_copy_to(record, target))
                created.append(self.store.get(record_id))
        logger.info(
            "Copied %d transaction(s) from %04d-%02d", len(created), prev_year, prev_month
        )
        return created
