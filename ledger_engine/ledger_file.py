# ledger_engine/ledger_file.py
from pathlib import Path

import yaml

from ledger_engine.core.models import NewRecord, Recurrence, TransactionKind, TransactionRecord
from ledger_engine.store import RecordStore
from ledger_engine.utils import parse_amount, parse_date


def _recurrence(entry):
    day = entry.get('recurring_day')
    if day is None:
        return None
    try:
        return Recurrence(int(day))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid 'recurring_day' in ledger entry: {entry}: {e}") from None


def _new_record(entry):
    date_str = entry.get('date')
    if not date_str:
        raise ValueError(f"Missing 'date' in ledger entry: {entry}")
    return NewRecord(
        description=entry.get('description', ''),
        amount=parse_amount(entry.get('amount', 0)),
        kind=TransactionKind.parse(entry.get('kind', 'expense')),
        category_id=str(entry.get('category_id', '')),
        occurred_on=parse_date(date_str),
        recurrence=_recurrence(entry),
        series_id=entry.get('series_id'),
    )


def load_ledger(path, store=None):
    """Load records from a YAML ledger file into a store.

    Entries with an ``id`` keep it; entries without one are added as new
    records. A missing file yields an empty store.
    """
    if store is None:
        store = RecordStore()
    path = Path(path)
    if not path.exists():
        return store
    with open(path) as f:
        data = yaml.safe_load(f) or []
    if not isinstance(data, list):
        raise ValueError(f"Ledger file {path} must contain a list of transactions.")

    for entry in data:
        if not isinstance(entry, dict):
            raise ValueError(f"Ledger entry must be a mapping: {entry!r}")
        new = _new_record(entry)
        if not entry.get('id'):
            store.add(new)
            continue
        # Run the store's validation, then put the record back under its own id.
        scratch = RecordStore()
        record = scratch.get(scratch.add(new))
        record.id = str(entry['id'])
        if record.recurrence is not None and new.series_id is None:
            record.series_id = record.id
        store.restore(record)
    return store


def record_to_entry(record: TransactionRecord) -> dict:
    entry = {
        'id': record.id,
        'date': record.occurred_on.isoformat(),
        'description': record.description,
        'amount': str(record.amount),
        'kind': record.kind.value,
        'category_id': record.category_id,
    }
    if record.recurrence is not None:
        entry['recurring_day'] = record.recurrence.day_of_month
    if record.series_id is not None:
        entry['series_id'] = record.series_id
    return entry


def dump_ledger(store, path):
    """Write every record of the store to a YAML ledger file, in store order."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.safe_dump(
            [record_to_entry(r) for r in store.all()],
            f,
            sort_keys=False,
            allow_unicode=True,
        )
