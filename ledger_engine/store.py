# ledger_engine/store.py
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from typing import Callable, Iterator, List

from ledger_engine.core.models import (
    NewRecord,
    Recurrence,
    TransactionKind,
    TransactionRecord,
)
from ledger_engine.utils import parse_amount, parse_date

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"description", "amount", "category_id"})


class RecordNotFoundError(LookupError):
    """Raised when an operation names a record id the store does not hold."""

    def __init__(self, record_id: str):
        super().__init__(f"No transaction with id '{record_id}'.")
        self.record_id = record_id


def _new_id() -> str:
    return uuid.uuid4().hex


def _check_description(description) -> str:
    text = str(description or "").strip()
    if not text:
        raise ValueError("Transaction description must not be empty.")
    return text


def _check_amount(amount):
    value = parse_amount(amount)
    if value <= 0:
        raise ValueError(f"Transaction amount must be positive, got {amount}.")
    return value


class RecordStore:
    """
    In-memory holder of every transaction record of a session.

    Records keep their insertion order. Every mutation runs under ``lock``;
    callers that need a check-then-insert sequence (the recurrence
    projector) hold the same lock around it.
    """

    def __init__(self, id_factory: Callable[[], str] = _new_id):
        self._records: List[TransactionRecord] = []
        self._id_factory = id_factory
        self._issued = set()
        self.lock = threading.RLock()

    def add(self, new: NewRecord) -> str:
        record = TransactionRecord(
            id="",
            description=_check_description(new.description),
            amount=_check_amount(new.amount),
            kind=TransactionKind.parse(new.kind),
            category_id=str(new.category_id),
            occurred_on=parse_date(new.occurred_on),
            recurrence=new.recurrence,
            series_id=new.series_id,
        )
        if record.recurrence is not None and not isinstance(record.recurrence, Recurrence):
            raise ValueError(f"Unrecognized recurrence: {record.recurrence!r}")
        with self.lock:
            record.id = self._unique_id()
            if record.recurrence is not None and record.series_id is None:
                record.series_id = record.id
            self._records.append(record)
        logger.debug("Added transaction %s (%s %s)", record.id, record.kind.value, record.amount)
        return record.id

    def restore(self, record: TransactionRecord) -> None:
        """Insert a record that already carries an id, e.g. one read from a ledger file."""
        with self.lock:
            if any(r.id == record.id for r in self._records):
                raise ValueError(f"Duplicate transaction id '{record.id}'.")
            self._issued.add(record.id)
            self._records.append(record)

    def get(self, record_id: str) -> TransactionRecord:
        with self.lock:
            return self._find(record_id)

    def update(self, record_id: str, **fields) -> TransactionRecord:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(
                f"Cannot update field(s) {', '.join(sorted(unknown))}; "
                f"only {', '.join(sorted(UPDATABLE_FIELDS))} may change."
            )
        changes = {}
        if "description" in fields:
            changes["description"] = _check_description(fields["description"])
        if "amount" in fields:
            changes["amount"] = _check_amount(fields["amount"])
        if "category_id" in fields:
            changes["category_id"] = str(fields["category_id"])
        with self.lock:
            current = self._find(record_id)
            updated = replace(current, **changes)
            self._records[self._records.index(current)] = updated
        logger.debug("Updated transaction %s: %s", record_id, sorted(changes))
        return updated

    def delete(self, record_id: str) -> None:
        with self.lock:
            self._records.remove(self._find(record_id))
        logger.debug("Deleted transaction %s", record_id)

    def all(self) -> List[TransactionRecord]:
        with self.lock:
            return list(self._records)

    def __iter__(self) -> Iterator[TransactionRecord]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._records)

    def _find(self, record_id: str) -> TransactionRecord:
        for record in self._records:
            if record.id == record_id:
                return record
        raise RecordNotFoundError(record_id)

    def _unique_id(self) -> str:
        # Ids of deleted records stay taken.
        record_id = self._id_factory()
        while record_id in self._issued:
            record_id = self._id_factory()
        self._issued.add(record_id)
        return record_id
