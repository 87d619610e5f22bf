"""Append-only reminder journal with a de-duplication index."""

from __future__ import annotations

import logging
import threading
from datetime import date, timedelta

from fee_reminder.exceptions import ConflictError
from fee_reminder.models import ReminderLevel, ReminderRecord
from fee_reminder.store.school import SchoolDataStore

logger = logging.getLogger(__name__)

DedupKey = tuple[str, ReminderLevel, date]


class ReminderJournal:
    """Audit trail of issued reminders.

    Records are never updated or removed. An in-memory index keyed by
    ``(installment_id, level, issued_on)`` answers "already sent?" lookups
    without scanning the journal.
    """

    def __init__(self, store: SchoolDataStore) -> None:
        self.store = store
        self._index: set[DedupKey] = set()
        self._lock = threading.Lock()
        self.refresh()

    def refresh(self) -> None:
        """Rebuild the index from the backend, picking up other writers' records."""
        keys = {record.dedup_key for record in self.store.list_reminders()}
        with self._lock:
            self._index = keys
        logger.debug("Journal index rebuilt: %d entries", len(keys))

    def has_issued(self, installment_id: str, level: ReminderLevel, day: date) -> bool:
        with self._lock:
            return (installment_id, level, day) in self._index

    def append(self, record: ReminderRecord) -> None:
        """Add a record, refusing a second one for the same key."""
        with self.store.exclusive(), self._lock:
            if record.dedup_key in self._index:
                raise ConflictError(
                    f"Reminder {record.level.value} for installment {record.installment_id} "
                    f"already issued on {record.issued_on.isoformat()}"
                )
            self.store.add_reminder(record)
            self._index.add(record.dedup_key)

    def records(self, limit: int | None = None) -> list[ReminderRecord]:
        """Journal entries, most recently issued first."""
        ordered = sorted(self.store.list_reminders(), key=lambda r: r.issued_at, reverse=True)
        return ordered[:limit] if limit is not None else ordered

    def for_installment(self, installment_id: str) -> list[ReminderRecord]:
        return [r for r in self.records() if r.installment_id == installment_id]

    def count(self) -> int:
        return len(self.store.list_reminders())

    def count_since(self, today: date, days: int = 30) -> int:
        """Reminders issued in the trailing window ``[today - days, today]``."""
        start = today - timedelta(days=days)
        return sum(1 for r in self.store.list_reminders() if start <= r.issued_on <= today)
