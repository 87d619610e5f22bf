"""Tests for the reminder journal."""

from datetime import date, datetime, timedelta, timezone

import pytest

from fee_reminder.exceptions import ConflictError
from fee_reminder.journal import ReminderJournal
from fee_reminder.models import ReminderLevel, ReminderRecord
from fee_reminder.store import SchoolDataStore


def make_record(
    reminder_id: str,
    installment_id: str = "inst-1",
    level: ReminderLevel = ReminderLevel.PREVENTIVE,
    issued_on: date = date(2025, 8, 22),
    hour: int = 8,
) -> ReminderRecord:
    return ReminderRecord(
        reminder_id=reminder_id,
        fee_plan_id="fp-1",
        installment_id=installment_id,
        student_id="stu-001",
        household_id="hh-001",
        level=level,
        issued_on=issued_on,
        issued_at=datetime.combine(issued_on, datetime.min.time(), tzinfo=timezone.utc)
        + timedelta(hours=hour),
    )


class TestReminderJournal:
    """Tests for ReminderJournal."""

    def test_append_and_lookup(self, store: SchoolDataStore) -> None:
        journal = ReminderJournal(store)
        journal.append(make_record("r1"))

        assert journal.has_issued("inst-1", ReminderLevel.PREVENTIVE, date(2025, 8, 22))
        assert not journal.has_issued("inst-1", ReminderLevel.DUE_DAY, date(2025, 8, 22))
        assert not journal.has_issued("inst-1", ReminderLevel.PREVENTIVE, date(2025, 8, 23))
        assert journal.count() == 1

    def test_duplicate_key_is_rejected(self, store: SchoolDataStore) -> None:
        journal = ReminderJournal(store)
        journal.append(make_record("r1"))

        with pytest.raises(ConflictError, match="already issued on 2025-08-22"):
            journal.append(make_record("r2"))

        assert journal.count() == 1

    def test_same_level_on_another_day_is_allowed(self, store: SchoolDataStore) -> None:
        journal = ReminderJournal(store)
        journal.append(make_record("r1"))
        journal.append(make_record("r2", issued_on=date(2025, 8, 23)))

        assert journal.count() == 2

    def test_index_is_built_from_existing_records(self, store: SchoolDataStore) -> None:
        store.add_reminder(make_record("r1"))

        journal = ReminderJournal(store)

        assert journal.has_issued("inst-1", ReminderLevel.PREVENTIVE, date(2025, 8, 22))

    def test_refresh_picks_up_other_writers(self, store: SchoolDataStore) -> None:
        journal = ReminderJournal(store)
        ReminderJournal(store).append(make_record("r1"))

        assert not journal.has_issued("inst-1", ReminderLevel.PREVENTIVE, date(2025, 8, 22))
        journal.refresh()
        assert journal.has_issued("inst-1", ReminderLevel.PREVENTIVE, date(2025, 8, 22))

    def test_records_newest_first(self, store: SchoolDataStore) -> None:
        journal = ReminderJournal(store)
        journal.append(make_record("r1", issued_on=date(2025, 8, 20)))
        journal.append(make_record("r2", installment_id="inst-2", issued_on=date(2025, 8, 22)))
        journal.append(make_record("r3", installment_id="inst-3", issued_on=date(2025, 8, 21)))

        assert [r.reminder_id for r in journal.records()] == ["r2", "r3", "r1"]
        assert [r.reminder_id for r in journal.records(limit=2)] == ["r2", "r3"]

    def test_for_installment(self, store: SchoolDataStore) -> None:
        journal = ReminderJournal(store)
        journal.append(make_record("r1"))
        journal.append(make_record("r2", level=ReminderLevel.DUE_DAY, issued_on=date(2025, 9, 1)))
        journal.append(make_record("r3", installment_id="inst-2"))

        assert [r.reminder_id for r in journal.for_installment("inst-1")] == ["r2", "r1"]

    def test_count_since_trailing_window(self, store: SchoolDataStore) -> None:
        journal = ReminderJournal(store)
        today = date(2025, 10, 1)
        journal.append(make_record("r1", installment_id="a", issued_on=today - timedelta(days=31)))
        journal.append(make_record("r2", installment_id="b", issued_on=today - timedelta(days=30)))
        journal.append(make_record("r3", installment_id="c", issued_on=today))
        journal.append(make_record("r4", installment_id="d", issued_on=today + timedelta(days=1)))

        assert journal.count_since(today) == 2
        assert journal.count_since(today, days=31) == 3
