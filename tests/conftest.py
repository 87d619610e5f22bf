"""Pytest configuration and fixtures."""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from fee_reminder.ledger import Ledger
from fee_reminder.models import Household, ScheduledInstallment, Student
from fee_reminder.store import SchoolDataStore


class FixedClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen at 2025-08-22 08:00 UTC."""
    return FixedClock(datetime(2025, 8, 22, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock: FixedClock) -> SchoolDataStore:
    """Create a fresh in-memory store for each test."""
    return SchoolDataStore(clock=clock)


@pytest.fixture
def ledger(store: SchoolDataStore, clock: FixedClock) -> Ledger:
    return Ledger(store, clock=clock)


@pytest.fixture
def household() -> Household:
    return Household(
        household_id="hh-001",
        first_name="Marie",
        last_name="Dupont",
        email="marie.dupont@example.fr",
        phone="+33612345678",
    )


@pytest.fixture
def student() -> Student:
    return Student(
        student_id="stu-001",
        household_id="hh-001",
        first_name="Lucas",
        last_name="Dupont",
        class_label="CM2",
    )


@pytest.fixture
def enrolled(store: SchoolDataStore, household: Household, student: Student) -> Student:
    """Household and student already registered."""
    store.add_household(household)
    store.add_student(student)
    return student


@pytest.fixture
def monthly_schedule() -> list[ScheduledInstallment]:
    """Three monthly installments of 100 starting 2025-09-01."""
    return [
        ScheduledInstallment(date(2025, 9, 1), Decimal("100.00")),
        ScheduledInstallment(date(2025, 10, 1), Decimal("100.00")),
        ScheduledInstallment(date(2025, 11, 1), Decimal("100.00")),
    ]


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible sample data."""
    return 42


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handler and level changes made by setup_logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
