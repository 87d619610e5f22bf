"""School data store with referential integrity over a key-value backend."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, ContextManager

from fee_reminder.config import ReminderRules
from fee_reminder.exceptions import (
    ConflictError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)
from fee_reminder.models import FeePlan, Household, ReminderRecord, Student
from fee_reminder.store.kv import InMemoryKeyValueStore, KeyValueStore
from fee_reminder.store.serialization import decode, to_dict

logger = logging.getLogger(__name__)

HOUSEHOLD_PREFIX = "household:"
STUDENT_PREFIX = "student:"
FEE_PLAN_PREFIX = "fee_plan:"
REMINDER_PREFIX = "reminder:"
RULES_KEY = "config:reminder_rules"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_text(field: str, value: str | None) -> None:
    if value is None or not str(value).strip():
        raise ValidationError(field, "is required")


class SchoolDataStore:
    """Typed access to households, students, fee plans, reminders and rules.

    Parameters
    ----------
    backend : KeyValueStore | None
        Persistence backend (default: a fresh in-memory store).
    clock : Callable[[], datetime] | None
        Source of ``created_at`` timestamps.
    """

    def __init__(
        self,
        backend: KeyValueStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.backend: KeyValueStore = backend if backend is not None else InMemoryKeyValueStore()
        self.clock = clock or _utcnow

    def exclusive(self) -> ContextManager[None]:
        """Hold the backend against other writers for a read-check-write sequence."""
        return self.backend.exclusive()

    # Households
    def add_household(self, household: Household) -> Household:
        """Add a household to the store."""
        _require_text("household_id", household.household_id)
        _require_text("first_name", household.first_name)
        _require_text("last_name", household.last_name)
        with self.exclusive():
            if self.backend.get(HOUSEHOLD_PREFIX + household.household_id) is not None:
                raise ConflictError(f"Household {household.household_id} already exists")
            if household.created_at is None:
                household.created_at = self.clock()
            self.backend.set(HOUSEHOLD_PREFIX + household.household_id, to_dict(household))
        return household

    def get_household(self, household_id: str) -> Household | None:
        data = self.backend.get(HOUSEHOLD_PREFIX + household_id)
        return decode("household", data) if data is not None else None

    def require_household(self, household_id: str) -> Household:
        household = self.get_household(household_id)
        if household is None:
            raise NotFoundError("Household", household_id)
        return household

    def list_households(self) -> list[Household]:
        """All households, most recently created first."""
        households = [decode("household", d) for d in self.backend.get_by_prefix(HOUSEHOLD_PREFIX)]
        return sorted(households, key=_created_key, reverse=True)

    def delete_household(self, household_id: str) -> None:
        """Delete a household that no longer has students."""
        with self.exclusive():
            self.require_household(household_id)
            if self.get_household_students(household_id):
                raise ReferentialIntegrityError(
                    f"Household {household_id} still has students and cannot be deleted"
                )
            self.backend.delete(HOUSEHOLD_PREFIX + household_id)
        logger.info("Deleted household %s", household_id)

    # Students
    def add_student(self, student: Student) -> Student:
        """Add a student to the store."""
        _require_text("student_id", student.student_id)
        _require_text("first_name", student.first_name)
        _require_text("last_name", student.last_name)
        _require_text("class_label", student.class_label)
        _require_text("household_id", student.household_id)
        with self.exclusive():
            if self.backend.get(STUDENT_PREFIX + student.student_id) is not None:
                raise ConflictError(f"Student {student.student_id} already exists")
            self.require_household(student.household_id)
            if student.created_at is None:
                student.created_at = self.clock()
            self.backend.set(STUDENT_PREFIX + student.student_id, to_dict(student))
        return student

    def get_student(self, student_id: str) -> Student | None:
        data = self.backend.get(STUDENT_PREFIX + student_id)
        return decode("student", data) if data is not None else None

    def require_student(self, student_id: str) -> Student:
        student = self.get_student(student_id)
        if student is None:
            raise NotFoundError("Student", student_id)
        return student

    def list_students(self) -> list[Student]:
        students = [decode("student", d) for d in self.backend.get_by_prefix(STUDENT_PREFIX)]
        return sorted(students, key=_created_key, reverse=True)

    def get_household_students(self, household_id: str) -> list[Student]:
        """Get all students for a household."""
        return [s for s in self.list_students() if s.household_id == household_id]

    def delete_student(self, student_id: str) -> None:
        """Delete a student that no longer has fee plans."""
        with self.exclusive():
            self.require_student(student_id)
            if self.get_student_fee_plans(student_id):
                raise ReferentialIntegrityError(
                    f"Student {student_id} still has fee plans and cannot be deleted"
                )
            self.backend.delete(STUDENT_PREFIX + student_id)
        logger.info("Deleted student %s", student_id)

    # Fee plans
    def save_fee_plan(self, fee_plan: FeePlan) -> None:
        """Write a fee plan document. Only the ledger should call this."""
        self.backend.set(FEE_PLAN_PREFIX + fee_plan.fee_plan_id, to_dict(fee_plan))

    def get_fee_plan(self, fee_plan_id: str) -> FeePlan | None:
        data = self.backend.get(FEE_PLAN_PREFIX + fee_plan_id)
        return decode("fee_plan", data) if data is not None else None

    def require_fee_plan(self, fee_plan_id: str) -> FeePlan:
        fee_plan = self.get_fee_plan(fee_plan_id)
        if fee_plan is None:
            raise NotFoundError("FeePlan", fee_plan_id)
        return fee_plan

    def list_fee_plans(self) -> list[FeePlan]:
        plans = [decode("fee_plan", d) for d in self.backend.get_by_prefix(FEE_PLAN_PREFIX)]
        return sorted(plans, key=_created_key, reverse=True)

    def get_student_fee_plans(self, student_id: str) -> list[FeePlan]:
        """Get all fee plans for a student."""
        return [p for p in self.list_fee_plans() if p.student_id == student_id]

    def remove_fee_plan(self, fee_plan_id: str) -> bool:
        return self.backend.delete(FEE_PLAN_PREFIX + fee_plan_id)

    # Reminders
    def add_reminder(self, record: ReminderRecord) -> None:
        self.backend.set(REMINDER_PREFIX + record.reminder_id, to_dict(record))

    def list_reminders(self) -> list[ReminderRecord]:
        """All journaled reminders, unordered."""
        return [decode("reminder", d) for d in self.backend.get_by_prefix(REMINDER_PREFIX)]

    # Rules
    def get_rules(self) -> ReminderRules:
        """Stored reminder rules, or the defaults when none were saved.

        Stored rules are returned as-is; callers validate before use.
        """
        data = self.backend.get(RULES_KEY)
        if data is None:
            return ReminderRules()
        return ReminderRules.from_dict(data)

    def save_rules(self, rules: ReminderRules) -> ReminderRules:
        """Validate and persist new reminder rules."""
        rules.validate()
        self.backend.set(RULES_KEY, rules.to_dict())
        logger.info("Reminder rules updated: %s", rules.to_dict())
        return rules

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "households": len(self.backend.get_by_prefix(HOUSEHOLD_PREFIX)),
            "students": len(self.backend.get_by_prefix(STUDENT_PREFIX)),
            "fee_plans": len(self.backend.get_by_prefix(FEE_PLAN_PREFIX)),
            "reminders": len(self.backend.get_by_prefix(REMINDER_PREFIX)),
        }


def _created_key(entity: Household | Student | FeePlan) -> datetime:
    created = entity.created_at or datetime.min
    # Naive timestamps are taken as UTC so they sort alongside aware ones
    return created if created.tzinfo else created.replace(tzinfo=timezone.utc)
