"""Household and student generators."""

from __future__ import annotations

from typing import Iterator

from fee_reminder.generators.base import BaseGenerator
from fee_reminder.models import Household, Student


class HouseholdGenerator(BaseGenerator):
    """Generate synthetic households with a realistic mix of contact channels."""

    # email and phone, email only, phone only, neither
    CONTACT_MIX = [("both", 0.70), ("email", 0.12), ("phone", 0.15), ("none", 0.03)]

    def generate(self) -> Household:
        """Generate a single household.

        Returns
        -------
        Household
            Generated household without ``created_at``.
        """
        contact = self.random.choices(
            [c for c, _ in self.CONTACT_MIX],
            weights=[w for _, w in self.CONTACT_MIX],
            k=1,
        )[0]
        return Household(
            household_id=self.fake.uuid4(),
            first_name=self.fake.first_name(),
            last_name=self.fake.last_name(),
            email=self.fake.email() if contact in ("both", "email") else "",
            phone=self.fake.phone_number() if contact in ("both", "phone") else "",
        )

    def generate_batch(self, count: int) -> Iterator[Household]:
        for _ in range(count):
            yield self.generate()


class StudentGenerator(BaseGenerator):
    """Generate students for a given household."""

    CLASS_LABELS = ["CP", "CE1", "CE2", "CM1", "CM2", "6e", "5e", "4e", "3e"]

    def generate(self, household: Household) -> Student:
        """Generate a student sharing the household's last name."""
        return Student(
            student_id=self.fake.uuid4(),
            household_id=household.household_id,
            first_name=self.fake.first_name(),
            last_name=household.last_name,
            class_label=self.random.choice(self.CLASS_LABELS),
        )
