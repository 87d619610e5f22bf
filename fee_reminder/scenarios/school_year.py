"""School year scenario populating a store with fee plans and payments."""

from __future__ import annotations

import logging
import random
from datetime import date
from decimal import Decimal

from fee_reminder.generators import HouseholdGenerator, StudentGenerator
from fee_reminder.ledger import Ledger, build_schedule
from fee_reminder.store.school import SchoolDataStore

logger = logging.getLogger(__name__)


class SchoolYearScenario:
    """Generate households, students and their fee plans for one school year.

    This scenario creates:
    - Households with one to three students
    - One fee plan per student with monthly installments
    - Payments for a share of the installments already due on ``today``
    """

    def __init__(
        self,
        num_households: int = 50,
        school_year: str = "2025-2026",
        annual_fee: Decimal = Decimal("900.00"),
        installments: int = 3,
        first_due_date: date = date(2025, 9, 1),
        paid_rate: float = 0.80,
        seed: int | None = None,
    ) -> None:
        """Initialize school year scenario.

        Parameters
        ----------
        num_households : int
            Number of households to generate.
        school_year : str
            Label of the school year.
        annual_fee : Decimal
            Total owed per student.
        installments : int
            Number of monthly installments per fee plan.
        first_due_date : date
            Due date of the first installment.
        paid_rate : float
            Share of already-due installments that get paid (0.0 to 1.0).
        seed : int | None
            Random seed for reproducibility.
        """
        self.num_households = num_households
        self.school_year = school_year
        self.annual_fee = annual_fee
        self.installments = installments
        self.first_due_date = first_due_date
        self.paid_rate = paid_rate
        self.random = random.Random(seed)
        self._household_gen = HouseholdGenerator(seed=seed)
        self._student_gen = StudentGenerator(seed=seed + 1 if seed is not None else None)

    def generate(self, store: SchoolDataStore, today: date) -> SchoolDataStore:
        """Populate ``store`` and return it.

        Parameters
        ----------
        store : SchoolDataStore
            Store to fill (usually empty).
        today : date
            Installments due before this day may be marked as paid.
        """
        ledger = Ledger(store)
        schedule = build_schedule(self.annual_fee, self.installments, self.first_due_date)
        payments = 0

        for household in self._household_gen.generate_batch(self.num_households):
            store.add_household(household)
            for _ in range(self.random.randint(1, 3)):
                student = store.add_student(self._student_gen.generate(household))
                fee_plan = ledger.create_fee_plan(student.student_id, self.school_year, schedule)
                for installment in fee_plan.installments:
                    if installment.due_date < today and self.random.random() < self.paid_rate:
                        ledger.record_payment(
                            fee_plan.fee_plan_id, installment.installment_id, installment.amount
                        )
                        payments += 1

        logger.info("School year scenario generated: %s, payments=%d", store.summary(), payments)
        return store
