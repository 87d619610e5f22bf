"""Fee plan ledger: creation, payments and deletion of fee plans."""

from __future__ import annotations

import calendar
import logging
import uuid
from datetime import date, datetime, timezone
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Callable

from fee_reminder.exceptions import AlreadyPaidError, NotFoundError, ValidationError
from fee_reminder.locks import KeyedLock
from fee_reminder.models import (
    FeePlan,
    Installment,
    InstallmentState,
    InstallmentStatus,
    ScheduledInstallment,
)
from fee_reminder.store.school import SchoolDataStore

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_amount(value: Decimal | int | str, field: str = "amount") -> Decimal:
    """Parse a positive currency amount with at most two decimal places."""
    if isinstance(value, float):
        # Floats cannot represent cents exactly
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(field, f"not a valid amount: {value!r}") from e
    if not amount.is_finite():
        raise ValidationError(field, f"not a valid amount: {value!r}")
    if amount <= 0:
        raise ValidationError(field, f"must be positive, got {amount}")
    if amount != amount.quantize(CENT):
        raise ValidationError(field, f"must have at most two decimal places, got {amount}")
    return amount.quantize(CENT)


def add_months(start: date, months: int) -> date:
    """Shift a date by whole calendar months, clamping to the month's last day."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def build_schedule(
    total_amount: Decimal | int | str,
    count: int,
    first_due_date: date,
) -> list[ScheduledInstallment]:
    """Split a total into monthly installments.

    Each installment gets the total divided by ``count`` rounded down to the
    cent; the last one absorbs the remainder so the amounts always sum to
    the total.

    Parameters
    ----------
    total_amount : Decimal | int | str
        Amount owed for the school year.
    count : int
        Number of installments (at least 1).
    first_due_date : date
        Due date of the first installment; the others follow monthly.

    Returns
    -------
    list[ScheduledInstallment]
        Installments in due-date order.
    """
    total = to_amount(total_amount, "total_amount")
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise ValidationError("count", f"must be a positive integer, got {count!r}")

    share = (total / count).quantize(CENT, rounding=ROUND_DOWN)
    if share <= 0:
        raise ValidationError("count", f"too many installments for a total of {total}")
    last = total - share * (count - 1)

    return [
        ScheduledInstallment(
            due_date=add_months(first_due_date, i),
            amount=last if i == count - 1 else share,
        )
        for i in range(count)
    ]


def installment_state(installment: Installment, today: date) -> InstallmentState:
    """Derived status of an installment on ``today``."""
    return installment.state(today)


class Ledger:
    """Owner of fee plan state.

    ``record_payment`` is the only writer of ``amount_paid``. Payments on the
    same fee plan are serialized with a per-plan lock, as the plan and its
    installments are stored as one document. The read-modify-write of that
    document runs inside the store's exclusive section, which also keeps out
    writers in other processes sharing a file store.
    """

    def __init__(
        self,
        store: SchoolDataStore,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.store = store
        self.clock = clock or _utcnow
        self.id_factory = id_factory or _new_id
        self._plan_locks = KeyedLock()

    def create_fee_plan(
        self,
        student_id: str,
        school_year: str,
        installments: list[ScheduledInstallment],
        total_amount: Decimal | int | str | None = None,
    ) -> FeePlan:
        """Create a fee plan with all installments pending.

        Raises
        ------
        ValidationError
            On a missing school year, an empty schedule, a non-positive
            amount, or a ``total_amount`` that differs from the sum of the
            installments.
        NotFoundError
            If the student does not exist.
        """
        if not school_year or not str(school_year).strip():
            raise ValidationError("school_year", "is required")
        if not installments:
            raise ValidationError("installments", "at least one installment is required")

        checked: list[tuple[date, Decimal]] = []
        for n, item in enumerate(installments):
            if not isinstance(item.due_date, date) or isinstance(item.due_date, datetime):
                raise ValidationError(f"installments[{n}].due_date", "must be a calendar date")
            checked.append((item.due_date, to_amount(item.amount, f"installments[{n}].amount")))

        total = sum((amount for _, amount in checked), Decimal("0.00"))
        if total_amount is not None and to_amount(total_amount, "total_amount") != total:
            raise ValidationError(
                "total_amount",
                f"{total_amount} does not match the sum of installments {total}",
            )

        now = self.clock()
        fee_plan = FeePlan(
            fee_plan_id=self.id_factory(),
            student_id=student_id,
            school_year=str(school_year).strip(),
            total_amount=total,
            amount_paid=Decimal("0.00"),
            installments=[
                Installment(installment_id=self.id_factory(), due_date=due, amount=amount)
                for due, amount in sorted(checked, key=lambda pair: pair[0])
            ],
            created_at=now,
        )
        with self.store.exclusive():
            self.store.require_student(student_id)
            self.store.save_fee_plan(fee_plan)
        logger.info(
            "Created fee plan %s for student %s: %d installments, total %s",
            fee_plan.fee_plan_id,
            student_id,
            len(fee_plan.installments),
            total,
        )
        return fee_plan

    def record_payment(
        self,
        fee_plan_id: str,
        installment_id: str,
        amount: Decimal | int | str,
    ) -> FeePlan:
        """Mark an installment as paid.

        The amount must equal the installment's nominal amount; partial and
        repeated payments are rejected and leave the plan unchanged.
        """
        paid = to_amount(amount)

        with self._plan_locks.hold(fee_plan_id), self.store.exclusive():
            fee_plan = self.store.require_fee_plan(fee_plan_id)
            installment = fee_plan.find_installment(installment_id)
            if installment is None:
                raise NotFoundError("Installment", installment_id)
            if installment.status == InstallmentStatus.PAID:
                raise AlreadyPaidError(installment_id)
            if paid != installment.amount:
                raise ValidationError(
                    "amount",
                    f"{paid} does not match installment amount {installment.amount}",
                )

            now = self.clock()
            installment.status = InstallmentStatus.PAID
            installment.paid_at = now
            fee_plan.amount_paid += paid
            fee_plan.updated_at = now
            self.store.save_fee_plan(fee_plan)

        logger.info("Recorded payment of %s on %s/%s", paid, fee_plan_id, installment_id)
        return fee_plan

    def delete_fee_plan(self, fee_plan_id: str) -> None:
        """Delete a fee plan, paid installments included. Cannot be undone."""
        with self._plan_locks.hold(fee_plan_id):
            if not self.store.remove_fee_plan(fee_plan_id):
                raise NotFoundError("FeePlan", fee_plan_id)
        logger.warning("Deleted fee plan %s", fee_plan_id)
