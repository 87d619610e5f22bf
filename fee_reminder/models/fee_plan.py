"""Fee plan and installment models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from fee_reminder.models.enums import InstallmentState, InstallmentStatus


@dataclass(frozen=True)
class ScheduledInstallment:
    """Requested installment, before identifiers are assigned."""

    due_date: date
    amount: Decimal


@dataclass
class Installment:
    """One scheduled payment within a fee plan (echeance)."""

    installment_id: str
    due_date: date
    amount: Decimal
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_at: datetime | None = None

    @property
    def is_paid(self) -> bool:
        return self.status == InstallmentStatus.PAID

    def state(self, today: date) -> InstallmentState:
        """Status as seen on ``today``; overdue means pending past its due date."""
        if self.is_paid:
            return InstallmentState.PAID
        if self.due_date < today:
            return InstallmentState.OVERDUE
        return InstallmentState.PENDING


@dataclass
class FeePlan:
    """Tuition owed for one student and school year.

    ``total_amount`` is fixed at creation. ``amount_paid`` is only ever
    changed by the ledger's payment operation and always equals the sum of
    paid installment amounts.
    """

    fee_plan_id: str
    student_id: str
    school_year: str  # e.g. "2025-2026"
    total_amount: Decimal
    amount_paid: Decimal = Decimal("0.00")
    installments: list[Installment] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def balance(self) -> Decimal:
        """Amount still owed."""
        return self.total_amount - self.amount_paid

    def paid_total(self) -> Decimal:
        """Sum of paid installment amounts, recomputed from the installments."""
        return sum(
            (i.amount for i in self.installments if i.is_paid),
            Decimal("0.00"),
        )

    def find_installment(self, installment_id: str) -> Installment | None:
        for installment in self.installments:
            if installment.installment_id == installment_id:
                return installment
        return None

    def pending_installments(self) -> list[Installment]:
        return [i for i in self.installments if not i.is_paid]
