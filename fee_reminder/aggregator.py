"""Read-only summary statistics over the ledger and reminder journal."""

from dataclasses import asdict, dataclass
from datetime import date, timedelta
from decimal import Decimal

from fee_reminder.models import InstallmentState
from fee_reminder.store.school import SchoolDataStore

RECENT_REMINDER_DAYS = 30


@dataclass(frozen=True)
class LedgerStats:
    """Dashboard figures as of a given day."""

    households: int
    students: int
    total_due: Decimal
    total_paid: Decimal
    installments_paid: int
    installments_pending: int  # pending and not yet due
    installments_overdue: int
    reminders_total: int
    reminders_recent: int  # issued within the trailing 30 days

    @property
    def total_unpaid(self) -> Decimal:
        return self.total_due - self.total_paid

    def to_dict(self) -> dict:
        data = asdict(self)
        data["total_unpaid"] = self.total_unpaid
        return data


def compute_stats(store: SchoolDataStore, today: date) -> LedgerStats:
    """Fold over the store. Nothing is written."""
    total_due = Decimal("0.00")
    total_paid = Decimal("0.00")
    states = {state: 0 for state in InstallmentState}

    for fee_plan in store.list_fee_plans():
        total_due += fee_plan.total_amount
        total_paid += fee_plan.amount_paid
        for installment in fee_plan.installments:
            states[installment.state(today)] += 1

    window_start = today - timedelta(days=RECENT_REMINDER_DAYS)
    reminders = store.list_reminders()

    return LedgerStats(
        households=len(store.list_households()),
        students=len(store.list_students()),
        total_due=total_due,
        total_paid=total_paid,
        installments_paid=states[InstallmentState.PAID],
        installments_pending=states[InstallmentState.PENDING],
        installments_overdue=states[InstallmentState.OVERDUE],
        reminders_total=len(reminders),
        reminders_recent=sum(1 for r in reminders if window_start <= r.issued_on <= today),
    )
