"""Reminder journal models."""

from dataclasses import dataclass, field
from datetime import date, datetime

from fee_reminder.models.enums import ChannelKind, DeliveryStatus, ReminderLevel


@dataclass(frozen=True)
class ChannelDraft:
    """Rendered message handed to a sender."""

    channel: ChannelKind
    recipient: str
    body: str
    subject: str | None = None  # email only


@dataclass(frozen=True)
class ChannelAttempt:
    """Rendered message together with its delivery outcome."""

    channel: ChannelKind
    recipient: str
    body: str
    status: DeliveryStatus
    subject: str | None = None


@dataclass(frozen=True)
class ReminderRecord:
    """Immutable journal entry for one issued reminder (rappel).

    ``issued_on`` is the calendar day the run was processed for and is the
    de-duplication key together with the installment and level.
    """

    reminder_id: str
    fee_plan_id: str
    installment_id: str
    student_id: str
    household_id: str
    level: ReminderLevel
    issued_on: date
    issued_at: datetime
    attempts: tuple[ChannelAttempt, ...] = field(default_factory=tuple)

    @property
    def dedup_key(self) -> tuple[str, ReminderLevel, date]:
        return (self.installment_id, self.level, self.issued_on)
