"""Domain models for the fee ledger and reminder journal."""

from fee_reminder.models.enums import (
    ChannelKind,
    DeliveryStatus,
    InstallmentState,
    InstallmentStatus,
    ReminderLevel,
)
from fee_reminder.models.fee_plan import FeePlan, Installment, ScheduledInstallment
from fee_reminder.models.household import Household, Student
from fee_reminder.models.reminder import ChannelAttempt, ChannelDraft, ReminderRecord

__all__ = [
    "ChannelAttempt",
    "ChannelDraft",
    "ChannelKind",
    "DeliveryStatus",
    "FeePlan",
    "Household",
    "Installment",
    "InstallmentState",
    "InstallmentStatus",
    "ReminderLevel",
    "ReminderRecord",
    "ScheduledInstallment",
    "Student",
]
