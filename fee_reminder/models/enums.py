"""Enumeration types for fee ledger and reminder entities."""

from enum import Enum


class InstallmentStatus(str, Enum):
    """Stored installment status. Overdue is derived, never stored."""

    PENDING = "pending"
    PAID = "paid"


class InstallmentState(str, Enum):
    """Installment status as seen on a given day."""

    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"


class ReminderLevel(str, Enum):
    """Escalation levels, in classification priority order."""

    PREVENTIVE = "preventive"
    DUE_DAY = "due_day"
    OVERDUE_LEVEL_1 = "overdue_level_1"
    OVERDUE_LEVEL_2 = "overdue_level_2"


class ChannelKind(str, Enum):
    EMAIL = "email"
    SMS = "sms"


class DeliveryStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
