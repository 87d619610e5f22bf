"""Conversion between entities and JSON-compatible documents."""

from dataclasses import fields
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from fee_reminder.exceptions import InternalError
from fee_reminder.models import (
    ChannelAttempt,
    ChannelKind,
    DeliveryStatus,
    FeePlan,
    Household,
    Installment,
    InstallmentStatus,
    ReminderLevel,
    ReminderRecord,
    Student,
)


def to_dict(obj: Any) -> dict:
    """Convert dataclass without deep copy, serializing nested values."""
    return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif hasattr(value, "__dataclass_fields__"):
        return to_dict(value)
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


def _datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def household_from_dict(data: dict) -> Household:
    return Household(
        household_id=data["household_id"],
        first_name=data["first_name"],
        last_name=data["last_name"],
        email=data.get("email") or "",
        phone=data.get("phone") or "",
        created_at=_datetime(data.get("created_at")),
    )


def student_from_dict(data: dict) -> Student:
    return Student(
        student_id=data["student_id"],
        household_id=data["household_id"],
        first_name=data["first_name"],
        last_name=data["last_name"],
        class_label=data["class_label"],
        created_at=_datetime(data.get("created_at")),
    )


def installment_from_dict(data: dict) -> Installment:
    return Installment(
        installment_id=data["installment_id"],
        due_date=date.fromisoformat(data["due_date"]),
        amount=Decimal(data["amount"]),
        status=InstallmentStatus(data["status"]),
        paid_at=_datetime(data.get("paid_at")),
    )


def fee_plan_from_dict(data: dict) -> FeePlan:
    return FeePlan(
        fee_plan_id=data["fee_plan_id"],
        student_id=data["student_id"],
        school_year=data["school_year"],
        total_amount=Decimal(data["total_amount"]),
        amount_paid=Decimal(data["amount_paid"]),
        installments=[installment_from_dict(i) for i in data["installments"]],
        created_at=_datetime(data.get("created_at")),
        updated_at=_datetime(data.get("updated_at")),
    )


def reminder_from_dict(data: dict) -> ReminderRecord:
    return ReminderRecord(
        reminder_id=data["reminder_id"],
        fee_plan_id=data["fee_plan_id"],
        installment_id=data["installment_id"],
        student_id=data["student_id"],
        household_id=data["household_id"],
        level=ReminderLevel(data["level"]),
        issued_on=date.fromisoformat(data["issued_on"]),
        issued_at=datetime.fromisoformat(data["issued_at"]),
        attempts=tuple(
            ChannelAttempt(
                channel=ChannelKind(a["channel"]),
                recipient=a["recipient"],
                body=a["body"],
                status=DeliveryStatus(a["status"]),
                subject=a.get("subject"),
            )
            for a in data.get("attempts", [])
        ),
    )


def decode(kind: str, data: dict) -> Any:
    """Decode a stored document, reporting corrupt documents as storage failures."""
    decoder = _DECODERS[kind]
    try:
        return decoder(data)
    except (KeyError, TypeError, ValueError, InvalidOperation) as e:
        raise InternalError(f"Corrupt {kind} document: {e}") from e


_DECODERS = {
    "household": household_from_dict,
    "student": student_from_dict,
    "fee_plan": fee_plan_from_dict,
    "reminder": reminder_from_dict,
}
