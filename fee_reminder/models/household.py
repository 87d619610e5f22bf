"""Household and student models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Household:
    """Parent or guardian paying the fees."""

    household_id: str
    first_name: str
    last_name: str
    email: str = ""
    phone: str = ""
    created_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass
class Student:
    """Enrolled student, attached to exactly one household."""

    student_id: str
    household_id: str
    first_name: str
    last_name: str
    class_label: str  # e.g. "CM2", "6e"
    created_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
