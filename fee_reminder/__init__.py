"""Tuition fee ledger and automatic payment reminders."""

__version__ = "0.1.0"
