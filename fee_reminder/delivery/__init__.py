"""Senders consuming rendered reminder messages."""

from fee_reminder.delivery.base import Sender, SimulatedSender
from fee_reminder.delivery.console import ConsoleSender

__all__ = ["ConsoleSender", "Sender", "SimulatedSender"]
