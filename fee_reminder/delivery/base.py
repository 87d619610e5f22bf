"""Sender interface and the simulated sender."""

from typing import Protocol

from fee_reminder.models import ChannelDraft, DeliveryStatus


class Sender(Protocol):
    """Delivery collaborator: transmits one rendered message."""

    def deliver(self, draft: ChannelDraft) -> DeliveryStatus: ...

    def close(self) -> None:
        """Hand off anything still buffered. Called once, after the last delivery."""
        ...


class SimulatedSender:
    """Reference sender: transmits nothing and reports every message as sent."""

    def __init__(self) -> None:
        self.delivered: list[ChannelDraft] = []

    def deliver(self, draft: ChannelDraft) -> DeliveryStatus:
        self.delivered.append(draft)
        return DeliveryStatus.SENT

    def close(self) -> None:
        pass
