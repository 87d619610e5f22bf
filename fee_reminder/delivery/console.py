"""Console sender for debugging and development."""

from fee_reminder.models import ChannelDraft, ChannelKind, DeliveryStatus


class ConsoleSender:
    """Print reminder messages to stdout instead of sending them."""

    def __init__(self, show_body: bool = True) -> None:
        """Initialize console sender.

        Parameters
        ----------
        show_body : bool
            Print the full message body, not only the header line.
        """
        self.show_body = show_body
        self._counts: dict[str, int] = {}

    def deliver(self, draft: ChannelDraft) -> DeliveryStatus:
        print(f"\n{'=' * 60}")
        print(f"{draft.channel.value.upper()} -> {draft.recipient}")
        if draft.channel == ChannelKind.EMAIL and draft.subject:
            print(f"Subject: {draft.subject}")
        print("=" * 60)
        if self.show_body:
            print(draft.body)

        self._counts[draft.channel.value] = self._counts.get(draft.channel.value, 0) + 1
        return DeliveryStatus.SENT

    def close(self) -> None:
        """Print summary."""
        print(f"\n{'=' * 60}")
        print("Console Sender Summary")
        print("=" * 60)
        for channel, count in self._counts.items():
            print(f"  {channel}: {count} messages")
