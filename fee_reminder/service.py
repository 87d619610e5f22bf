"""Reminder service wiring the store, ledger, engine and journal together."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Callable

from fee_reminder.aggregator import LedgerStats, compute_stats
from fee_reminder.composer import MessageComposer
from fee_reminder.config import FeeReminderConfig, MessageConfig, ReminderRules
from fee_reminder.delivery.base import Sender, SimulatedSender
from fee_reminder.delivery.console import ConsoleSender
from fee_reminder.engine import ProcessReport, ReminderEngine
from fee_reminder.journal import ReminderJournal
from fee_reminder.ledger import Ledger
from fee_reminder.models import ReminderRecord
from fee_reminder.store.kv import InMemoryKeyValueStore, JsonFileKeyValueStore
from fee_reminder.store.school import SchoolDataStore

logger = logging.getLogger(__name__)


class ReminderService:
    """Entry point for callers (scheduler, CLI, web layer).

    The stored rules are read on every run and passed to the engine
    explicitly.
    """

    def __init__(
        self,
        store: SchoolDataStore | None = None,
        sender: Sender | None = None,
        message_config: MessageConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store or SchoolDataStore()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.ledger = Ledger(self.store, clock=self.clock)
        self.sender: Sender = sender or SimulatedSender()
        self.journal = ReminderJournal(self.store)
        self.engine = ReminderEngine(
            self.store,
            journal=self.journal,
            composer=MessageComposer(message_config),
            sender=self.sender,
            clock=self.clock,
        )

    @classmethod
    def from_config(cls, config: FeeReminderConfig) -> "ReminderService":
        """Build a service with the configured backend and sender."""
        if config.storage.backend == "memory":
            backend = InMemoryKeyValueStore()
        else:
            backend = JsonFileKeyValueStore(config.storage.path)

        sender: Sender
        if config.sender == "kafka":
            from fee_reminder.delivery.kafka import KafkaSender

            sender = KafkaSender(config.kafka)
        elif config.sender == "console":
            sender = ConsoleSender()
        else:
            sender = SimulatedSender()

        return cls(SchoolDataStore(backend), sender=sender, message_config=config.message)

    def process_reminders(self, today: date | None = None) -> ProcessReport:
        today = today or self.clock().date()
        return self.engine.process_reminders(today, self.store.get_rules())

    def stats(self, today: date | None = None) -> LedgerStats:
        return compute_stats(self.store, today or self.clock().date())

    def journal_records(self, limit: int | None = None) -> list[ReminderRecord]:
        return self.journal.records(limit)

    def rules(self) -> ReminderRules:
        return self.store.get_rules()

    def update_rules(self, rules: ReminderRules) -> ReminderRules:
        return self.store.save_rules(rules)

    def close(self) -> None:
        """Flush and close the sender. Call once the service is no longer used."""
        self.sender.close()
