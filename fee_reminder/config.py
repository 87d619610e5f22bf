"""Configuration management for fee-reminder."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fee_reminder.exceptions import ConfigurationError
from fee_reminder.models.enums import ReminderLevel


@dataclass(frozen=True)
class ReminderRules:
    """Day offsets defining the escalation schedule.

    Offsets are days relative to the due date: ``preventive`` is before it
    (negative), the two overdue levels after it (positive). A level fires on
    the day ``today - due_date`` equals its offset.
    """

    preventive: int = -10
    due_day: int = 0
    overdue_level_1: int = 3
    overdue_level_2: int = 7

    def validate(self) -> "ReminderRules":
        """Check thresholds are well formed.

        Monotonic thresholds are necessarily distinct, so at most one level
        can match a given installment on a given day.

        Raises
        ------
        ConfigurationError
            If any threshold has the wrong sign or the overdue levels are
            not strictly increasing.
        """
        for name in ("preventive", "due_day", "overdue_level_1", "overdue_level_2"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")

        if self.preventive >= 0:
            raise ConfigurationError(
                f"preventive must be negative (days before due date), got {self.preventive}"
            )
        if self.due_day != 0:
            raise ConfigurationError(f"due_day must be 0, got {self.due_day}")
        if self.overdue_level_1 <= 0:
            raise ConfigurationError(
                f"overdue_level_1 must be positive, got {self.overdue_level_1}"
            )
        if self.overdue_level_2 <= self.overdue_level_1:
            raise ConfigurationError(
                "overdue_level_2 must exceed overdue_level_1, "
                f"got {self.overdue_level_2} <= {self.overdue_level_1}"
            )
        return self

    def offsets(self) -> list[tuple[ReminderLevel, int]]:
        """Day offset from the due date per level, in priority order."""
        return [
            (ReminderLevel.PREVENTIVE, self.preventive),
            (ReminderLevel.DUE_DAY, self.due_day),
            (ReminderLevel.OVERDUE_LEVEL_1, self.overdue_level_1),
            (ReminderLevel.OVERDUE_LEVEL_2, self.overdue_level_2),
        ]

    def to_dict(self) -> dict[str, int]:
        return {
            "preventive": self.preventive,
            "due_day": self.due_day,
            "overdue_level_1": self.overdue_level_1,
            "overdue_level_2": self.overdue_level_2,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReminderRules":
        """Build rules from a stored mapping, falling back to defaults per key."""
        defaults = cls()
        values = {}
        for name in ("preventive", "due_day", "overdue_level_1", "overdue_level_2"):
            raw = data.get(name, getattr(defaults, name))
            if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
                raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
            try:
                values[name] = int(raw)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
        return cls(**values)


@dataclass
class KafkaConfig:
    """Kafka producer configuration for the Kafka sender."""

    bootstrap_servers: str = "localhost:9092"
    topic: str = "school.fee-reminders"
    acks: str = "all"
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class StorageConfig:
    """Persistence backend configuration."""

    backend: str = "json"  # "json" or "memory"
    path: Path = field(default_factory=lambda: Path("fee_reminder_data.json"))


@dataclass
class MessageConfig:
    """Rendering options for reminder messages."""

    locale: str = "fr_FR"
    currency: str = "€"
    signature: str = "L'administration"


@dataclass
class FeeReminderConfig:
    """Main configuration for fee-reminder."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    message: MessageConfig = field(default_factory=MessageConfig)
    sender: str = "simulated"  # "simulated", "console" or "kafka"
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "FeeReminderConfig":
        """Create config from environment variables."""
        import os

        backend = os.getenv("FEE_REMINDER_STORE", "json")
        if backend not in ("json", "memory"):
            raise ConfigurationError(f"FEE_REMINDER_STORE must be 'json' or 'memory', got {backend!r}")

        sender = os.getenv("FEE_REMINDER_SENDER", "simulated")
        if sender not in ("simulated", "console", "kafka"):
            raise ConfigurationError(
                f"FEE_REMINDER_SENDER must be 'simulated', 'console' or 'kafka', got {sender!r}"
            )

        storage = StorageConfig(
            backend=backend,
            path=Path(os.getenv("FEE_REMINDER_STORE_PATH", "fee_reminder_data.json")),
        )

        linger = os.getenv("KAFKA_LINGER_MS", "5")
        try:
            linger_ms = int(linger)
        except ValueError as e:
            raise ConfigurationError(f"KAFKA_LINGER_MS must be an integer, got {linger!r}") from e

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            topic=os.getenv("KAFKA_TOPIC", "school.fee-reminders"),
            acks=os.getenv("KAFKA_ACKS", "all"),
            linger_ms=linger_ms,
        )

        message = MessageConfig(
            locale=os.getenv("FEE_REMINDER_LOCALE", "fr_FR"),
            currency=os.getenv("FEE_REMINDER_CURRENCY", "€"),
            signature=os.getenv("FEE_REMINDER_SIGNATURE", "L'administration"),
        )

        return cls(
            storage=storage,
            kafka=kafka,
            message=message,
            sender=sender,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
