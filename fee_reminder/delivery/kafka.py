"""Kafka sender publishing rendered reminders to a topic."""

import json
import logging
from dataclasses import dataclass
from typing import Any

from confluent_kafka import KafkaException, Producer

from fee_reminder.config import KafkaConfig
from fee_reminder.models import ChannelDraft, DeliveryStatus

logger = logging.getLogger(__name__)


@dataclass
class ProducerStats:
    """Track producer delivery statistics."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        total = self.delivered + self.failed
        return self.delivered / total if total > 0 else 0.0


class KafkaSender:
    """Hand each message to a downstream email/SMS gateway through Kafka.

    A message counts as sent once the producer has queued it; broker
    delivery reports only feed ``stats``.
    """

    def __init__(self, config: KafkaConfig | str) -> None:
        """Initialize Kafka sender.

        Parameters
        ----------
        config : KafkaConfig | str
            Producer configuration or bootstrap servers string.
        """
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)

        self.config = config
        self.producer = Producer(config.to_dict())
        self.stats = ProducerStats()

    def _delivery_callback(self, err: Any, msg: Any) -> None:
        """Handle delivery reports."""
        if err:
            self.stats.failed += 1
            logger.error("Delivery failed: %s", err)
        else:
            self.stats.delivered += 1
            logger.debug("Delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    def deliver(self, draft: ChannelDraft) -> DeliveryStatus:
        payload = {
            "channel": draft.channel.value,
            "recipient": draft.recipient,
            "subject": draft.subject,
            "body": draft.body,
        }
        try:
            self.producer.produce(
                topic=self.config.topic,
                key=draft.recipient.encode("utf-8"),
                value=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
                callback=self._delivery_callback,
            )
        except (KafkaException, BufferError) as e:
            logger.error("Could not queue %s to %s: %s", draft.channel.value, draft.recipient, e)
            return DeliveryStatus.FAILED

        self.stats.sent += 1
        self.producer.poll(0)
        return DeliveryStatus.SENT

    def flush(self, timeout: float = 30.0) -> None:
        """Flush pending messages."""
        self.producer.flush(timeout)

    def close(self) -> None:
        """Flush and close the producer."""
        self.flush()
        logger.info(
            "Kafka sender closed: sent=%d, delivered=%d, failed=%d",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
        )
