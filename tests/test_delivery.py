"""Tests for senders."""

import json
from unittest.mock import MagicMock, patch

import pytest

from fee_reminder.delivery import ConsoleSender, SimulatedSender
from fee_reminder.models import ChannelDraft, ChannelKind, DeliveryStatus


@pytest.fixture
def email_draft() -> ChannelDraft:
    return ChannelDraft(
        channel=ChannelKind.EMAIL,
        recipient="marie.dupont@example.fr",
        subject="Rappel : paiement en retard",
        body="Bonjour Marie Dupont,",
    )


@pytest.fixture
def sms_draft() -> ChannelDraft:
    return ChannelDraft(channel=ChannelKind.SMS, recipient="+33612345678", body="RETARD : frais")


class TestSimulatedSender:
    """Tests for SimulatedSender."""

    def test_reports_sent_and_keeps_drafts(self, email_draft: ChannelDraft, sms_draft: ChannelDraft) -> None:
        sender = SimulatedSender()

        assert sender.deliver(email_draft) == DeliveryStatus.SENT
        assert sender.deliver(sms_draft) == DeliveryStatus.SENT
        assert sender.delivered == [email_draft, sms_draft]


class TestConsoleSender:
    """Tests for ConsoleSender."""

    def test_prints_email(self, capsys, email_draft: ChannelDraft) -> None:
        sender = ConsoleSender()

        assert sender.deliver(email_draft) == DeliveryStatus.SENT

        out = capsys.readouterr().out
        assert "EMAIL -> marie.dupont@example.fr" in out
        assert "Subject: Rappel : paiement en retard" in out
        assert "Bonjour Marie Dupont," in out

    def test_sms_has_no_subject_line(self, capsys, sms_draft: ChannelDraft) -> None:
        ConsoleSender().deliver(sms_draft)

        out = capsys.readouterr().out
        assert "SMS -> +33612345678" in out
        assert "Subject:" not in out

    def test_hide_body(self, capsys, email_draft: ChannelDraft) -> None:
        ConsoleSender(show_body=False).deliver(email_draft)

        assert "Bonjour" not in capsys.readouterr().out

    def test_close_prints_summary(self, capsys, email_draft: ChannelDraft, sms_draft: ChannelDraft) -> None:
        sender = ConsoleSender(show_body=False)
        sender.deliver(email_draft)
        sender.deliver(email_draft)
        sender.deliver(sms_draft)
        capsys.readouterr()

        sender.close()

        out = capsys.readouterr().out
        assert "Console Sender Summary" in out
        assert "email: 2 messages" in out
        assert "sms: 1 messages" in out


class TestKafkaSenderMocked:
    """Tests for KafkaSender with a mocked producer."""

    def test_producer_stats_success_rate(self) -> None:
        from fee_reminder.delivery.kafka import ProducerStats

        assert ProducerStats().success_rate == 0.0
        assert ProducerStats(sent=4, delivered=3, failed=1).success_rate == 0.75

    @patch("fee_reminder.delivery.kafka.Producer")
    def test_init_with_string(self, mock_producer_class: MagicMock) -> None:
        from fee_reminder.delivery.kafka import KafkaSender

        sender = KafkaSender("kafka:9092")

        assert sender.config.bootstrap_servers == "kafka:9092"
        assert sender.config.topic == "school.fee-reminders"
        config = mock_producer_class.call_args[0][0]
        assert config["bootstrap.servers"] == "kafka:9092"
        assert "topic" not in config

    @patch("fee_reminder.delivery.kafka.Producer")
    def test_deliver_produces_json(self, mock_producer_class: MagicMock, email_draft: ChannelDraft) -> None:
        from fee_reminder.config import KafkaConfig
        from fee_reminder.delivery.kafka import KafkaSender

        mock_producer = MagicMock()
        mock_producer_class.return_value = mock_producer

        sender = KafkaSender(KafkaConfig(topic="reminders"))
        status = sender.deliver(email_draft)

        assert status == DeliveryStatus.SENT
        assert sender.stats.sent == 1
        kwargs = mock_producer.produce.call_args[1]
        assert kwargs["topic"] == "reminders"
        assert kwargs["key"] == b"marie.dupont@example.fr"
        assert json.loads(kwargs["value"].decode("utf-8")) == {
            "channel": "email",
            "recipient": "marie.dupont@example.fr",
            "subject": "Rappel : paiement en retard",
            "body": "Bonjour Marie Dupont,",
        }
        mock_producer.poll.assert_called_once_with(0)

    @patch("fee_reminder.delivery.kafka.Producer")
    def test_full_queue_reports_failure(self, mock_producer_class: MagicMock, sms_draft: ChannelDraft) -> None:
        from fee_reminder.delivery.kafka import KafkaSender

        mock_producer = MagicMock()
        mock_producer.produce.side_effect = BufferError("queue full")
        mock_producer_class.return_value = mock_producer

        sender = KafkaSender("localhost:9092")

        assert sender.deliver(sms_draft) == DeliveryStatus.FAILED
        assert sender.stats.sent == 0

    @patch("fee_reminder.delivery.kafka.Producer")
    def test_delivery_callback(self, mock_producer_class: MagicMock) -> None:
        from fee_reminder.delivery.kafka import KafkaSender

        sender = KafkaSender("localhost:9092")
        mock_msg = MagicMock()
        mock_msg.topic.return_value = "school.fee-reminders"
        mock_msg.partition.return_value = 0
        mock_msg.offset.return_value = 7

        sender._delivery_callback(None, mock_msg)
        sender._delivery_callback("Broker unavailable", None)

        assert sender.stats.delivered == 1
        assert sender.stats.failed == 1

    @patch("fee_reminder.delivery.kafka.Producer")
    def test_close_flushes(self, mock_producer_class: MagicMock) -> None:
        from fee_reminder.delivery.kafka import KafkaSender

        mock_producer = MagicMock()
        mock_producer_class.return_value = mock_producer

        KafkaSender("localhost:9092").close()

        mock_producer.flush.assert_called_once_with(30.0)
