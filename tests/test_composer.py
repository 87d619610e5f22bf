"""Tests for reminder message rendering."""

from datetime import date
from decimal import Decimal

import pytest

from fee_reminder.composer import MessageComposer
from fee_reminder.config import MessageConfig
from fee_reminder.exceptions import ConfigurationError
from fee_reminder.models import ChannelKind, Household, Installment, ReminderLevel, Student


@pytest.fixture
def installment() -> Installment:
    return Installment(installment_id="inst-1", due_date=date(2025, 9, 1), amount=Decimal("1234.5"))


@pytest.fixture
def composer() -> MessageComposer:
    return MessageComposer()


class TestFormatting:
    """Locale-dependent date and amount formatting."""

    def test_french_defaults(self, composer: MessageComposer) -> None:
        assert composer.format_date(date(2025, 9, 1)) == "01/09/2025"
        assert composer.format_amount(Decimal("1234.5")) == "1 234,50 €"
        assert composer.format_amount(Decimal("100")) == "100,00 €"

    def test_us_english(self) -> None:
        composer = MessageComposer(MessageConfig(locale="en_US", currency="$"))

        assert composer.format_date(date(2025, 9, 1)) == "09/01/2025"
        assert composer.format_amount(Decimal("1234.5")) == "$1,234.50"

    def test_unsupported_locale(self) -> None:
        with pytest.raises(ConfigurationError, match="de_DE"):
            MessageComposer(MessageConfig(locale="de_DE"))


class TestCompose:
    """Tests for MessageComposer.compose."""

    def test_golden_preventive_french(
        self, composer: MessageComposer, installment: Installment, household: Household, student: Student
    ) -> None:
        message = composer.compose(ReminderLevel.PREVENTIVE, installment, household, student)

        assert message.email_subject == "Rappel : échéance de paiement à venir"
        assert message.email_body == (
            "Bonjour Marie Dupont,\n\n"
            "Ceci est un rappel amical concernant le paiement des frais scolaires de "
            "Lucas Dupont (CM2).\n\n"
            "Échéance à venir : 01/09/2025\n"
            "Montant : 1 234,50 €\n\n"
            "Merci de bien vouloir effectuer ce paiement avant la date d'échéance.\n\n"
            "Cordialement,\nL'administration"
        )
        assert message.sms_body == "Rappel : frais Lucas Dupont - échéance 01/09/2025 - 1 234,50 €"

    @pytest.mark.parametrize(
        "level, subject_marker, sms_marker",
        [
            (ReminderLevel.PREVENTIVE, "à venir", "Rappel"),
            (ReminderLevel.DUE_DAY, "aujourd'hui", "AUJOURD'HUI"),
            (ReminderLevel.OVERDUE_LEVEL_1, "en retard", "RETARD"),
            (ReminderLevel.OVERDUE_LEVEL_2, "Avertissement", "URGENT"),
        ],
    )
    def test_each_level_has_its_tone(
        self,
        composer: MessageComposer,
        installment: Installment,
        household: Household,
        student: Student,
        level: ReminderLevel,
        subject_marker: str,
        sms_marker: str,
    ) -> None:
        message = composer.compose(level, installment, household, student)

        assert subject_marker in message.email_subject
        assert message.sms_body.startswith(sms_marker)
        assert "1 234,50 €" in message.email_body

    def test_all_levels_distinct(
        self, composer: MessageComposer, installment: Installment, household: Household, student: Student
    ) -> None:
        messages = [composer.compose(level, installment, household, student) for level in ReminderLevel]

        assert len({m.email_subject for m in messages}) == 4
        assert len({m.email_body for m in messages}) == 4
        assert len({m.sms_body for m in messages}) == 4

    def test_deterministic(
        self, composer: MessageComposer, installment: Installment, household: Household, student: Student
    ) -> None:
        first = composer.compose(ReminderLevel.DUE_DAY, installment, household, student)
        second = MessageComposer().compose(ReminderLevel.DUE_DAY, installment, household, student)

        assert first == second

    def test_english_urgent_warning(self, installment: Installment, household: Household, student: Student) -> None:
        composer = MessageComposer(MessageConfig(locale="en_GB", currency="£", signature="The Bursar"))
        message = composer.compose(ReminderLevel.OVERDUE_LEVEL_2, installment, household, student)

        assert message.email_subject == "Warning: overdue fee payment"
        assert message.sms_body == "URGENT: fees for Lucas Dupont - £1,234.50 overdue since 01/09/2025"
        assert message.email_body.endswith("Kind regards,\nThe Bursar")


class TestDrafts:
    """Channel selection from household contacts."""

    def test_email_and_sms(
        self, composer: MessageComposer, installment: Installment, household: Household, student: Student
    ) -> None:
        drafts = composer.drafts(ReminderLevel.DUE_DAY, installment, household, student)

        assert [d.channel for d in drafts] == [ChannelKind.EMAIL, ChannelKind.SMS]
        assert drafts[0].recipient == "marie.dupont@example.fr"
        assert drafts[0].subject == "Rappel : échéance de paiement aujourd'hui"
        assert drafts[1].recipient == "+33612345678"
        assert drafts[1].subject is None

    def test_phone_only(
        self, composer: MessageComposer, installment: Installment, household: Household, student: Student
    ) -> None:
        household.email = ""
        drafts = composer.drafts(ReminderLevel.DUE_DAY, installment, household, student)

        assert [d.channel for d in drafts] == [ChannelKind.SMS]

    def test_no_contact(
        self, composer: MessageComposer, installment: Installment, household: Household, student: Student
    ) -> None:
        household.email = "   "
        household.phone = ""

        assert composer.drafts(ReminderLevel.DUE_DAY, installment, household, student) == []
