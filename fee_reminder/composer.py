"""Rendering of reminder messages per escalation level.

Four tones, one per level: a friendly reminder before the due date, a
due-today notice, an overdue notice and an urgent warning. Rendering is pure
and deterministic so the output can be compared against golden strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from fee_reminder.config import MessageConfig
from fee_reminder.exceptions import ConfigurationError
from fee_reminder.models import (
    ChannelDraft,
    ChannelKind,
    Household,
    Installment,
    ReminderLevel,
    Student,
)


@dataclass(frozen=True)
class LocaleFormat:
    """Date and currency conventions for one locale."""

    date_format: str
    decimal_sep: str
    thousands_sep: str
    currency_first: bool


LOCALE_FORMATS = {
    "fr_FR": LocaleFormat("%d/%m/%Y", ",", " ", currency_first=False),
    "en_US": LocaleFormat("%m/%d/%Y", ".", ",", currency_first=True),
    "en_GB": LocaleFormat("%d/%m/%Y", ".", ",", currency_first=True),
}


@dataclass(frozen=True)
class ComposedMessage:
    email_subject: str
    email_body: str
    sms_body: str


_FR = {
    ReminderLevel.PREVENTIVE: (
        "Rappel : échéance de paiement à venir",
        "Bonjour {parent},\n\n"
        "Ceci est un rappel amical concernant le paiement des frais scolaires de "
        "{student} ({class_label}).\n\n"
        "Échéance à venir : {due_date}\n"
        "Montant : {amount}\n\n"
        "Merci de bien vouloir effectuer ce paiement avant la date d'échéance.\n\n"
        "Cordialement,\n{signature}",
        "Rappel : frais {student} - échéance {due_date} - {amount}",
    ),
    ReminderLevel.DUE_DAY: (
        "Rappel : échéance de paiement aujourd'hui",
        "Bonjour {parent},\n\n"
        "L'échéance de paiement des frais scolaires de {student} ({class_label}) "
        "est aujourd'hui.\n\n"
        "Date d'échéance : {due_date}\n"
        "Montant : {amount}\n\n"
        "Merci de procéder au paiement dès que possible.\n\n"
        "Cordialement,\n{signature}",
        "AUJOURD'HUI : frais {student} - {amount} à payer",
    ),
    ReminderLevel.OVERDUE_LEVEL_1: (
        "Rappel : paiement en retard",
        "Bonjour {parent},\n\n"
        "Nous constatons que le paiement des frais scolaires de {student} "
        "({class_label}) n'a pas été effectué.\n\n"
        "Date d'échéance dépassée : {due_date}\n"
        "Montant dû : {amount}\n\n"
        "Merci de régulariser cette situation dans les plus brefs délais.\n\n"
        "Cordialement,\n{signature}",
        "RETARD : frais {student} - {amount} - échéance {due_date}",
    ),
    ReminderLevel.OVERDUE_LEVEL_2: (
        "Avertissement : paiement en retard",
        "Bonjour {parent},\n\n"
        "AVERTISSEMENT : le paiement des frais scolaires de {student} ({class_label}) "
        "est toujours en retard.\n\n"
        "Date d'échéance dépassée : {due_date}\n"
        "Montant dû : {amount}\n\n"
        "Merci de procéder au paiement de toute urgence pour éviter toute mesure "
        "complémentaire.\n\n"
        "Cordialement,\n{signature}",
        "URGENT : frais {student} - {amount} en retard depuis le {due_date}",
    ),
}

_EN = {
    ReminderLevel.PREVENTIVE: (
        "Reminder: upcoming fee payment",
        "Dear {parent},\n\n"
        "This is a friendly reminder about the school fees for {student} ({class_label}).\n\n"
        "Upcoming due date: {due_date}\n"
        "Amount: {amount}\n\n"
        "Please make this payment before the due date.\n\n"
        "Kind regards,\n{signature}",
        "Reminder: fees for {student} - due {due_date} - {amount}",
    ),
    ReminderLevel.DUE_DAY: (
        "Reminder: fee payment due today",
        "Dear {parent},\n\n"
        "The school fee payment for {student} ({class_label}) is due today.\n\n"
        "Due date: {due_date}\n"
        "Amount: {amount}\n\n"
        "Please make the payment as soon as possible.\n\n"
        "Kind regards,\n{signature}",
        "TODAY: fees for {student} - {amount} due",
    ),
    ReminderLevel.OVERDUE_LEVEL_1: (
        "Reminder: overdue fee payment",
        "Dear {parent},\n\n"
        "Our records show that the school fees for {student} ({class_label}) "
        "have not been paid.\n\n"
        "Missed due date: {due_date}\n"
        "Amount owed: {amount}\n\n"
        "Please settle this payment as soon as possible.\n\n"
        "Kind regards,\n{signature}",
        "OVERDUE: fees for {student} - {amount} - due {due_date}",
    ),
    ReminderLevel.OVERDUE_LEVEL_2: (
        "Warning: overdue fee payment",
        "Dear {parent},\n\n"
        "WARNING: the school fee payment for {student} ({class_label}) is still "
        "overdue.\n\n"
        "Missed due date: {due_date}\n"
        "Amount owed: {amount}\n\n"
        "Please pay urgently to avoid further action.\n\n"
        "Kind regards,\n{signature}",
        "URGENT: fees for {student} - {amount} overdue since {due_date}",
    ),
}

TEMPLATES = {"fr_FR": _FR, "en_US": _EN, "en_GB": _EN}


class MessageComposer:
    """Render reminder content for a locale."""

    def __init__(self, config: MessageConfig | None = None) -> None:
        self.config = config or MessageConfig()
        if self.config.locale not in TEMPLATES:
            raise ConfigurationError(
                f"Unsupported locale {self.config.locale!r}, expected one of {sorted(TEMPLATES)}"
            )
        self._format = LOCALE_FORMATS[self.config.locale]
        self._templates = TEMPLATES[self.config.locale]

    def format_date(self, value: date) -> str:
        return value.strftime(self._format.date_format)

    def format_amount(self, amount: Decimal) -> str:
        """Format a currency amount, e.g. ``1 234,50 €`` or ``€1,234.50``."""
        raw = f"{amount:,.2f}"
        number = (
            raw.replace(",", "\0")
            .replace(".", self._format.decimal_sep)
            .replace("\0", self._format.thousands_sep)
        )
        if self._format.currency_first:
            return f"{self.config.currency}{number}"
        return f"{number} {self.config.currency}"

    def compose(
        self,
        level: ReminderLevel,
        installment: Installment,
        household: Household,
        student: Student,
    ) -> ComposedMessage:
        """Render the email subject/body and SMS body for one reminder."""
        subject, body, sms = self._templates[level]
        values = {
            "parent": household.full_name,
            "student": student.full_name,
            "class_label": student.class_label,
            "due_date": self.format_date(installment.due_date),
            "amount": self.format_amount(installment.amount),
            "signature": self.config.signature,
        }
        return ComposedMessage(
            email_subject=subject,
            email_body=body.format(**values),
            sms_body=sms.format(**values),
        )

    def drafts(
        self,
        level: ReminderLevel,
        installment: Installment,
        household: Household,
        student: Student,
    ) -> list[ChannelDraft]:
        """One draft per contact channel the household has, email first."""
        message = self.compose(level, installment, household, student)
        drafts = []
        if household.email and household.email.strip():
            drafts.append(
                ChannelDraft(
                    channel=ChannelKind.EMAIL,
                    recipient=household.email.strip(),
                    subject=message.email_subject,
                    body=message.email_body,
                )
            )
        if household.phone and household.phone.strip():
            drafts.append(
                ChannelDraft(
                    channel=ChannelKind.SMS,
                    recipient=household.phone.strip(),
                    body=message.sms_body,
                )
            )
        return drafts
